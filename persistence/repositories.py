"""Repository layer for CSV-backed storage."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from persistence.csv_storage import CsvStorage


def new_id() -> str:
    return str(uuid.uuid4())


def _ensure_headers(df: pd.DataFrame, headers: List[str]) -> pd.DataFrame:
    df = df.copy()
    for h in headers:
        if h not in df.columns:
            df[h] = pd.Series(dtype="object")
    return df[headers]


@dataclass
class BaseRepo:
    storage: CsvStorage
    file_name: str
    headers: List[str]
    id_column: str

    def _path(self) -> Path:
        return self.storage.base_dir / self.file_name

    def list(self, **filters: Any) -> pd.DataFrame:
        df = self.storage.read_csv(self.file_name)
        df = _ensure_headers(df, self.headers)
        for k, v in filters.items():
            if k in df.columns:
                df = df[df[k].astype(str) == str(v)]
        return df.reset_index(drop=True)

    def get(self, entity_id: str) -> Optional[Dict[str, Any]]:
        df = self.list()
        hit = df[df[self.id_column].astype(str) == str(entity_id)]
        if hit.empty:
            return None
        return hit.iloc[0].to_dict()

    def create(self, row: Dict[str, Any]) -> str:
        row = dict(row)
        if not row.get(self.id_column):
            row[self.id_column] = new_id()
        df = _ensure_headers(pd.DataFrame([row]), self.headers)
        self.storage.append_row(self.file_name, df.iloc[0].to_dict(), self.headers)
        return str(row[self.id_column])

    def update(self, entity_id: str, updates: Dict[str, Any]) -> None:
        row = {self.id_column: entity_id}
        row.update(updates)
        self.storage.upsert(self.file_name, [self.id_column], row)

    def delete(self, entity_id: str) -> bool:
        return self.storage.delete_rows(self.file_name, self.id_column, entity_id) > 0


class PacingConfigsRepo(BaseRepo):
    """Named pacing inputs (never computed results), one row per name."""

    def __init__(self, storage: CsvStorage):
        super().__init__(
            storage,
            "pacing_configs.csv",
            [
                "configId",
                "name",
                "createdAt",
                "updatedAt",
                "targetTime",
                "profile",
                "caution",
                "checkpointsJson",
                "restCount",
                "restMinutesEach",
                "resampleStepM",
                "smoothingWindow",
            ],
            id_column="configId",
        )

    def find_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        df = self.list()
        hit = df[df["name"].astype(str) == str(name)]
        if hit.empty:
            return None
        return hit.iloc[0].to_dict()
