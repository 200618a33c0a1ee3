"""
CSV storage abstraction using pandas with basic file locking.

Notes:
- Always write CSV with '.' decimal; UI formatting uses FR locale separately.
- Ensure headers exist for empty file creation.
- Values are read back as strings (dtype=str); the repositories own the
  conversion to Python types.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

import pandas as pd
from pandas.errors import EmptyDataError
import portalocker

LOCK_TIMEOUT_SEC = 10


@dataclass
class CsvStorage:
    base_dir: Path

    def _path(self, relative: str | Path) -> Path:
        p = self.base_dir / Path(relative)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p

    def read_csv(self, relative: str | Path) -> pd.DataFrame:
        path = self._path(relative)
        if not path.exists():
            return pd.DataFrame()
        with portalocker.Lock(
            str(path), mode="r", timeout=LOCK_TIMEOUT_SEC, flags=portalocker.LOCK_SH | portalocker.LOCK_NB
        ):
            try:
                return pd.read_csv(path, dtype=str, keep_default_na=False)
            except EmptyDataError:
                return pd.DataFrame()

    def write_csv(self, relative: str | Path, df: pd.DataFrame) -> None:
        path = self._path(relative)
        # Serialize first, then write under exclusive lock
        csv_buf = io.StringIO()
        df.to_csv(csv_buf, index=False)
        data = csv_buf.getvalue()
        with portalocker.Lock(
            str(path), mode="a", timeout=LOCK_TIMEOUT_SEC, flags=portalocker.LOCK_EX | portalocker.LOCK_NB
        ):
            path.write_text(data, encoding="utf-8")

    def append_row(
        self, relative: str | Path, row: Dict[str, object], columns: Iterable[str]
    ) -> None:
        path = self._path(relative)
        with portalocker.Lock(
            str(path), mode="a", timeout=LOCK_TIMEOUT_SEC, flags=portalocker.LOCK_EX | portalocker.LOCK_NB
        ):
            empty = path.stat().st_size == 0
            df = pd.DataFrame([row], columns=list(columns))
            if not empty:
                df.to_csv(path, mode="a", index=False, header=False)
            else:
                df.to_csv(path, index=False, header=True)

    def upsert(self, relative: str | Path, key_cols: List[str], row: Dict[str, object]) -> None:
        df = self.read_csv(relative)
        if df.empty:
            self.write_csv(relative, pd.DataFrame([row]))
            return
        mask = pd.Series([True] * len(df), index=df.index)
        for key in key_cols:
            mask &= df[key].astype(str) == str(row[key])
        if mask.any():
            # Update first match
            idx = df.index[mask][0]
            for k, v in row.items():
                if k not in df.columns:
                    df[k] = ""
                df.at[idx, k] = "" if v is None else str(v)
        else:
            for k in row.keys():
                if k not in df.columns:
                    df[k] = ""
            df = pd.concat([df, pd.DataFrame([row])], ignore_index=True)
        self.write_csv(relative, df)

    def delete_rows(self, relative: str | Path, key_col: str, value: object) -> int:
        """Remove rows whose key column equals value; returns the removed count."""
        df = self.read_csv(relative)
        if df.empty or key_col not in df.columns:
            return 0
        keep = df[key_col].astype(str) != str(value)
        removed = int((~keep).sum())
        if removed:
            self.write_csv(relative, df[keep].reset_index(drop=True))
        return removed
