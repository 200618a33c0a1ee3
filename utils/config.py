"""
Configuration loading utilities.

Loads environment variables from `.env`, applies pacing defaults, and ensures
the data directory exists.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv, find_dotenv
from streamlit.logger import get_logger

from config import DEFAULT_RESAMPLE_STEP_M, DEFAULT_SMOOTHING_WINDOW

logger = get_logger(__name__)


@dataclass(frozen=True)
class Config:
    data_dir: Path
    locale: str
    resample_step_m: float
    smoothing_window: int


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def load_config() -> Config:
    """Load configuration from environment and provision directories."""
    load_dotenv(find_dotenv(), override=True)

    data_dir_str = os.getenv("DATA_DIR", "./data")
    data_dir = Path(data_dir_str).expanduser().resolve()

    locale = os.getenv("PACING_LOCALE", "fr_FR")

    step_str = os.getenv("PACING_RESAMPLE_STEP_M", str(DEFAULT_RESAMPLE_STEP_M))
    try:
        resample_step_m = float(step_str)
    except (ValueError, TypeError):
        logger.warning("Invalid PACING_RESAMPLE_STEP_M=%r, using default", step_str)
        resample_step_m = DEFAULT_RESAMPLE_STEP_M

    window_str = os.getenv("PACING_SMOOTHING_WINDOW", str(DEFAULT_SMOOTHING_WINDOW))
    try:
        smoothing_window = int(window_str)
    except (ValueError, TypeError):
        logger.warning("Invalid PACING_SMOOTHING_WINDOW=%r, using default", window_str)
        smoothing_window = DEFAULT_SMOOTHING_WINDOW

    logger.debug("DATA_DIR: %s", data_dir)
    _ensure_dir(data_dir)

    return Config(
        data_dir=data_dir,
        locale=locale,
        resample_step_m=resample_step_m,
        smoothing_window=smoothing_window,
    )
