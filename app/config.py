"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class CSVImportSettings:
    """
    Runtime limits for CSV import and export.
    """

    max_columns: int = 50
    max_cell_length: int = 1000
    max_rows: int = 1000
    preview_rows: int = 5
    max_file_bytes: int = 5 * 1024 * 1024
    max_reported_errors: int = 10
    log_validation_errors: bool = True


@lru_cache(maxsize=1)
def get_csv_import_settings() -> CSVImportSettings:
    """
    Return cached CSV import settings from environment variables.
    """

    return CSVImportSettings(
        max_columns=max(1, _get_int_env("CSV_IMPORT_MAX_COLUMNS", 50)),
        max_cell_length=max(1, _get_int_env("CSV_IMPORT_MAX_CELL_LENGTH", 1000)),
        max_rows=max(1, _get_int_env("CSV_IMPORT_MAX_ROWS", 1000)),
        preview_rows=max(1, _get_int_env("CSV_IMPORT_PREVIEW_ROWS", 5)),
        max_file_bytes=max(1, _get_int_env("CSV_IMPORT_MAX_FILE_BYTES", 5 * 1024 * 1024)),
        max_reported_errors=max(1, _get_int_env("CSV_IMPORT_MAX_REPORTED_ERRORS", 10)),
        log_validation_errors=_get_bool_env("CSV_IMPORT_LOG_VALIDATION_ERRORS", True),
    )

