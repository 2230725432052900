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


def _get_optional_float_env(name: str) -> float | None:
    """
    Read an optional positive float; unset, invalid or non-positive means None.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return None
    try:
        value = float(raw_value)
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass(frozen=True)
class BulkImportSettings:
    """
    Runtime settings for CSV / XLSX bulk imports.
    """

    batch_size: int = 50
    failure_preview_limit: int = 10
    preview_row_limit: int = 3
    preview_validation_rows: int = 5
    row_timeout_seconds: float | None = None
    max_file_size_bytes: int = 10 * 1024 * 1024
    log_row_errors: bool = True


@lru_cache(maxsize=1)
def get_bulk_import_settings() -> BulkImportSettings:
    """
    Return cached bulk import settings from environment variables.
    """

    return BulkImportSettings(
        batch_size=max(1, _get_int_env("BULK_IMPORT_BATCH_SIZE", 50)),
        failure_preview_limit=max(1, _get_int_env("BULK_IMPORT_FAILURE_PREVIEW_LIMIT", 10)),
        preview_row_limit=max(1, _get_int_env("BULK_IMPORT_PREVIEW_ROWS", 3)),
        preview_validation_rows=max(1, _get_int_env("BULK_IMPORT_PREVIEW_VALIDATION_ROWS", 5)),
        row_timeout_seconds=_get_optional_float_env("BULK_IMPORT_ROW_TIMEOUT_SECONDS"),
        max_file_size_bytes=max(1, _get_int_env("BULK_IMPORT_MAX_FILE_SIZE_BYTES", 10 * 1024 * 1024)),
        log_row_errors=_get_bool_env("BULK_IMPORT_LOG_ROW_ERRORS", True),
    )
