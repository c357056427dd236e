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
class ImportSettings:
    """
    Runtime settings for spreadsheet imports.
    """

    chunk_size: int = 100
    max_reported_errors: int = 10
    header_scan_rows: int = 10
    log_row_errors: bool = True


@dataclass(frozen=True)
class UploadSettings:
    """
    Limits applied to uploaded files before parsing.
    """

    max_upload_bytes: int = 10 * 1024 * 1024


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        chunk_size=max(1, _get_int_env("IMPORT_CHUNK_SIZE", 100)),
        max_reported_errors=max(1, _get_int_env("IMPORT_MAX_REPORTED_ERRORS", 10)),
        header_scan_rows=max(1, _get_int_env("IMPORT_HEADER_SCAN_ROWS", 10)),
        log_row_errors=_get_bool_env("IMPORT_LOG_ROW_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload limits from environment variables.
    """

    return UploadSettings(
        max_upload_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", 10 * 1024 * 1024)),
    )
