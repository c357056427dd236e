"""
ingestion/grid_reader.py

Turns an uploaded spreadsheet or CSV byte stream into a RawGrid.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from ingestion.errors import GridReadError
from ingestion.types import RawGrid, is_empty_cell

logger = logging.getLogger(__name__)

CONTENT_TYPE_FORMATS: dict[str, str] = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-excel": "xls",
    "text/csv": "csv",
    "application/csv": "csv",
}

SUPPORTED_FORMATS: tuple[str, ...] = ("xlsx", "xls", "csv")

_EXCEL_ENGINES = {"xlsx": "openpyxl", "xls": "xlrd"}


def detect_format(filename: str | None, content_type: str | None) -> str:
    """
    Pick the file format from the extension, falling back to the MIME type.
    """

    extension = Path(filename or "").suffix.lower().lstrip(".")
    if extension in SUPPORTED_FORMATS:
        return extension

    fmt = CONTENT_TYPE_FORMATS.get((content_type or "").strip().lower())
    if fmt is None:
        raise GridReadError(
            "Only Excel (.xlsx, .xls) and CSV files are allowed.",
            items=[filename or "", content_type or ""],
        )
    return fmt


def read_grid(
    content: bytes,
    *,
    filename: str | None = None,
    content_type: str | None = None,
) -> RawGrid:
    """
    Parse the first sheet of an upload into ragged rows of raw cell values.

    Trailing empty cells are dropped from each row and trailing empty rows
    from the grid.
    """

    fmt = detect_format(filename, content_type)
    if fmt == "csv":
        rows = _read_csv(content)
    else:
        rows = _read_excel(content, fmt)

    trimmed = [_trim_row(row) for row in rows]
    while trimmed and not trimmed[-1]:
        trimmed.pop()

    logger.debug("Parsed %s upload filename=%r rows=%d", fmt, filename, len(trimmed))
    return RawGrid.from_rows(trimmed)


def _read_csv(content: bytes) -> list[list[Any]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise GridReadError("CSV must be UTF-8 encoded.") from exc

    try:
        return [list(row) for row in csv.reader(io.StringIO(text, newline=""))]
    except csv.Error as exc:
        raise GridReadError(f"Invalid CSV format: {exc}") from exc


def _read_excel(content: bytes, fmt: str) -> list[list[Any]]:
    try:
        frame = pd.read_excel(
            io.BytesIO(content),
            sheet_name=0,
            header=None,
            dtype=object,
            engine=_EXCEL_ENGINES[fmt],
        )
    except ImportError as exc:
        raise GridReadError(f"Reading .{fmt} files requires the {_EXCEL_ENGINES[fmt]} package.") from exc
    except Exception as exc:  # noqa: BLE001
        raise GridReadError(f"Unable to read spreadsheet: {exc}") from exc

    return [[_to_python(value) for value in row] for row in frame.itertuples(index=False, name=None)]


def _to_python(value: Any) -> Any:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, float) and pd.isna(value):
        return None
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        return value.item()
    return value


def _trim_row(row: list[Any]) -> list[Any]:
    end = len(row)
    while end > 0 and is_empty_cell(row[end - 1]):
        end -= 1
    return row[:end]
