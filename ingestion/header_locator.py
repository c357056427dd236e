"""
ingestion/header_locator.py

Picks the header row of an uploaded sheet that may start with title or
blank rows.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Sequence

from ingestion.errors import HeaderNotFoundError
from ingestion.month_keys import format_month_label, is_date_like, parse_month_key
from ingestion.types import HeaderRow, RawGrid, is_empty_cell

logger = logging.getLogger(__name__)

DEFAULT_SCAN_ROWS = 10


def score_row(row: Sequence[Any]) -> float:
    """
    ``2 * density + date_like_count`` for one candidate row.
    """

    if not row:
        return 0.0
    filled = sum(1 for cell in row if not is_empty_cell(cell))
    density = filled / len(row)
    date_like_count = sum(1 for cell in row if is_date_like(cell))
    return density * 2 + date_like_count


def locate_header(grid: RawGrid, *, scan_rows: int = DEFAULT_SCAN_ROWS) -> HeaderRow:
    """
    Return the highest-scoring row among the first ``scan_rows`` rows.

    Ties go to the earliest row.
    """

    best_index = -1
    best_score = 0.0
    for index, row in enumerate(grid.rows[: max(1, scan_rows)]):
        score = score_row(row)
        if score > best_score:
            best_index = index
            best_score = score

    if best_index == -1:
        raise HeaderNotFoundError("Could not determine header row in the file.")

    logger.debug("Header row located index=%d score=%.2f", best_index, best_score)
    return HeaderRow(
        index=best_index,
        labels=tuple(header_label(cell) for cell in grid.rows[best_index]),
    )


def header_label(cell: Any) -> str:
    if is_empty_cell(cell):
        return ""
    if isinstance(cell, (date, datetime)):
        return format_month_label(parse_month_key(cell))
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()
