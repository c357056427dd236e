"""
app/domain/soh.py

Domain models used by the stock-on-hand import flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class HeaderAnalysis:
    """
    Preview of an upload: where its header is and what follows it.
    """

    filename: str
    header_row_index: int
    headers: list[str]
    sample_rows: list[list[Any]] = field(default_factory=list)
    total_rows: int = 0


@dataclass(frozen=True)
class SohSummary:
    total_records: int
    latest_import: dict[str, Any] | None = None
