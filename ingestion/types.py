"""
ingestion/types.py

Value objects shared by the spreadsheet ingestion pipeline.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

_MONTH_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}$")


def is_empty_cell(value: Any) -> bool:
    """
    Return True for None, NaN, and blank strings.
    """

    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def is_empty_row(row: Sequence[Any]) -> bool:
    return all(is_empty_cell(cell) for cell in row)


def display_row_number(header_index: int, batch_start: int, in_batch_offset: int) -> int:
    """
    1-based spreadsheet row number of a data row.

    ``batch_start`` and ``in_batch_offset`` are 0-based offsets into the rows
    that follow the header.
    """

    return header_index + batch_start + in_batch_offset + 2


@dataclass(frozen=True)
class RawGrid:
    """
    Parsed cells of one uploaded sheet. Rows are ragged.
    """

    rows: tuple[tuple[Any, ...], ...]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]]) -> "RawGrid":
        return cls(rows=tuple(tuple(row) for row in rows))

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class HeaderRow:
    index: int
    labels: tuple[str, ...]


@dataclass(frozen=True)
class ResolvedColumn:
    canonical_name: str
    index: int
    source_label: str

    def read(self, row: Sequence[Any]) -> Any:
        if self.index < len(row):
            return row[self.index]
        return None


@dataclass(frozen=True)
class ColumnMapping:
    """
    Ordered canonical-name to cell-index pairs, resolved once per upload.
    """

    columns: tuple[ResolvedColumn, ...]

    @property
    def canonical_names(self) -> tuple[str, ...]:
        return tuple(column.canonical_name for column in self.columns)

    def get(self, canonical_name: str) -> ResolvedColumn | None:
        for column in self.columns:
            if column.canonical_name == canonical_name:
                return column
        return None


@dataclass(frozen=True)
class ImportRecord:
    """
    One coerced data row plus its provenance.
    """

    fields: Mapping[str, Any]
    batch_id: str
    source_filename: str

    def to_payload(self) -> dict[str, Any]:
        payload = dict(self.fields)
        payload["import_batch_id"] = self.batch_id
        payload["import_source"] = self.source_filename
        return payload


@dataclass(frozen=True)
class MonthlyQuantity:
    """
    One forecast fact: a product's quantity for one calendar month.
    """

    product_code: str
    description: str | None
    month_key: str
    quantity: int

    def __post_init__(self) -> None:
        if not _MONTH_KEY_PATTERN.match(self.month_key):
            raise ValueError(f"month_key must look like YYYY-MM, got {self.month_key!r}.")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError(f"quantity must be an integer, got {self.quantity!r}.")
        if self.quantity < 0:
            raise ValueError(f"quantity must be non-negative, got {self.quantity}.")


@dataclass
class ImportReport:
    """
    Outcome of one import run. ``errors`` is capped; ``error_count`` is not.
    """

    batch_id: str
    total_rows: int = 0
    success_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)
    columns_imported: list[str] = field(default_factory=list)
    forecast_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success_count": self.success_count,
            "error_count": self.error_count,
            "total_rows": self.total_rows,
            "batch_id": self.batch_id,
            "errors": list(self.errors),
            "columns_imported": list(self.columns_imported),
        }
        if self.forecast_count is not None:
            payload["forecast_count"] = self.forecast_count
        return payload
