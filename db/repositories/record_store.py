"""
Abstract record store consumed by the import and forecast flows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

FILTER_OPERATORS = frozenset({"eq", "gte", "lte", "ilike", "in"})


class RecordStoreError(Exception):
    """Raised when the backing store rejects a read or write."""


def conflict_columns(conflict_key: str | Sequence[str]) -> tuple[str, ...]:
    """
    Normalize an upsert conflict key to a tuple of column names.
    """

    if isinstance(conflict_key, str):
        return (conflict_key,)
    columns = tuple(conflict_key)
    if not columns:
        raise ValueError("conflict_key must name at least one column.")
    return columns


@dataclass(frozen=True)
class QueryFilter:
    """
    One column predicate. ``ilike`` values are substrings, matched
    case-insensitively; ``in`` values are sequences.
    """

    column: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator {self.op!r}.")


class RecordStore(Protocol):
    """
    Table-oriented store. Each write call is atomic on its own.

    ``upsert`` conflict keys are a column name or a sequence of column names
    backed by a unique constraint.

    ``order_by`` entries are column names; a leading ``-`` sorts descending.
    """

    def delete_all(self, table: str) -> int:
        ...

    def upsert(
        self,
        table: str,
        records: Sequence[Mapping[str, Any]],
        conflict_key: str | Sequence[str],
    ) -> int:
        ...

    def insert(self, table: str, records: Sequence[Mapping[str, Any]]) -> int:
        ...

    def query(
        self,
        table: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        ...
