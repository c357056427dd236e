"""
Shared fixtures: an in-memory RecordStore and spreadsheet builders.
"""

from __future__ import annotations

import csv
import io
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Sequence

import pytest

from db.repositories.record_store import QueryFilter, RecordStoreError, conflict_columns

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


class InMemoryRecordStore:
    """
    RecordStore double. ``failing[(operation, table)]`` makes calls raise:
    ``None`` fails every call, an int fails only that (1-based) call.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.failing: dict[tuple[str, str], int | None] = {}
        self.calls: dict[tuple[str, str], int] = defaultdict(int)
        self._clock = 0

    def delete_all(self, table: str) -> int:
        self._maybe_fail("delete_all", table)
        deleted = len(self.tables[table])
        self.tables[table] = []
        return deleted

    def upsert(
        self,
        table: str,
        records: Sequence[Mapping[str, Any]],
        conflict_key: str | Sequence[str],
    ) -> int:
        self._maybe_fail("upsert", table)
        key_columns = conflict_columns(conflict_key)
        rows = self.tables[table]
        for record in records:
            existing = next(
                (row for row in rows if all(row.get(column) == record[column] for column in key_columns)),
                None,
            )
            if existing is not None:
                existing.update(record)
            else:
                rows.append(self._new_row(record))
        return len(records)

    def insert(self, table: str, records: Sequence[Mapping[str, Any]]) -> int:
        self._maybe_fail("insert", table)
        self.tables[table].extend(self._new_row(record) for record in records)
        return len(records)

    def query(
        self,
        table: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        self._maybe_fail("query", table)
        rows = [dict(row) for row in self.tables[table] if all(self._matches(row, f) for f in filters)]
        for column in reversed(list(order_by)):
            name = column.lstrip("-")
            rows.sort(key=lambda row: row.get(name), reverse=column.startswith("-"))
        return rows[:limit] if limit is not None else rows

    def _new_row(self, record: Mapping[str, Any]) -> dict[str, Any]:
        self._clock += 1
        row = {"id": uuid.uuid4(), "created_at": _EPOCH + timedelta(seconds=self._clock)}
        row.update(record)
        return row

    def _maybe_fail(self, operation: str, table: str) -> None:
        key = (operation, table)
        self.calls[key] += 1
        if key in self.failing:
            which = self.failing[key]
            if which is None or which == self.calls[key]:
                raise RecordStoreError(f"{operation} on {table} rejected")

    @staticmethod
    def _matches(row: Mapping[str, Any], query_filter: QueryFilter) -> bool:
        value = row.get(query_filter.column)
        if query_filter.op == "eq":
            return value == query_filter.value
        if query_filter.op == "gte":
            return value is not None and value >= query_filter.value
        if query_filter.op == "lte":
            return value is not None and value <= query_filter.value
        if query_filter.op == "ilike":
            return value is not None and str(query_filter.value).lower() in str(value).lower()
        return value in query_filter.value


def build_csv(rows: Sequence[Sequence[Any]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])
    return buffer.getvalue().encode("utf-8")


@pytest.fixture()
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
def end_to_end_sheet() -> list[list[Any]]:
    return [
        ["Title"],
        ["Product", "Description", "Jan-24", "Feb-24"],
        ["P1", "Widget", "10", "0"],
        ["P2", "Gadget", "", "5"],
    ]


@pytest.fixture()
def make_csv():
    return build_csv
