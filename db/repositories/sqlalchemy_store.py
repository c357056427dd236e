"""
PostgreSQL-backed RecordStore built on SQLAlchemy Core statements.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from sqlalchemy import ColumnElement, Table, delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import Forecast, Product, SohRecord
from db.repositories.record_store import QueryFilter, RecordStoreError, conflict_columns

logger = logging.getLogger(__name__)

_TABLES: dict[str, Table] = {
    "soh": SohRecord.__table__,
    "products": Product.__table__,
    "forecasts": Forecast.__table__,
}


def _describe(exc: SQLAlchemyError) -> str:
    origin = getattr(exc, "orig", None)
    return str(origin if origin is not None else exc).strip().splitlines()[0]


class SQLAlchemyRecordStore:
    """
    RecordStore over a SQLAlchemy session. Every write commits on success
    and rolls back on failure.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def delete_all(self, table: str) -> int:
        target = self._table(table)
        try:
            result = self._session.execute(delete(target))
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RecordStoreError(f"Failed to clear {table}: {_describe(exc)}") from exc
        return result.rowcount or 0

    def upsert(
        self,
        table: str,
        records: Sequence[Mapping[str, Any]],
        conflict_key: str | Sequence[str],
    ) -> int:
        if not records:
            return 0

        target = self._table(table)
        key_columns = conflict_columns(conflict_key)
        payloads = self._deduplicate(records, key_columns)
        stmt = insert(target).values(payloads)
        update_columns: dict[str, Any] = {
            name: stmt.excluded[name] for name in payloads[0] if name not in key_columns
        }
        if "updated_at" in target.c:
            update_columns["updated_at"] = func.now()

        if update_columns:
            stmt = stmt.on_conflict_do_update(index_elements=list(key_columns), set_=update_columns)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(key_columns))

        try:
            self._session.execute(stmt)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RecordStoreError(f"Upsert into {table} failed: {_describe(exc)}") from exc
        return len(payloads)

    def insert(self, table: str, records: Sequence[Mapping[str, Any]]) -> int:
        if not records:
            return 0

        target = self._table(table)
        try:
            self._session.execute(insert(target).values([dict(record) for record in records]))
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RecordStoreError(f"Insert into {table} failed: {_describe(exc)}") from exc
        return len(records)

    def query(
        self,
        table: str,
        filters: Sequence[QueryFilter] = (),
        order_by: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        target = self._table(table)
        stmt = select(target)
        for query_filter in filters:
            stmt = stmt.where(self._condition(target, query_filter))
        for column_name in order_by:
            descending = column_name.startswith("-")
            column = self._column(target, column_name.lstrip("-"))
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(max(1, limit))

        try:
            rows = self._session.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RecordStoreError(f"Query on {table} failed: {_describe(exc)}") from exc
        return [dict(row) for row in rows]

    @staticmethod
    def _table(name: str) -> Table:
        target = _TABLES.get(name)
        if target is None:
            raise RecordStoreError(f"Unknown table {name!r}.")
        return target

    @staticmethod
    def _column(target: Table, name: str) -> Any:
        if name not in target.c:
            raise RecordStoreError(f"Unknown column {name!r} on {target.name}.")
        return target.c[name]

    def _condition(self, target: Table, query_filter: QueryFilter) -> ColumnElement[bool]:
        column = self._column(target, query_filter.column)
        if query_filter.op == "eq":
            return column == query_filter.value
        if query_filter.op == "gte":
            return column >= query_filter.value
        if query_filter.op == "lte":
            return column <= query_filter.value
        if query_filter.op == "ilike":
            return column.ilike(f"%{query_filter.value}%")
        return column.in_(list(query_filter.value))

    @staticmethod
    def _deduplicate(
        records: Sequence[Mapping[str, Any]],
        key_columns: tuple[str, ...],
    ) -> list[dict[str, Any]]:
        # ON CONFLICT cannot touch the same row twice in one statement.
        by_key: dict[tuple[Any, ...], dict[str, Any]] = {}
        for record in records:
            by_key[tuple(record[column] for column in key_columns)] = dict(record)
        if len(by_key) < len(records):
            logger.debug("Collapsed %d duplicate keys on %s", len(records) - len(by_key), ", ".join(key_columns))
        return list(by_key.values())
