"""
ingestion/batch_importer.py

Chunked persistence of coerced rows with per-row and per-chunk accounting.

Rows are coerced and persisted chunk by chunk, strictly in order. A bad row
only costs that row; a rejected chunk only costs that chunk. Nothing is
retried, and the report always reflects what was actually committed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Sequence, TypeVar

from db.repositories.record_store import RecordStore, RecordStoreError
from ingestion.errors import RowCoercionError
from ingestion.types import ImportReport, display_row_number, is_empty_row

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CHUNK_SIZE = 100
DEFAULT_MAX_REPORTED_ERRORS = 10


class BatchImporter(Generic[T]):
    """
    Drives coercion and persistence of data rows in fixed-size chunks.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_reported_errors: int = DEFAULT_MAX_REPORTED_ERRORS,
        log_row_errors: bool = True,
    ) -> None:
        self._store = store
        self._chunk_size = max(1, chunk_size)
        self._max_reported_errors = max(1, max_reported_errors)
        self._log_row_errors = log_row_errors

    def run(
        self,
        *,
        table: str,
        data_rows: Sequence[Sequence[Any]],
        header_index: int,
        coerce: Callable[[Sequence[Any]], T],
        persist: Callable[[list[T]], None],
        batch_id: str,
        replace_existing: bool = False,
        columns_imported: Sequence[str] = (),
    ) -> ImportReport:
        """
        Import ``data_rows`` (the rows after the header) into ``table``.

        ``persist`` receives each chunk's valid records and must raise
        RecordStoreError when the store rejects them.
        """

        report = ImportReport(
            batch_id=batch_id,
            total_rows=len(data_rows),
            columns_imported=list(columns_imported),
        )

        if replace_existing:
            self._clear(table)

        logger.info("Starting data insertion table=%s batch_id=%s total_rows=%d", table, batch_id, len(data_rows))

        for batch_start in range(0, len(data_rows), self._chunk_size):
            chunk = data_rows[batch_start : batch_start + self._chunk_size]
            batch_number = batch_start // self._chunk_size + 1
            records: list[T] = []

            for offset, row in enumerate(chunk):
                if is_empty_row(row):
                    continue
                try:
                    records.append(coerce(row))
                except RowCoercionError as exc:
                    row_number = display_row_number(header_index, batch_start, offset)
                    report.error_count += 1
                    self._record_error(report, f"Row {row_number}: {exc}")

            if not records:
                continue

            try:
                persist(records)
            except RecordStoreError as exc:
                logger.error(
                    "Batch insert error table=%s batch=%d start_row=%d: %s",
                    table,
                    batch_number,
                    display_row_number(header_index, batch_start, 0),
                    exc,
                )
                report.error_count += len(records)
                self._record_error(report, f"Batch {batch_number}: {exc}")
                continue

            report.success_count += len(records)
            logger.info("Batch %d inserted successfully table=%s records=%d", batch_number, table, len(records))

        logger.info(
            "Import completed table=%s batch_id=%s success_count=%d error_count=%d",
            table,
            batch_id,
            report.success_count,
            report.error_count,
        )
        return report

    def _clear(self, table: str) -> None:
        try:
            deleted = self._store.delete_all(table)
        except RecordStoreError as exc:
            logger.warning("Could not clear existing data table=%s: %s", table, exc)
            return
        logger.info("Existing data cleared table=%s deleted=%d", table, deleted)

    def _record_error(self, report: ImportReport, message: str) -> None:
        if self._log_row_errors:
            logger.warning("Import error batch_id=%s %s", report.batch_id, message)
        if len(report.errors) < self._max_reported_errors:
            report.errors.append(message)
