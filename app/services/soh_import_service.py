"""
app/services/soh_import_service.py

Stock-on-hand spreadsheet import: header preview, column selection,
row coercion, and chunked upsert into the ``soh`` table.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Sequence

from app.config import get_import_settings
from app.domain.soh import HeaderAnalysis, SohSummary
from db.repositories.record_store import QueryFilter, RecordStore
from ingestion.batch_importer import BatchImporter
from ingestion.column_resolver import resolve_selected
from ingestion.errors import ImportRejectedError
from ingestion.grid_reader import read_grid
from ingestion.header_locator import locate_header
from ingestion.record_coercer import RecordCoercer
from ingestion.schema import SOH_SCHEMA, ImportSchema
from ingestion.types import ImportRecord, ImportReport

logger = logging.getLogger(__name__)

SAMPLE_ROW_COUNT = 5


class SohImportService:
    """
    Coordinates parsing, column resolution, coercion, and persistence of
    stock-on-hand uploads.
    """

    def __init__(
        self,
        *,
        chunk_size: int,
        max_reported_errors: int,
        header_scan_rows: int,
        log_row_errors: bool = True,
        schema: ImportSchema = SOH_SCHEMA,
    ) -> None:
        self._chunk_size = max(1, chunk_size)
        self._max_reported_errors = max(1, max_reported_errors)
        self._header_scan_rows = max(1, header_scan_rows)
        self._log_row_errors = log_row_errors
        self._schema = schema

    def analyze(
        self,
        *,
        content: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> HeaderAnalysis:
        """
        Locate the header row and return it with a few sample data rows.
        """

        grid = read_grid(content, filename=filename, content_type=content_type)
        header = locate_header(grid, scan_rows=self._header_scan_rows)
        data_rows = grid.rows[header.index + 1 :]

        logger.info(
            "Spreadsheet analysis complete filename=%r header_row=%d headers=%d",
            filename,
            header.index,
            len(header.labels),
        )
        return HeaderAnalysis(
            filename=filename,
            header_row_index=header.index,
            headers=[label for label in header.labels if label],
            sample_rows=[[_jsonable(cell) for cell in row] for row in data_rows[:SAMPLE_ROW_COUNT]],
            total_rows=len(data_rows),
        )

    def import_file(
        self,
        *,
        store: RecordStore,
        content: bytes,
        filename: str,
        selected_columns: Sequence[str],
        replace_existing: bool = False,
        content_type: str | None = None,
    ) -> ImportReport:
        """
        Import the selected columns of an upload.

        Structural problems raise ImportRejectedError before anything is
        written. Row and chunk failures are reported in the returned report.
        """

        if not selected_columns:
            raise ImportRejectedError("No columns selected for import.")

        logger.info(
            "Starting SOH import filename=%r selected_columns=%s replace_existing=%s",
            filename,
            list(selected_columns),
            replace_existing,
        )

        grid = read_grid(content, filename=filename, content_type=content_type)
        header = locate_header(grid, scan_rows=self._header_scan_rows)
        data_rows = grid.rows[header.index + 1 :]
        if not data_rows:
            raise ImportRejectedError("File must contain at least a header row and one data row.")

        mapping = resolve_selected(header, selected_columns, self._schema)
        batch_id = str(uuid.uuid4())
        coercer = RecordCoercer(
            schema=self._schema,
            mapping=mapping,
            batch_id=batch_id,
            source_filename=filename,
        )

        def persist(records: list[ImportRecord]) -> None:
            store.upsert(
                self._schema.table,
                [record.to_payload() for record in records],
                conflict_key=self._schema.identifier,
            )

        importer: BatchImporter[ImportRecord] = BatchImporter(
            store=store,
            chunk_size=self._chunk_size,
            max_reported_errors=self._max_reported_errors,
            log_row_errors=self._log_row_errors,
        )
        return importer.run(
            table=self._schema.table,
            data_rows=data_rows,
            header_index=header.index,
            coerce=coercer.coerce,
            persist=persist,
            batch_id=batch_id,
            replace_existing=replace_existing,
            columns_imported=mapping.canonical_names,
        )

    def list_records(
        self,
        *,
        store: RecordStore,
        search: str | None = None,
        product_id: str | None = None,
    ) -> list[dict[str, Any]]:
        filters: list[QueryFilter] = []
        if search:
            filters.append(QueryFilter("description", "ilike", search))
        if product_id:
            filters.append(QueryFilter(self._schema.identifier, "eq", product_id))
        records = store.query(self._schema.table, filters, order_by=[self._schema.identifier])
        logger.info("Fetched SOH records count=%d", len(records))
        return records

    def summary(self, *, store: RecordStore) -> SohSummary:
        records = store.query(self._schema.table)
        latest = store.query(self._schema.table, order_by=["-created_at"], limit=1)
        latest_import = None
        if latest:
            latest_import = {
                "import_batch_id": latest[0].get("import_batch_id"),
                "import_source": latest[0].get("import_source"),
                "created_at": latest[0].get("created_at"),
            }
        return SohSummary(total_records=len(records), latest_import=latest_import)

    def delete_all(self, *, store: RecordStore) -> int:
        deleted = store.delete_all(self._schema.table)
        logger.info("All SOH data deleted count=%d", deleted)
        return deleted


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


@lru_cache(maxsize=1)
def get_soh_import_service() -> SohImportService:
    """
    Build and cache the SOH import service with env-driven settings.
    """

    settings = get_import_settings()
    return SohImportService(
        chunk_size=settings.chunk_size,
        max_reported_errors=settings.max_reported_errors,
        header_scan_rows=settings.header_scan_rows,
        log_row_errors=settings.log_row_errors,
    )
