"""
app/services/forecast_service.py

Forecast spreadsheet import and wide-table retrieval.

Import: locate the header, find the product/description/month columns,
upsert each chunk's products, then upsert that chunk's monthly facts.
Retrieval: read facts back, join product descriptions, and pivot them with
ForecastReshaper.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from functools import lru_cache

from app.config import get_import_settings
from db.repositories.record_store import QueryFilter, RecordStore
from forecast.reshaper import ForecastReshaper, ForecastTable
from forecast.window import month_window, parse_months
from ingestion.batch_importer import BatchImporter
from ingestion.column_resolver import resolve_forecast
from ingestion.errors import ImportRejectedError
from ingestion.grid_reader import read_grid
from ingestion.header_locator import locate_header
from ingestion.month_keys import first_day_of, month_key_of
from ingestion.record_coercer import ForecastImportRow, ForecastRowCoercer
from ingestion.schema import FORECAST_CONFLICT_KEY, FORECAST_TABLE, PRODUCT_SCHEMA
from ingestion.types import ImportReport, MonthlyQuantity

logger = logging.getLogger(__name__)


class ForecastService:
    """
    Imports wide forecast sheets and serves them back in wide form.
    """

    def __init__(
        self,
        *,
        chunk_size: int,
        max_reported_errors: int,
        header_scan_rows: int,
        log_row_errors: bool = True,
        reshaper: ForecastReshaper | None = None,
    ) -> None:
        self._chunk_size = max(1, chunk_size)
        self._max_reported_errors = max(1, max_reported_errors)
        self._header_scan_rows = max(1, header_scan_rows)
        self._log_row_errors = log_row_errors
        self._reshaper = reshaper or ForecastReshaper()

    def import_file(
        self,
        *,
        store: RecordStore,
        content: bytes,
        filename: str,
        replace_existing: bool = True,
        content_type: str | None = None,
    ) -> ImportReport:
        """
        Import one forecast sheet.

        ``success_count`` counts product rows; ``forecast_count`` counts the
        monthly facts written alongside them. Facts are upserted on
        (product_code, forecast_date), so importing without replace
        overwrites months already stored.

        Each chunk upserts its products before its facts, as facts reference
        products. If the fact write fails, that chunk's products stay
        committed but the whole chunk is still reported as failed.
        """

        grid = read_grid(content, filename=filename, content_type=content_type)
        header = locate_header(grid, scan_rows=self._header_scan_rows)
        data_rows = grid.rows[header.index + 1 :]
        if not data_rows:
            raise ImportRejectedError("File must contain at least a header row and one data row.")

        columns = resolve_forecast(header)
        if not columns.months:
            logger.warning("No month columns found in forecast upload filename=%r", filename)

        batch_id = str(uuid.uuid4())
        coercer = ForecastRowCoercer(columns=columns, batch_id=batch_id, source_filename=filename)
        written_facts = 0

        def persist(rows: list[ForecastImportRow]) -> None:
            nonlocal written_facts
            store.upsert(
                PRODUCT_SCHEMA.table,
                [row.product.to_payload() for row in rows],
                conflict_key=PRODUCT_SCHEMA.identifier,
            )
            facts = [
                {
                    "product_code": fact.product_code,
                    "forecast_date": first_day_of(fact.month_key),
                    "quantity": fact.quantity,
                    "import_batch_id": batch_id,
                }
                for row in rows
                for fact in row.quantities
            ]
            if facts:
                store.upsert(FORECAST_TABLE, facts, conflict_key=FORECAST_CONFLICT_KEY)
                written_facts += len(facts)

        importer: BatchImporter[ForecastImportRow] = BatchImporter(
            store=store,
            chunk_size=self._chunk_size,
            max_reported_errors=self._max_reported_errors,
            log_row_errors=self._log_row_errors,
        )
        report = importer.run(
            table=FORECAST_TABLE,
            data_rows=data_rows,
            header_index=header.index,
            coerce=coercer.coerce,
            persist=persist,
            batch_id=batch_id,
            replace_existing=replace_existing,
            columns_imported=[column.canonical_name for column in columns.mapping.columns] + list(columns.month_keys),
        )
        report.forecast_count = written_facts

        logger.info(
            "Forecast data imported filename=%r products=%d forecast_entries=%d",
            filename,
            report.success_count,
            written_facts,
        )
        return report

    def get_forecast_table(
        self,
        *,
        store: RecordStore,
        months: str | int | None = "all",
        search: str | None = None,
        today: date | None = None,
    ) -> ForecastTable:
        """
        Wide forecast table, optionally limited to ``months`` calendar months
        from the current one and to products whose description matches
        ``search``.
        """

        logger.info("Fetching forecasts with filters months=%s search=%r", months, search)
        month_count = parse_months(months)

        product_filters = [QueryFilter("description", "ilike", search)] if search else []
        products = store.query(PRODUCT_SCHEMA.table, product_filters, order_by=["product_code"])
        descriptions = {product["product_code"]: product.get("description") for product in products}
        if search and not descriptions:
            return self._reshaper.reshape([])

        fact_filters: list[QueryFilter] = []
        if month_count is not None:
            start, end = month_window(month_count, today or date.today())
            fact_filters.append(QueryFilter("forecast_date", "gte", start))
            fact_filters.append(QueryFilter("forecast_date", "lte", end))
        if search:
            fact_filters.append(QueryFilter("product_code", "in", list(descriptions)))

        rows = store.query(FORECAST_TABLE, fact_filters, order_by=["forecast_date"])
        facts = [
            MonthlyQuantity(
                product_code=row["product_code"],
                description=descriptions[row["product_code"]],
                month_key=month_key_of(row["forecast_date"]),
                quantity=int(row["quantity"]),
            )
            for row in rows
            if row["product_code"] in descriptions
        ]

        table = self._reshaper.reshape(facts)
        logger.info("Successfully fetched and processed %d forecast products", len(table.rows))
        return table


@lru_cache(maxsize=1)
def get_forecast_service() -> ForecastService:
    """
    Build and cache the forecast service with env-driven settings.
    """

    settings = get_import_settings()
    return ForecastService(
        chunk_size=settings.chunk_size,
        max_reported_errors=settings.max_reported_errors,
        header_scan_rows=settings.header_scan_rows,
        log_row_errors=settings.log_row_errors,
    )
