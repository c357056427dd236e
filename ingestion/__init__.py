"""
Spreadsheet ingestion: grid parsing, header discovery, column resolution,
row coercion, and chunked persistence.
"""

from ingestion.batch_importer import BatchImporter
from ingestion.column_resolver import ForecastColumns, normalize_column_name, resolve_forecast, resolve_selected
from ingestion.errors import (
    AmbiguousColumnError,
    ColumnNotFoundError,
    GridReadError,
    HeaderNotFoundError,
    ImportRejectedError,
    MissingRequiredColumnError,
    RowCoercionError,
    UnsupportedColumnError,
)
from ingestion.grid_reader import read_grid
from ingestion.header_locator import locate_header
from ingestion.month_keys import format_month_label, parse_month_key
from ingestion.record_coercer import ForecastImportRow, ForecastRowCoercer, RecordCoercer
from ingestion.types import ImportRecord, ImportReport, MonthlyQuantity, RawGrid

__all__ = [
    "AmbiguousColumnError",
    "BatchImporter",
    "ColumnNotFoundError",
    "ForecastColumns",
    "ForecastImportRow",
    "ForecastRowCoercer",
    "GridReadError",
    "HeaderNotFoundError",
    "ImportRecord",
    "ImportRejectedError",
    "ImportReport",
    "MissingRequiredColumnError",
    "MonthlyQuantity",
    "RawGrid",
    "RecordCoercer",
    "RowCoercionError",
    "UnsupportedColumnError",
    "format_month_label",
    "locate_header",
    "normalize_column_name",
    "parse_month_key",
    "read_grid",
    "resolve_forecast",
    "resolve_selected",
]
