"""
ingestion/record_coercer.py

Row-level type coercion for spreadsheet imports.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

from ingestion.column_resolver import ForecastColumns
from ingestion.errors import RowCoercionError
from ingestion.schema import IDENTIFIER_LABEL_MARKER, PRODUCT_SCHEMA, FieldCategory, ImportSchema
from ingestion.types import ColumnMapping, ImportRecord, MonthlyQuantity, is_empty_cell


def coerce_numeric(value: Any) -> int | float:
    """
    Parse a numeric cell; empty or unparseable values become 0, never NaN.
    """

    if is_empty_cell(value):
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0

    raw_value = str(value).strip()
    try:
        return int(raw_value)
    except ValueError:
        pass

    try:
        parsed = float(Decimal(raw_value))
    except (InvalidOperation, ValueError):
        return 0
    return parsed if math.isfinite(parsed) else 0


def coerce_text(value: Any) -> str | None:
    if is_empty_cell(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def coerce_identifier(value: Any) -> str:
    text = coerce_text(value)
    if text is None or not text.strip():
        raise RowCoercionError("Missing product identifier.")
    return text.strip()


def coerce_quantity(value: Any) -> int | None:
    """
    Forecast quantity: None for empty cells, otherwise a non-negative int.

    Fractional quantities are truncated toward zero.
    """

    if is_empty_cell(value):
        return None
    if isinstance(value, bool):
        raise RowCoercionError(f"Invalid quantity {value!r}.")

    number: float
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(Decimal(str(value).strip()))
        except (InvalidOperation, ValueError) as exc:
            raise RowCoercionError(f"Invalid quantity {value!r}.") from exc

    if not math.isfinite(number):
        raise RowCoercionError(f"Invalid quantity {value!r}.")
    quantity = int(number)
    if quantity < 0:
        raise RowCoercionError(f"Negative quantity {value!r}.")
    return quantity


class RecordCoercer:
    """
    Builds one ImportRecord per data row using the schema's column categories.
    """

    def __init__(
        self,
        *,
        schema: ImportSchema,
        mapping: ColumnMapping,
        batch_id: str,
        source_filename: str,
    ) -> None:
        self._schema = schema
        self._mapping = mapping
        self._batch_id = batch_id
        self._source_filename = source_filename
        # A "product" label stands in for the identifier only when no mapped
        # column is the identifier itself.
        self._identifier_from_label = not any(
            schema.category_of(column.canonical_name) is FieldCategory.IDENTIFIER for column in mapping.columns
        )

    def coerce(self, row: Sequence[Any]) -> ImportRecord:
        fields: dict[str, Any] = {}
        for column in self._mapping.columns:
            value = column.read(row)
            category = self._schema.category_of(column.canonical_name)

            if category is FieldCategory.NUMERIC:
                fields[column.canonical_name] = coerce_numeric(value)
            elif category is FieldCategory.IDENTIFIER:
                fields[column.canonical_name] = coerce_identifier(value)
            else:
                fields[column.canonical_name] = coerce_text(value)

            if self._identifier_from_label and IDENTIFIER_LABEL_MARKER in column.source_label.lower():
                fields[self._schema.identifier] = coerce_identifier(value)

        return ImportRecord(
            fields=fields,
            batch_id=self._batch_id,
            source_filename=self._source_filename,
        )


@dataclass(frozen=True)
class ForecastImportRow:
    """
    A product record together with its monthly forecast facts.
    """

    product: ImportRecord
    quantities: tuple[MonthlyQuantity, ...]


class ForecastRowCoercer:
    """
    Splits one wide forecast row into a product record and monthly facts.
    """

    def __init__(self, *, columns: ForecastColumns, batch_id: str, source_filename: str) -> None:
        self._columns = columns
        self._products = RecordCoercer(
            schema=PRODUCT_SCHEMA,
            mapping=columns.mapping,
            batch_id=batch_id,
            source_filename=source_filename,
        )

    def coerce(self, row: Sequence[Any]) -> ForecastImportRow:
        product = self._products.coerce(row)
        product_code = product.fields["product_code"]
        description = product.fields.get("description")

        quantities: list[MonthlyQuantity] = []
        for column in self._columns.months:
            try:
                quantity = coerce_quantity(column.read(row))
            except RowCoercionError as exc:
                raise RowCoercionError(f"{column.source_label}: {exc}") from exc
            if quantity is None:
                continue
            quantities.append(
                MonthlyQuantity(
                    product_code=product_code,
                    description=description,
                    month_key=column.canonical_name,
                    quantity=quantity,
                )
            )

        return ForecastImportRow(product=product, quantities=tuple(quantities))
