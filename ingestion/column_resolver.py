"""
ingestion/column_resolver.py

Maps raw header labels onto canonical column names.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

from ingestion.errors import (
    AmbiguousColumnError,
    ColumnNotFoundError,
    MissingRequiredColumnError,
    UnsupportedColumnError,
)
from ingestion.month_keys import parse_month_key
from ingestion.schema import IDENTIFIER_LABEL_MARKER, PRODUCT_SCHEMA, ImportSchema
from ingestion.types import ColumnMapping, HeaderRow, ResolvedColumn

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC_RUN = re.compile(r"[^a-z0-9]+")


def normalize_column_name(label: str) -> str:
    """
    ``"Stock On-Hand (units)"`` -> ``"stock_on_hand_units"``.
    """

    return _NON_ALPHANUMERIC_RUN.sub("_", label.strip().lower()).strip("_")


@dataclass(frozen=True)
class ForecastColumns:
    """
    Resolved layout of a wide forecast sheet.
    """

    mapping: ColumnMapping
    months: tuple[ResolvedColumn, ...]

    @property
    def product(self) -> ResolvedColumn:
        column = self.mapping.get(PRODUCT_SCHEMA.identifier)
        if column is None:
            raise MissingRequiredColumnError(
                "A column with 'Product' in the name is required.",
                items=[PRODUCT_SCHEMA.identifier],
            )
        return column

    @property
    def description(self) -> ResolvedColumn | None:
        return self.mapping.get("description")

    @property
    def month_keys(self) -> tuple[str, ...]:
        return tuple(column.canonical_name for column in self.months)


def resolve_selected(
    header: HeaderRow,
    selected_columns: Sequence[str],
    schema: ImportSchema,
) -> ColumnMapping:
    """
    Resolve the caller's selected header labels against ``schema``.

    Every problem of one kind is collected before raising, so the caller sees
    the full list of offending columns at once.
    """

    positions: dict[str, int] = {}
    for index, label in enumerate(header.labels):
        if label and label not in positions:
            positions[label] = index

    wanted: list[str] = []
    for label in selected_columns:
        cleaned = str(label).strip()
        if cleaned and cleaned not in wanted:
            wanted.append(cleaned)

    not_found = [label for label in wanted if label not in positions]
    if not_found:
        raise ColumnNotFoundError(
            f"Selected columns not found in header row: {', '.join(not_found)}.",
            items=not_found,
        )

    normalized = {label: normalize_column_name(label) for label in wanted}
    unsupported = [label for label in wanted if normalized[label] not in schema.columns]
    if unsupported:
        logger.warning("Unsupported columns detected columns=%s", unsupported)
        offending = [normalized[label] or label for label in unsupported]
        raise UnsupportedColumnError(
            f"Unsupported columns: {', '.join(offending)}. "
            f"Supported columns are: {', '.join(schema.supported_columns)}",
            items=offending,
        )

    labels_by_name: dict[str, list[str]] = defaultdict(list)
    for label in wanted:
        labels_by_name[normalized[label]].append(label)
    conflicts = {name: labels for name, labels in labels_by_name.items() if len(labels) > 1}
    if conflicts:
        described = [f"{name} ({' / '.join(labels)})" for name, labels in conflicts.items()]
        raise AmbiguousColumnError(
            f"Columns resolve to the same field: {'; '.join(described)}.",
            items=list(conflicts),
        )

    columns = tuple(
        ResolvedColumn(
            canonical_name=normalized[label],
            index=positions[label],
            source_label=label,
        )
        for label in wanted
    )
    if schema.identifier not in {column.canonical_name for column in columns}:
        raise MissingRequiredColumnError(
            f"A '{schema.identifier}' column is required.",
            items=[schema.identifier],
        )

    logger.info(
        "Column mapping resolved schema=%s columns=%s",
        schema.name,
        {column.canonical_name: column.index for column in columns},
    )
    return ColumnMapping(columns=columns)


def resolve_forecast(header: HeaderRow) -> ForecastColumns:
    """
    Locate the product, description and month columns of a forecast sheet.

    Labels that are neither are ignored.
    """

    product: ResolvedColumn | None = None
    description: ResolvedColumn | None = None
    months: list[ResolvedColumn] = []
    labels_by_month: dict[str, list[str]] = defaultdict(list)

    for index, label in enumerate(header.labels):
        if not label:
            continue
        lowered = label.lower()
        month_key = parse_month_key(label)
        if month_key is not None:
            labels_by_month[month_key].append(label)
            months.append(ResolvedColumn(canonical_name=month_key, index=index, source_label=label))
        elif product is None and IDENTIFIER_LABEL_MARKER in lowered:
            product = ResolvedColumn(canonical_name="product_code", index=index, source_label=label)
        elif description is None and "description" in lowered:
            description = ResolvedColumn(canonical_name="description", index=index, source_label=label)

    if product is None:
        raise MissingRequiredColumnError(
            "A column with 'Product' in the name is required.",
            items=[PRODUCT_SCHEMA.identifier],
        )

    conflicts = {key: labels for key, labels in labels_by_month.items() if len(labels) > 1}
    if conflicts:
        described = [f"{key} ({' / '.join(labels)})" for key, labels in conflicts.items()]
        raise AmbiguousColumnError(
            f"Month columns resolve to the same month: {'; '.join(described)}.",
            items=list(conflicts),
        )

    resolved = [product] if description is None else [product, description]
    logger.info(
        "Forecast columns resolved product=%r description=%r months=%d",
        product.source_label,
        description.source_label if description else None,
        len(months),
    )
    return ForecastColumns(mapping=ColumnMapping(columns=tuple(resolved)), months=tuple(months))
