"""
ingestion/schema.py

Supported import columns and the coercion category of each.

Both the column resolver and the record coercer read from these tables, so
a column's category is decided in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

NUMERIC_NAME_MARKERS: tuple[str, ...] = ("stock", "weight", "volume")
IDENTIFIER_LABEL_MARKER = "product"


class FieldCategory(str, Enum):
    IDENTIFIER = "identifier"
    NUMERIC = "numeric"
    TEXT = "text"


def infer_category(canonical_name: str) -> FieldCategory:
    """
    Naming rule: ``product_id`` is the identifier, names mentioning stock,
    weight or volume are numeric, everything else is text.
    """

    if canonical_name == "product_id":
        return FieldCategory.IDENTIFIER
    if any(marker in canonical_name for marker in NUMERIC_NAME_MARKERS):
        return FieldCategory.NUMERIC
    return FieldCategory.TEXT


@dataclass(frozen=True)
class ImportSchema:
    """
    Allow-list of canonical columns for one import target.
    """

    name: str
    table: str
    identifier: str
    columns: Mapping[str, FieldCategory]

    @property
    def supported_columns(self) -> tuple[str, ...]:
        return tuple(self.columns)

    def category_of(self, canonical_name: str) -> FieldCategory:
        return self.columns.get(canonical_name, infer_category(canonical_name))


def _build_columns(*names: str) -> dict[str, FieldCategory]:
    return {name: infer_category(name) for name in names}


SOH_SCHEMA = ImportSchema(
    name="soh",
    table="soh",
    identifier="product_id",
    columns=_build_columns(
        "product_id",
        "description",
        "stock_on_hand",
        "default_uom",
        "locations",
        "ean",
        "weight_kg",
        "volume_m3",
    ),
)

PRODUCT_SCHEMA = ImportSchema(
    name="forecast",
    table="products",
    identifier="product_code",
    columns={
        "product_code": FieldCategory.IDENTIFIER,
        "description": FieldCategory.TEXT,
    },
)

FORECAST_TABLE = "forecasts"
FORECAST_CONFLICT_KEY: tuple[str, ...] = ("product_code", "forecast_date")
