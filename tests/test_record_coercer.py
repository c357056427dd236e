from __future__ import annotations

import math
import unittest
from datetime import date

import pytest

from ingestion.column_resolver import resolve_forecast, resolve_selected
from ingestion.errors import RowCoercionError
from ingestion.record_coercer import (
    ForecastRowCoercer,
    RecordCoercer,
    coerce_numeric,
    coerce_quantity,
    coerce_text,
)
from ingestion.schema import SOH_SCHEMA
from ingestion.types import ColumnMapping, HeaderRow, ResolvedColumn


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 0),
        ("", 0),
        ("   ", 0),
        ("abc", 0),
        ("nan", 0),
        ("inf", 0),
        (float("nan"), 0),
        (float("inf"), 0),
        ("12", 12),
        (" 7 ", 7),
        ("1.5", 1.5),
        ("-3.25", -3.25),
        (3.0, 3.0),
        (4, 4),
        (True, 1),
    ],
)
def test_coerce_numeric(value: object, expected: object) -> None:
    result = coerce_numeric(value)
    assert result == expected
    assert not (isinstance(result, float) and math.isnan(result))


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("", None),
        ("Pallet", "Pallet"),
        (5012345678900.0, "5012345678900"),
        (2.5, "2.5"),
        (12, "12"),
        (date(2024, 1, 31), "2024-01-31"),
    ],
)
def test_coerce_text(value: object, expected: object) -> None:
    assert coerce_text(value) == expected


@pytest.mark.parametrize("value, expected", [(None, None), ("", None), ("10", 10), (7.9, 7), ("0", 0), (3, 3)])
def test_coerce_quantity(value: object, expected: object) -> None:
    assert coerce_quantity(value) == expected


@pytest.mark.parametrize("value", ["abc", "-1", -2, float("inf"), True])
def test_coerce_quantity_rejects_invalid(value: object) -> None:
    with pytest.raises(RowCoercionError):
        coerce_quantity(value)


class TestRecordCoercer(unittest.TestCase):
    def setUp(self) -> None:
        header = HeaderRow(index=0, labels=("Product ID", "Description", "Stock On Hand", "EAN"))
        mapping = resolve_selected(header, list(header.labels), SOH_SCHEMA)
        self.coercer = RecordCoercer(schema=SOH_SCHEMA, mapping=mapping, batch_id="b-1", source_filename="soh.csv")

    def test_coerces_by_category(self) -> None:
        record = self.coercer.coerce(["SKU-1", "Widget", "12.5", 5012345678900.0])

        self.assertEqual(
            dict(record.fields),
            {"product_id": "SKU-1", "description": "Widget", "stock_on_hand": 12.5, "ean": "5012345678900"},
        )

    def test_short_rows_default_missing_cells(self) -> None:
        record = self.coercer.coerce(["SKU-2"])

        self.assertEqual(record.fields["stock_on_hand"], 0)
        self.assertIsNone(record.fields["description"])

    def test_payload_carries_provenance(self) -> None:
        payload = self.coercer.coerce(["SKU-1", "Widget", "", ""]).to_payload()

        self.assertEqual(payload["import_batch_id"], "b-1")
        self.assertEqual(payload["import_source"], "soh.csv")

    def test_missing_identifier_fails_the_row(self) -> None:
        with self.assertRaises(RowCoercionError) as ctx:
            self.coercer.coerce(["", "Widget", "3", ""])

        self.assertEqual(str(ctx.exception), "Missing product identifier.")

    def test_product_label_fills_identifier_when_none_is_mapped(self) -> None:
        mapping = ColumnMapping(
            columns=(
                ResolvedColumn(canonical_name="description", index=0, source_label="Product Name"),
                ResolvedColumn(canonical_name="stock_on_hand", index=1, source_label="Stock On Hand"),
            )
        )
        coercer = RecordCoercer(schema=SOH_SCHEMA, mapping=mapping, batch_id="b-1", source_filename="soh.csv")

        record = coercer.coerce(["SKU-9", "4"])

        self.assertEqual(record.fields["product_id"], "SKU-9")
        self.assertEqual(record.fields["description"], "SKU-9")


class TestForecastRowCoercer(unittest.TestCase):
    def setUp(self) -> None:
        columns = resolve_forecast(HeaderRow(index=1, labels=("Product", "Description", "Jan-24", "Feb-24")))
        self.coercer = ForecastRowCoercer(columns=columns, batch_id="b-2", source_filename="f.csv")

    def test_splits_product_and_monthly_facts(self) -> None:
        row = self.coercer.coerce(["P1", "Widget", "10", "0"])

        self.assertEqual(row.product.fields["product_code"], "P1")
        self.assertEqual([(q.month_key, q.quantity) for q in row.quantities], [("2024-01", 10), ("2024-02", 0)])
        self.assertTrue(all(q.description == "Widget" for q in row.quantities))

    def test_empty_month_cells_are_skipped(self) -> None:
        row = self.coercer.coerce(["P2", "Gadget", "", "5"])

        self.assertEqual([(q.month_key, q.quantity) for q in row.quantities], [("2024-02", 5)])

    def test_product_description_does_not_replace_the_code(self) -> None:
        columns = resolve_forecast(HeaderRow(index=0, labels=("Product Code", "Product Description", "Jan-24")))
        coercer = ForecastRowCoercer(columns=columns, batch_id="b-3", source_filename="f.csv")

        described = coercer.coerce(["P1", "Widget", "10"])
        undescribed = coercer.coerce(["P2", "", "5"])

        self.assertEqual(dict(described.product.fields), {"product_code": "P1", "description": "Widget"})
        self.assertEqual(dict(undescribed.product.fields), {"product_code": "P2", "description": None})
        self.assertEqual(undescribed.quantities[0].quantity, 5)

    def test_bad_quantity_names_the_column(self) -> None:
        with self.assertRaises(RowCoercionError) as ctx:
            self.coercer.coerce(["P3", "Gizmo", "lots", "1"])

        self.assertTrue(str(ctx.exception).startswith("Jan-24: "))


if __name__ == "__main__":
    unittest.main()
