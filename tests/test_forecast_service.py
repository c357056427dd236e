from __future__ import annotations

from datetime import date

import pytest

from app.services.forecast_service import ForecastService
from ingestion.errors import ImportRejectedError, MissingRequiredColumnError
from ingestion.grid_reader import read_grid
from ingestion.header_locator import locate_header


@pytest.fixture()
def service() -> ForecastService:
    return ForecastService(chunk_size=100, max_reported_errors=10, header_scan_rows=10)


def test_end_to_end_import_and_retrieval(service, store, make_csv, end_to_end_sheet) -> None:
    content = make_csv(end_to_end_sheet)
    assert locate_header(read_grid(content, filename="forecast.csv")).index == 1

    report = service.import_file(store=store, content=content, filename="forecast.csv")

    assert report.success_count == 2
    assert report.error_count == 0
    assert report.forecast_count == 3
    assert report.columns_imported == ["product_code", "description", "2024-01", "2024-02"]

    table = service.get_forecast_table(store=store)

    assert table.rows == [
        {"product_code": "P1", "description": "Widget", "2024-01": 10, "2024-02": 0},
        {"product_code": "P2", "description": "Gadget", "2024-02": 5},
    ]
    assert table.summary.avg_forecast == 5.0
    assert table.summary.total_products == 2
    assert table.summary.top_product == "P1"


def test_import_writes_products_and_first_of_month_facts(service, store, make_csv, end_to_end_sheet) -> None:
    report = service.import_file(store=store, content=make_csv(end_to_end_sheet), filename="forecast.csv")

    products = {row["product_code"]: row for row in store.tables["products"]}
    assert products["P1"]["description"] == "Widget"
    assert products["P1"]["import_batch_id"] == report.batch_id
    assert products["P1"]["import_source"] == "forecast.csv"
    assert sorted((f["product_code"], f["forecast_date"], f["quantity"]) for f in store.tables["forecasts"]) == [
        ("P1", date(2024, 1, 1), 10),
        ("P1", date(2024, 2, 1), 0),
        ("P2", date(2024, 2, 1), 5),
    ]


def test_replace_import_is_idempotent(service, store, make_csv, end_to_end_sheet) -> None:
    content = make_csv(end_to_end_sheet)
    service.import_file(store=store, content=content, filename="forecast.csv")
    first = service.get_forecast_table(store=store)

    service.import_file(store=store, content=content, filename="forecast.csv", replace_existing=True)
    second = service.get_forecast_table(store=store)

    assert second.rows == first.rows
    assert second.summary == first.summary
    assert len(store.tables["forecasts"]) == 3
    assert len(store.tables["products"]) == 2


def test_bad_rows_are_reported_with_row_numbers(service, store, make_csv, end_to_end_sheet) -> None:
    rows = end_to_end_sheet + [["", "No code", "1", "2"], ["P4", "Bad", "-3", "1"]]

    report = service.import_file(store=store, content=make_csv(rows), filename="forecast.csv")

    assert report.success_count == 2
    assert report.error_count == 2
    assert report.errors == [
        "Row 5: Missing product identifier.",
        "Row 6: Jan-24: Negative quantity '-3'.",
    ]


def test_failed_fact_write_fails_the_chunk_but_keeps_products(service, store, make_csv, end_to_end_sheet) -> None:
    store.failing[("upsert", "forecasts")] = None

    report = service.import_file(store=store, content=make_csv(end_to_end_sheet), filename="forecast.csv")

    assert report.success_count == 0
    assert report.error_count == 2
    assert report.forecast_count == 0
    assert report.errors == ["Batch 1: upsert on forecasts rejected"]
    assert {row["product_code"] for row in store.tables["products"]} == {"P1", "P2"}
    assert store.tables["forecasts"] == []


def test_reimport_without_replace_overwrites_stored_months(service, store, make_csv, end_to_end_sheet) -> None:
    service.import_file(store=store, content=make_csv(end_to_end_sheet), filename="forecast.csv")
    revised = [row[:] for row in end_to_end_sheet]
    revised[2][2] = "100"

    report = service.import_file(
        store=store, content=make_csv(revised), filename="forecast.csv", replace_existing=False
    )
    table = service.get_forecast_table(store=store)

    assert report.forecast_count == 3
    assert len(store.tables["forecasts"]) == 3
    assert table.rows[0] == {"product_code": "P1", "description": "Widget", "2024-01": 100, "2024-02": 0}
    assert table.summary.avg_forecast == 35.0


def test_product_description_column_keeps_product_codes(service, store, make_csv) -> None:
    rows = [["Product Code", "Product Description", "Jan-24"], ["P1", "Widget", "10"], ["P2", "", "5"]]

    report = service.import_file(store=store, content=make_csv(rows), filename="forecast.csv")

    assert report.success_count == 2
    assert report.error_count == 0
    assert sorted((row["product_code"], row["description"]) for row in store.tables["products"]) == [
        ("P1", "Widget"),
        ("P2", None),
    ]


def test_failed_clear_does_not_abort(service, store, make_csv, end_to_end_sheet) -> None:
    store.failing[("delete_all", "forecasts")] = None

    report = service.import_file(store=store, content=make_csv(end_to_end_sheet), filename="forecast.csv")

    assert report.success_count == 2
    assert report.error_count == 0


def test_sheet_without_product_column_is_rejected(service, store, make_csv) -> None:
    content = make_csv([["Code", "Description", "Jan-24"], ["P1", "Widget", "3"]])

    with pytest.raises(MissingRequiredColumnError):
        service.import_file(store=store, content=content, filename="forecast.csv")
    assert store.calls == {}


def test_header_only_sheet_is_rejected(service, store, make_csv) -> None:
    with pytest.raises(ImportRejectedError):
        service.import_file(store=store, content=make_csv([["Product", "Jan-24"]]), filename="forecast.csv")


def test_month_window_limits_facts(service, store, make_csv) -> None:
    rows = [
        ["Product", "Description", "Dec-24", "Jan-25", "Feb-25", "Mar-25"],
        ["P1", "Widget", "1", "2", "3", "4"],
    ]
    service.import_file(store=store, content=make_csv(rows), filename="forecast.csv")

    table = service.get_forecast_table(store=store, months="2", today=date(2025, 1, 20))

    assert table.month_keys == ["2025-01", "2025-02"]
    assert table.rows == [{"product_code": "P1", "description": "Widget", "2025-01": 2, "2025-02": 3}]


def test_search_filters_on_description(service, store, make_csv, end_to_end_sheet) -> None:
    service.import_file(store=store, content=make_csv(end_to_end_sheet), filename="forecast.csv")

    table = service.get_forecast_table(store=store, search="gadg")

    assert [row["product_code"] for row in table.rows] == ["P2"]
    assert service.get_forecast_table(store=store, search="nothing").rows == []


def test_invalid_months_value_is_rejected(service, store) -> None:
    with pytest.raises(ValueError):
        service.get_forecast_table(store=store, months="soon")
