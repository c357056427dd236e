from __future__ import annotations

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.dependencies import get_record_store
from app.api.routers import forecasts_router, soh_router
from app.services.forecast_service import ForecastService, get_forecast_service
from app.services.soh_import_service import SohImportService, get_soh_import_service

SOH_CSV_ROWS = [
    ["Product ID", "Description", "Stock On Hand", "Notes"],
    ["SKU-1", "Blue widget", "12", "fragile"],
    ["SKU-2", "Red gadget", "3", ""],
]


@pytest.fixture()
def client(store) -> TestClient:
    app = FastAPI()
    app.include_router(soh_router)
    app.include_router(forecasts_router)
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_soh_import_service] = lambda: SohImportService(
        chunk_size=100, max_reported_errors=10, header_scan_rows=10
    )
    app.dependency_overrides[get_forecast_service] = lambda: ForecastService(
        chunk_size=100, max_reported_errors=10, header_scan_rows=10
    )
    return TestClient(app)


def test_analyze_returns_header_preview(client, make_csv) -> None:
    response = client.post("/soh/analyze", files={"file": ("stock.csv", make_csv(SOH_CSV_ROWS), "text/csv")})

    assert response.status_code == 200
    body = response.json()
    assert body["header_row_index"] == 0
    assert body["headers"] == SOH_CSV_ROWS[0]
    assert body["total_rows"] == 2


def test_import_with_repeated_form_fields(client, store, make_csv) -> None:
    response = client.post(
        "/soh/import",
        files={"file": ("stock.csv", make_csv(SOH_CSV_ROWS), "text/csv")},
        data={"selected_columns": ["Product ID", "Stock On Hand"], "replace_existing": "true"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success_count"] == 2
    assert body["columns_imported"] == ["product_id", "stock_on_hand"]
    assert body["message"].startswith("Import completed: 2 records imported, 0 errors.")
    assert len(store.tables["soh"]) == 2


def test_import_with_json_array_selection(client, make_csv) -> None:
    response = client.post(
        "/soh/import",
        files={"file": ("stock.csv", make_csv(SOH_CSV_ROWS), "text/csv")},
        data={"selected_columns": json.dumps(["Product ID", "Description"])},
    )

    assert response.status_code == 200
    assert response.json()["columns_imported"] == ["product_id", "description"]


def test_unsupported_columns_return_400(client, make_csv) -> None:
    response = client.post(
        "/soh/import",
        files={"file": ("stock.csv", make_csv(SOH_CSV_ROWS), "text/csv")},
        data={"selected_columns": ["Product ID", "Notes"]},
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "unsupported_column"
    assert detail["items"] == ["notes"]


def test_non_spreadsheet_upload_is_rejected(client) -> None:
    response = client.post("/soh/analyze", files={"file": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 400
    assert response.json()["detail"] == "Only Excel (.xlsx, .xls) and CSV files are allowed."


def test_empty_upload_is_rejected(client) -> None:
    response = client.post("/soh/analyze", files={"file": ("stock.csv", b"", "text/csv")})

    assert response.status_code == 400


def test_summary_list_and_delete(client, make_csv) -> None:
    client.post(
        "/soh/import",
        files={"file": ("stock.csv", make_csv(SOH_CSV_ROWS), "text/csv")},
        data={"selected_columns": ["Product ID", "Description"]},
    )

    assert client.get("/soh/summary").json()["total_records"] == 2
    listed = client.get("/soh", params={"search": "widget"}).json()
    assert listed["count"] == 1
    assert listed["data"][0]["product_id"] == "SKU-1"

    deleted = client.delete("/soh")
    assert deleted.json()["deleted"] == 2
    assert client.get("/soh/summary").json() == {"total_records": 0, "latest_import": None}


def test_store_failure_returns_500(client, store) -> None:
    store.failing[("query", "soh")] = None

    assert client.get("/soh").status_code == 500


def test_forecast_upload_and_table(client, make_csv, end_to_end_sheet) -> None:
    upload = client.post(
        "/forecasts/upload",
        files={"forecastFile": ("forecast.csv", make_csv(end_to_end_sheet), "text/csv")},
    )

    assert upload.status_code == 201
    body = upload.json()
    assert body["forecast_count"] == 3
    assert body["message"] == "Forecast data imported. 2 products processed, 3 forecast entries created."

    table = client.get("/forecasts").json()
    assert table["summary"] == {"total_products": 2, "total_months": 2, "avg_forecast": 5.0, "top_product": "P1"}
    assert [header["label"] for header in table["headers"]] == ["Product Code", "Description", "Jan-24", "Feb-24"]
    assert table["rows"][1] == {"product_code": "P2", "description": "Gadget", "2024-02": 5}


def test_forecast_months_must_be_valid(client) -> None:
    assert client.get("/forecasts", params={"months": "soon"}).status_code == 400


def test_forecast_without_product_column_returns_400(client, make_csv) -> None:
    response = client.post(
        "/forecasts/upload",
        files={"forecastFile": ("forecast.csv", make_csv([["Code", "Jan-24"], ["P1", "1"]]), "text/csv")},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "missing_required_column"
