"""
app/schemas/imports.py

Response schemas for spreadsheet import and retrieval endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ImportReportResponse(BaseModel):
    """
    API response model for one import run.
    """

    success_count: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    total_rows: int = Field(..., ge=0)
    batch_id: str
    errors: list[str] = Field(default_factory=list)
    columns_imported: list[str] = Field(default_factory=list)
    forecast_count: int | None = Field(default=None, ge=0)
    message: str


class HeaderAnalysisResponse(BaseModel):
    filename: str
    header_row_index: int = Field(..., ge=0)
    headers: list[str]
    sample_rows: list[list[Any]] = Field(default_factory=list)
    total_rows: int = Field(..., ge=0)


class SohListResponse(BaseModel):
    data: list[dict[str, Any]]
    count: int = Field(..., ge=0)


class SohSummaryResponse(BaseModel):
    total_records: int = Field(..., ge=0)
    latest_import: dict[str, Any] | None = None


class DeleteResponse(BaseModel):
    deleted: int = Field(..., ge=0)
    message: str


class ForecastHeaderResponse(BaseModel):
    key: str
    label: str


class ForecastSummaryResponse(BaseModel):
    total_products: int = Field(..., ge=0)
    total_months: int = Field(..., ge=0)
    avg_forecast: float = Field(..., ge=0)
    top_product: str | None = None


class ForecastTableResponse(BaseModel):
    """
    Wide forecast table: dynamic month keys appear on each row.
    """

    summary: ForecastSummaryResponse
    headers: list[ForecastHeaderResponse]
    rows: list[dict[str, Any]]
