"""
app/api/routers/forecasts.py

Forecast upload and wide-table retrieval endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Query, status

from app.api.dependencies import SpreadsheetUpload, get_forecast_upload, get_record_store
from app.schemas.imports import (
    ForecastHeaderResponse,
    ForecastSummaryResponse,
    ForecastTableResponse,
    ImportReportResponse,
)
from app.services.forecast_service import ForecastService, get_forecast_service
from db.repositories.record_store import RecordStore, RecordStoreError
from ingestion.errors import ImportRejectedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forecasts", tags=["forecasts"])


@router.get("", response_model=ForecastTableResponse)
def get_forecasts(
    months: str = Query(default="all", description="'all' or a number of months from the current month"),
    search: str | None = Query(default=None, description="Case-insensitive description filter"),
    store: RecordStore = Depends(get_record_store),
    service: ForecastService = Depends(get_forecast_service),
) -> ForecastTableResponse:
    try:
        table = service.get_forecast_table(store=store, months=months, search=search)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RecordStoreError as exc:
        logger.error("Error in get_forecasts: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch forecast records from database.",
        ) from exc

    return ForecastTableResponse(
        summary=ForecastSummaryResponse(**table.summary.to_dict()),
        headers=[ForecastHeaderResponse(**header) for header in table.headers],
        rows=table.rows,
    )


@router.post("/upload", response_model=ImportReportResponse, status_code=status.HTTP_201_CREATED)
def upload_forecasts(
    upload: SpreadsheetUpload = Depends(get_forecast_upload),
    replace_existing: bool = Form(default=True),
    store: RecordStore = Depends(get_record_store),
    service: ForecastService = Depends(get_forecast_service),
) -> ImportReportResponse:
    try:
        report = service.import_file(
            store=store,
            content=upload.content,
            filename=upload.filename,
            content_type=upload.content_type,
            replace_existing=replace_existing,
        )
    except ImportRejectedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc

    return ImportReportResponse(
        **report.to_dict(),
        message=(
            f"Forecast data imported. {report.success_count} products processed, "
            f"{report.forecast_count or 0} forecast entries created."
        ),
    )
