"""
app/api/routers/soh.py

Stock-on-hand import and maintenance endpoints.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Query, status

from app.api.dependencies import SpreadsheetUpload, get_record_store, get_spreadsheet_upload
from app.schemas.imports import (
    DeleteResponse,
    HeaderAnalysisResponse,
    ImportReportResponse,
    SohListResponse,
    SohSummaryResponse,
)
from app.services.soh_import_service import SohImportService, get_soh_import_service
from db.repositories.record_store import RecordStore, RecordStoreError
from ingestion.errors import ImportRejectedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/soh", tags=["soh"])


def parse_selected_columns(raw_values: list[str]) -> list[str]:
    """
    Accept repeated form fields or a single JSON array string.
    """

    if len(raw_values) == 1 and raw_values[0].strip().startswith("["):
        try:
            decoded = json.loads(raw_values[0])
        except json.JSONDecodeError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="selected_columns must be a JSON array of strings.",
            ) from exc
        if not isinstance(decoded, list) or not all(isinstance(item, str) for item in decoded):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="selected_columns must be a JSON array of strings.",
            )
        raw_values = decoded

    columns = [value for value in raw_values if value.strip()]
    if not columns:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No columns selected for import.",
        )
    return columns


@router.get("", response_model=SohListResponse)
def list_soh(
    search: str | None = Query(default=None, description="Case-insensitive description filter"),
    product_id: str | None = Query(default=None),
    store: RecordStore = Depends(get_record_store),
    service: SohImportService = Depends(get_soh_import_service),
) -> SohListResponse:
    try:
        records = service.list_records(store=store, search=search, product_id=product_id)
    except RecordStoreError as exc:
        logger.error("Error fetching SOH records: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch SOH records from database.",
        ) from exc
    return SohListResponse(data=records, count=len(records))


@router.get("/summary", response_model=SohSummaryResponse)
def soh_summary(
    store: RecordStore = Depends(get_record_store),
    service: SohImportService = Depends(get_soh_import_service),
) -> SohSummaryResponse:
    try:
        summary = service.summary(store=store)
    except RecordStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get SOH summary.",
        ) from exc
    return SohSummaryResponse(total_records=summary.total_records, latest_import=summary.latest_import)


@router.post("/analyze", response_model=HeaderAnalysisResponse)
def analyze_upload(
    upload: SpreadsheetUpload = Depends(get_spreadsheet_upload),
    service: SohImportService = Depends(get_soh_import_service),
) -> HeaderAnalysisResponse:
    """
    Step one of an import: show the detected header and sample rows.
    """

    try:
        analysis = service.analyze(
            content=upload.content,
            filename=upload.filename,
            content_type=upload.content_type,
        )
    except ImportRejectedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc

    return HeaderAnalysisResponse(
        filename=analysis.filename,
        header_row_index=analysis.header_row_index,
        headers=analysis.headers,
        sample_rows=analysis.sample_rows,
        total_rows=analysis.total_rows,
    )


@router.post("/import", response_model=ImportReportResponse)
def import_soh(
    upload: SpreadsheetUpload = Depends(get_spreadsheet_upload),
    selected_columns: list[str] = Form(...),
    replace_existing: bool = Form(default=False),
    store: RecordStore = Depends(get_record_store),
    service: SohImportService = Depends(get_soh_import_service),
) -> ImportReportResponse:
    """
    Step two of an import: persist the selected columns.
    """

    columns = parse_selected_columns(selected_columns)
    try:
        report = service.import_file(
            store=store,
            content=upload.content,
            filename=upload.filename,
            content_type=upload.content_type,
            selected_columns=columns,
            replace_existing=replace_existing,
        )
    except ImportRejectedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc

    return ImportReportResponse(
        **report.to_dict(),
        message=(
            f"Import completed: {report.success_count} records imported, {report.error_count} errors. "
            f"Imported columns: {', '.join(report.columns_imported)}"
        ),
    )


@router.delete("", response_model=DeleteResponse)
def delete_soh(
    store: RecordStore = Depends(get_record_store),
    service: SohImportService = Depends(get_soh_import_service),
) -> DeleteResponse:
    try:
        deleted = service.delete_all(store=store)
    except RecordStoreError as exc:
        logger.error("Error deleting SOH data: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete SOH data.",
        ) from exc
    return DeleteResponse(deleted=deleted, message="All SOH data deleted successfully")
