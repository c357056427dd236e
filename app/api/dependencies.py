"""
app/api/dependencies.py

Shared FastAPI dependencies for upload validation and store access.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_upload_settings
from db.repositories.record_store import RecordStore
from db.repositories.sqlalchemy_store import SQLAlchemyRecordStore
from db.session import get_db

ALLOWED_EXTENSIONS = {".csv", ".xls", ".xlsx"}
ALLOWED_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass(frozen=True)
class SpreadsheetUpload:
    """
    Validated upload, fully read into memory.
    """

    filename: str
    content_type: str | None
    content: bytes


def read_spreadsheet_upload(file: UploadFile) -> SpreadsheetUpload:
    """
    Validate type and size of an uploaded spreadsheet and read its bytes.
    """

    filename = (file.filename or "").strip()
    content_type = (file.content_type or "").strip().lower() or None
    extension = Path(filename).suffix.lower()

    if extension not in ALLOWED_EXTENSIONS and content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only Excel (.xlsx, .xls) and CSV files are allowed.",
        )

    max_bytes = get_upload_settings().max_upload_bytes
    try:
        content = file.file.read(max_bytes + 1)
    finally:
        file.file.close()

    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file content is empty.",
        )
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Uploaded file exceeds configured size limit.",
        )

    return SpreadsheetUpload(filename=filename, content_type=content_type, content=content)


def get_spreadsheet_upload(file: UploadFile = File(...)) -> SpreadsheetUpload:
    return read_spreadsheet_upload(file)


def get_forecast_upload(forecast_file: UploadFile = File(..., alias="forecastFile")) -> SpreadsheetUpload:
    return read_spreadsheet_upload(forecast_file)


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return SQLAlchemyRecordStore(db)
