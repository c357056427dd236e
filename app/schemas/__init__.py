"""
app/schemas package marker.
"""

from app.schemas.imports import (
    DeleteResponse,
    ForecastHeaderResponse,
    ForecastSummaryResponse,
    ForecastTableResponse,
    HeaderAnalysisResponse,
    ImportReportResponse,
    SohListResponse,
    SohSummaryResponse,
)

__all__ = [
    "DeleteResponse",
    "ForecastHeaderResponse",
    "ForecastSummaryResponse",
    "ForecastTableResponse",
    "HeaderAnalysisResponse",
    "ImportReportResponse",
    "SohListResponse",
    "SohSummaryResponse",
]
