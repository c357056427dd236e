"""
app/services package marker.
"""

from app.services.forecast_service import ForecastService, get_forecast_service
from app.services.soh_import_service import SohImportService, get_soh_import_service

__all__ = [
    "ForecastService",
    "SohImportService",
    "get_forecast_service",
    "get_soh_import_service",
]
