"""
app/api/routers package marker.
"""

from app.api.routers.forecasts import router as forecasts_router
from app.api.routers.soh import router as soh_router

__all__ = [
    "forecasts_router",
    "soh_router",
]
