"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.forecast import Forecast
from db.models.product import Product
from db.models.soh_record import SohRecord

__all__ = [
    "Forecast",
    "Product",
    "SohRecord",
]
