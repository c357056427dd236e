"""
db/models/forecast.py

Long-form forecast facts: exactly one row per product and month.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Forecast(Base):
    __tablename__ = "forecasts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    product_code: Mapped[str] = mapped_column(
        String(120),
        ForeignKey("products.product_code", ondelete="CASCADE"),
        nullable=False,
    )
    forecast_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="First day of the forecast month",
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    import_batch_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("product_code", "forecast_date"),
        Index("ix_forecasts_product_code", "product_code"),
        Index("ix_forecasts_forecast_date", "forecast_date"),
    )
