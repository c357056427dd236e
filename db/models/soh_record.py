"""
db/models/soh_record.py

Stock-on-hand snapshot imported from spreadsheets.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Float, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class SohRecord(Base, TimestampMixin):
    __tablename__ = "soh"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    product_id: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        unique=True,
        comment="Natural identifier; upsert conflict key",
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    stock_on_hand: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    default_uom: Mapped[str | None] = mapped_column(String(32), nullable=True)
    locations: Mapped[str | None] = mapped_column(Text, nullable=True)
    ean: Mapped[str | None] = mapped_column(String(64), nullable=True)
    weight_kg: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    volume_m3: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    import_batch_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    import_source: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_soh_import_batch_id", "import_batch_id"),
        Index("ix_soh_created_at", "created_at"),
    )
