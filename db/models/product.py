"""
db/models/product.py

Products referenced by forecast facts.
"""

from __future__ import annotations

import uuid

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    product_code: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        unique=True,
        comment="Natural identifier; upsert conflict key",
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    import_batch_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    import_source: Mapped[str | None] = mapped_column(String(255), nullable=True)
