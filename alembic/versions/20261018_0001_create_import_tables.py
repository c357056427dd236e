"""create products, forecasts and soh tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_code", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("import_batch_id", sa.String(length=64), nullable=True),
        sa.Column("import_source", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_products"),
        sa.UniqueConstraint("product_code", name="uq_products_product_code"),
    )

    op.create_table(
        "forecasts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_code", sa.String(length=120), nullable=False),
        sa.Column("forecast_date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("import_batch_id", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_forecasts"),
        sa.ForeignKeyConstraint(
            ["product_code"],
            ["products.product_code"],
            name="fk_forecasts_product_code_products",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_forecasts_product_code", "forecasts", ["product_code"], unique=False)
    op.create_index("ix_forecasts_forecast_date", "forecasts", ["forecast_date"], unique=False)

    op.create_table(
        "soh",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_id", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("stock_on_hand", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("default_uom", sa.String(length=32), nullable=True),
        sa.Column("locations", sa.Text(), nullable=True),
        sa.Column("ean", sa.String(length=64), nullable=True),
        sa.Column("weight_kg", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("volume_m3", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("import_batch_id", sa.String(length=64), nullable=True),
        sa.Column("import_source", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_soh"),
        sa.UniqueConstraint("product_id", name="uq_soh_product_id"),
    )
    op.create_index("ix_soh_import_batch_id", "soh", ["import_batch_id"], unique=False)
    op.create_index("ix_soh_created_at", "soh", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_soh_created_at", table_name="soh")
    op.drop_index("ix_soh_import_batch_id", table_name="soh")
    op.drop_table("soh")
    op.drop_index("ix_forecasts_forecast_date", table_name="forecasts")
    op.drop_index("ix_forecasts_product_code", table_name="forecasts")
    op.drop_table("forecasts")
    op.drop_table("products")
