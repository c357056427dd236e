"""one forecast fact per product and month

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 15:30:00
"""

from __future__ import annotations

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Keep the most recently written fact for each (product_code, forecast_date).
    op.execute(
        """
        DELETE FROM forecasts AS older
        USING forecasts AS newer
        WHERE older.product_code = newer.product_code
          AND older.forecast_date = newer.forecast_date
          AND (older.created_at, older.id::text) < (newer.created_at, newer.id::text)
        """
    )
    op.create_unique_constraint(
        "uq_forecasts_product_code_forecast_date",
        "forecasts",
        ["product_code", "forecast_date"],
    )


def downgrade() -> None:
    op.drop_constraint("uq_forecasts_product_code_forecast_date", "forecasts", type_="unique")
