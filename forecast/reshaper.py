"""
forecast/reshaper.py

Pivots long-form monthly forecast facts into a wide table keyed by month.
No I/O and no persistence happen here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from ingestion.month_keys import format_month_label
from ingestion.types import MonthlyQuantity

STATIC_HEADERS: tuple[dict[str, str], ...] = (
    {"key": "product_code", "label": "Product Code"},
    {"key": "description", "label": "Description"},
)


@dataclass(frozen=True)
class ForecastSummary:
    total_products: int
    total_months: int
    avg_forecast: float
    top_product: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_products": self.total_products,
            "total_months": self.total_months,
            "avg_forecast": self.avg_forecast,
            "top_product": self.top_product,
        }


@dataclass(frozen=True)
class ForecastTable:
    """
    Wide forecast view: one row per product, one column per month.
    """

    headers: list[dict[str, str]]
    rows: list[dict[str, Any]]
    summary: ForecastSummary
    month_keys: list[str] = field(default_factory=list)


class ForecastReshaper:
    """
    Long-to-wide pivot of :class:`MonthlyQuantity` facts.

    Rows appear in the order their product is first encountered. When the
    same product/month pair occurs more than once, the last fact wins; the
    summary still counts every fact.
    """

    def reshape(self, facts: Iterable[MonthlyQuantity]) -> ForecastTable:
        """
        Build the wide table, its headers and summary metrics.

        Parameters
        ----------
        facts:
            Monthly quantities, typically ordered by month ascending.

        Returns
        -------
        ForecastTable
            ``headers`` holds the static product/description headers
            followed by one ``{"key": "YYYY-MM", "label": "Mon-YY"}`` entry
            per distinct month, sorted ascending.
        """
        rows_by_product: dict[str, dict[str, Any]] = {}
        totals_by_product: dict[str, int] = {}
        month_keys: set[str] = set()
        total_quantity = 0
        fact_count = 0

        for fact in facts:
            row = rows_by_product.get(fact.product_code)
            if row is None:
                row = {"product_code": fact.product_code, "description": fact.description}
                rows_by_product[fact.product_code] = row
                totals_by_product[fact.product_code] = 0

            row[fact.month_key] = fact.quantity
            totals_by_product[fact.product_code] += fact.quantity
            month_keys.add(fact.month_key)
            total_quantity += fact.quantity
            fact_count += 1

        sorted_months = sorted(month_keys)
        headers = [dict(header) for header in STATIC_HEADERS]
        headers.extend({"key": key, "label": format_month_label(key)} for key in sorted_months)

        summary = ForecastSummary(
            total_products=len(rows_by_product),
            total_months=len(sorted_months),
            avg_forecast=round(total_quantity / fact_count, 2) if fact_count else 0,
            top_product=_top_product(totals_by_product),
        )
        return ForecastTable(
            headers=headers,
            rows=list(rows_by_product.values()),
            summary=summary,
            month_keys=sorted_months,
        )


def _top_product(totals_by_product: dict[str, int]) -> str | None:
    top_code: str | None = None
    top_total = -1
    for product_code, total in totals_by_product.items():
        if total > top_total:
            top_code = product_code
            top_total = total
    return top_code
