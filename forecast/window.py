"""
forecast/window.py

Calendar window used to filter forecast retrieval.
"""

from __future__ import annotations

import calendar
from datetime import date

ALL_MONTHS = "all"


def parse_months(value: str | int | None) -> int | None:
    """
    ``"all"`` (or nothing) means no window; otherwise a positive month count.
    """

    if value is None:
        return None
    if isinstance(value, int):
        months = value
    else:
        raw = value.strip().lower()
        if raw in {"", ALL_MONTHS}:
            return None
        try:
            months = int(raw)
        except ValueError as exc:
            raise ValueError(f"months must be 'all' or a positive integer, got {value!r}.") from exc
    if months < 1:
        raise ValueError(f"months must be 'all' or a positive integer, got {value!r}.")
    return months


def month_window(months: int, today: date) -> tuple[date, date]:
    """
    First day of the current month through the last day of the month
    ``months - 1`` months later.
    """

    start = date(today.year, today.month, 1)
    month_index = today.month - 1 + months - 1
    end_year = today.year + month_index // 12
    end_month = month_index % 12 + 1
    end = date(end_year, end_month, calendar.monthrange(end_year, end_month)[1])
    return start, end
