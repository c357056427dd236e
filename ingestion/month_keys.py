"""
ingestion/month_keys.py

Month-year header tokens ("Jan-24", "Dec-2024") and canonical YYYY-MM keys.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

# Short header token used when scoring candidate header rows.
DATE_LIKE_TOKEN = re.compile(r"^[A-Za-z]{3}-[0-9]{2}$")

_YEAR_DIGITS = re.compile(r"[0-9]{2}|[0-9]{4}")


def is_date_like(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    return isinstance(value, str) and bool(DATE_LIKE_TOKEN.match(value.strip()))


def parse_month_key(token: Any) -> str | None:
    """
    Convert a month-year header token into ``YYYY-MM``.

    Returns None for anything that is not a recognised month label, so
    callers can treat it as an ordinary column.
    """

    if isinstance(token, (date, datetime)):
        return f"{token.year:04d}-{token.month:02d}"
    if not isinstance(token, str):
        return None

    parts = token.strip().split("-")
    if len(parts) != 2:
        return None

    month_part, year_part = (part.strip() for part in parts)
    month_part = month_part.lower()
    if month_part not in MONTH_ABBREVIATIONS:
        return None
    if not _YEAR_DIGITS.fullmatch(year_part):
        return None
    year = f"20{year_part}" if len(year_part) == 2 else year_part

    month = MONTH_ABBREVIATIONS.index(month_part) + 1
    return f"{year}-{month:02d}"


def format_month_label(month_key: str) -> str:
    """
    ``"2024-01"`` -> ``"Jan-24"``.
    """

    year, month = month_key.split("-")
    return f"{MONTH_ABBREVIATIONS[int(month) - 1].capitalize()}-{year[-2:]}"


def month_key_of(value: Any) -> str:
    """
    Month key of a stored forecast date (``date`` or ISO string).
    """

    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    return str(value)[:7]


def first_day_of(month_key: str) -> date:
    year, month = month_key.split("-")
    return date(int(year), int(month), 1)
