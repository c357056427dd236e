"""
Forecast retrieval: long-to-wide reshaping and month windows.
"""

from forecast.reshaper import ForecastReshaper, ForecastSummary, ForecastTable
from forecast.window import month_window, parse_months

__all__ = [
    "ForecastReshaper",
    "ForecastSummary",
    "ForecastTable",
    "month_window",
    "parse_months",
]
