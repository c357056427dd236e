"""
app/domain package marker.
"""

from app.domain.soh import HeaderAnalysis, SohSummary

__all__ = [
    "HeaderAnalysis",
    "SohSummary",
]
