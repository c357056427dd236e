"""
ingestion/errors.py

Exceptions raised while turning an uploaded spreadsheet into records.
"""

from __future__ import annotations

from typing import Any, Sequence


class ImportRejectedError(ValueError):
    """
    Raised when an upload is structurally unusable; nothing is persisted.
    """

    code = "import_rejected"

    def __init__(self, message: str, *, items: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.items = tuple(items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "items": list(self.items),
        }


class GridReadError(ImportRejectedError):
    """Raised when the uploaded bytes cannot be parsed into a grid."""

    code = "unreadable_file"


class HeaderNotFoundError(ImportRejectedError):
    """Raised when no candidate row looks like a header."""

    code = "header_not_found"


class MissingRequiredColumnError(ImportRejectedError):
    """Raised when the identifying column is absent."""

    code = "missing_required_column"


class AmbiguousColumnError(ImportRejectedError):
    """Raised when distinct labels resolve to the same canonical column."""

    code = "ambiguous_column"


class UnsupportedColumnError(ImportRejectedError):
    """Raised when selected columns fall outside the supported schema."""

    code = "unsupported_column"


class ColumnNotFoundError(ImportRejectedError):
    """Raised when a selected label does not appear in the header row."""

    code = "column_not_found"


class RowCoercionError(ValueError):
    """
    Raised when one data row cannot become a record. The row is skipped.
    """
