"""
Repository layer exports.
"""

from db.repositories.record_store import QueryFilter, RecordStore, RecordStoreError
from db.repositories.sqlalchemy_store import SQLAlchemyRecordStore

__all__ = [
    "QueryFilter",
    "RecordStore",
    "RecordStoreError",
    "SQLAlchemyRecordStore",
]
