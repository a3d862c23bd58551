"""
app/repositories package marker.
"""

from app.repositories.record_store import RecordStore
from app.repositories.sqlalchemy_record_store import SqlAlchemyRecordStore

__all__ = [
    "RecordStore",
    "SqlAlchemyRecordStore",
]
