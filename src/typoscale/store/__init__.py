"""Persistence boundary: record store and uploaded-file storage."""

from typoscale.store.file_storage import LocalFileStorage, compute_content_hash
from typoscale.store.record_store import RecordStore, SQLRecordStore

__all__ = [
    "LocalFileStorage",
    "RecordStore",
    "SQLRecordStore",
    "compute_content_hash",
]
