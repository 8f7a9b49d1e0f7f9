"""
Record store access.

- RecordStore: contract the catalog and cart mirror depend on
- SupabaseRecordStore: PostgREST implementation
"""
from .base import BaseRepository, RecordStore, StoreResponse
from .record_store import SupabaseRecordStore

__all__ = [
    "BaseRepository",
    "RecordStore",
    "StoreResponse",
    "SupabaseRecordStore",
]
