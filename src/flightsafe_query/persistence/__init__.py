"""Record stores and the tenant-scoped repository.

Includes the Motor-backed MongoDB store, an in-memory store for tests and
local development, and :class:`ScopedRepository` on top of either.
"""

from __future__ import annotations

from .connection import MongoConnectionManager
from .exceptions import MongoConnectionError, MongoPersistenceError, MongoQueryError
from .mapper import RecordMapper
from .memory_store import InMemoryRecordStore
from .mongo_store import MongoRecordStore
from .query_builder import MongoQueryBuilder
from .repository import (
    BulkWriteAborted,
    BulkWriteFailure,
    BulkWriteReport,
    ScopedRepository,
)

__all__ = [
    "BulkWriteAborted",
    "BulkWriteFailure",
    "BulkWriteReport",
    "InMemoryRecordStore",
    "MongoConnectionError",
    "MongoConnectionManager",
    "MongoPersistenceError",
    "MongoQueryBuilder",
    "MongoQueryError",
    "MongoRecordStore",
    "RecordMapper",
    "ScopedRepository",
]
