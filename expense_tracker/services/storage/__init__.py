"""
Storage Services Package

Provides the abstract backend interface and the concrete backends the
reconciler writes through to: a JSON file store (primary), an in-memory
session store (fallback), a SQLite record store (structured) and a base64
snapshot.
"""

from expense_tracker.services.storage.interface import (
    BackendError,
    KeyValueStore,
    StateBackend,
    StorageError,
    parse_stored_records,
)
from expense_tracker.services.storage.key_value import (
    InMemoryKeyValueStore,
    JSONFileKeyValueStore,
    KeyValueStateBackend,
)
from expense_tracker.services.storage.snapshot import SnapshotBackend
from expense_tracker.services.storage.sqlite_store import SQLiteRecordBackend

__all__ = [
    # Interfaces
    "KeyValueStore",
    "StateBackend",
    "parse_stored_records",
    # Exceptions
    "BackendError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "KeyValueStateBackend",
    "SQLiteRecordBackend",
    "SnapshotBackend",
]
