"""Services package."""

from expense_tracker.services.storage import (
    BackendError,
    InMemoryKeyValueStore,
    JSONFileKeyValueStore,
    KeyValueStateBackend,
    KeyValueStore,
    SnapshotBackend,
    SQLiteRecordBackend,
    StateBackend,
    StorageError,
)

__all__ = [
    # Storage services
    "BackendError",
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "KeyValueStateBackend",
    "KeyValueStore",
    "SnapshotBackend",
    "SQLiteRecordBackend",
    "StateBackend",
    "StorageError",
]
