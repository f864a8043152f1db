"""In-memory record store package."""

from expense_tracker.store.record_store import (
    NotFoundError,
    RecordStore,
    ValidationError,
)

__all__ = ["NotFoundError", "RecordStore", "ValidationError"]
