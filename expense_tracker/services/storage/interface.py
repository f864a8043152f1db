"""
Abstract Storage Interface

DESIGN DECISION: Every persistence backend exposes the same three async
operations: load, save, clear. The reconciler ranks and combines them
without knowing what sits underneath (a JSON file, a session dict, a
SQLite table, a base64 snapshot).

Backends raise BackendError for every failure. Deciding whether a
failure matters is the reconciler's job, not the backend's.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from expense_tracker.models.expense import ExpenseRecord, LoadedState, TrackerState


logger = structlog.get_logger(__name__)


class StateBackend(ABC):
    """
    Abstract interface for a backend that persists the whole tracker state.
    """

    #: Name used in logs and in persist() results
    name: str = "backend"

    @abstractmethod
    async def load(self) -> LoadedState:
        """
        Read whatever this backend holds.

        Returns:
            LoadedState with None for every key the backend has no value for

        Raises:
            BackendError: If the backend is unavailable or its data unreadable
        """
        pass

    @abstractmethod
    async def save(self, state: TrackerState) -> None:
        """
        Overwrite the backend's contents with state.

        Raises:
            BackendError: If the write fails
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """
        Remove everything this backend stores for the tracker.

        Raises:
            BackendError: If the removal fails
        """
        pass


class KeyValueStore(ABC):
    """
    String-to-string store, the shape of browser local/session storage.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """Value for key, or None if the key is absent."""
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove key; absent keys are ignored."""
        pass


def parse_stored_records(raw: Iterable[Any], source: str) -> list[ExpenseRecord]:
    """
    Interpret stored record dicts, skipping the ones beyond repair.

    Amounts are coerced by ExpenseRecord itself; only entries without a
    usable id or date are dropped.
    """
    records = []
    seen: set[int] = set()
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning("stored_record_skipped", source=source, index=index, reason="not an object")
            continue
        try:
            record = ExpenseRecord.model_validate(item)
        except PydanticValidationError as e:
            logger.warning(
                "stored_record_skipped",
                source=source,
                index=index,
                reason=e.errors()[0]["msg"],
            )
            continue
        if record.id in seen:
            logger.warning("stored_record_skipped", source=source, index=index, reason="duplicate id")
            continue
        seen.add(record.id)
        records.append(record)
    return records


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class BackendError(StorageError):
    """A storage backend is unavailable or failed an operation."""

    def __init__(self, backend: str, message: str):
        super().__init__(f"{backend}: {message}")
        self.backend = backend
