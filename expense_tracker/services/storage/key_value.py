"""
Key-Value Storage Backends

Two key-value stores stand in for the browser's local and session storage:

- JSONFileKeyValueStore: durable, one JSON object in a file. Primary.
- InMemoryKeyValueStore: lives as long as the process. Fallback.

KeyValueStateBackend adapts either of them to the StateBackend interface,
keeping the records as a JSON string under one key and the budget under
another.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from expense_tracker.models.expense import LoadedState, TrackerState, coerce_amount
from expense_tracker.services.storage.interface import (
    BackendError,
    KeyValueStore,
    StateBackend,
    parse_stored_records,
)


logger = structlog.get_logger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Process-scoped key-value store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JSONFileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted as a single JSON object on disk.

    Writes are read-modify-write under a lock and land through an atomic
    rename, so a crash mid-write leaves the previous file intact.
    Transient OS errors are retried before surfacing as BackendError.
    """

    def __init__(self, path: Path, retry_attempts: int = 3, name: str = "local_file"):
        self._path = Path(path)
        self._retry_attempts = retry_attempts
        self._name = name
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            raise BackendError(self._name, f"Cannot read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise BackendError(self._name, f"{self._path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            prefix=self._path.name + "-",
            suffix=".tmp",
            dir=self._path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self._path)
        except OSError:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise

    def _write_with_retry(self, data: dict[str, str]) -> None:
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(multiplier=0.05, max=1),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_all(data)
        except OSError as e:
            raise BackendError(self._name, f"Cannot write {self._path}: {e}") from e

    def _read_for_update(self) -> dict[str, str]:
        """
        Current contents for a read-modify-write.

        An unreadable file is moved aside and replaced by the next write,
        so one corrupt file does not block every later save.
        """
        try:
            return self._read_all()
        except BackendError as e:
            aside = self._path.with_name(self._path.name + ".corrupt")
            logger.warning(
                "unreadable_store_replaced",
                backend=self._name,
                path=str(self._path),
                moved_to=str(aside),
                error=str(e),
            )
            try:
                os.replace(self._path, aside)
            except OSError as move_error:
                logger.warning("corrupt_store_move_failed", path=str(self._path), error=str(move_error))
            return {}

    def _update_sync(self, key: str, value: Optional[str]) -> None:
        data = self._read_for_update()
        if value is None:
            if key not in data:
                return
            data.pop(key)
        else:
            data[key] = value
        self._write_with_retry(data)

    async def get_item(self, key: str) -> Optional[str]:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._update_sync, key, value)

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._update_sync, key, None)


class KeyValueStateBackend(StateBackend):
    """
    Tracker state on top of a KeyValueStore.

    Layout:
        <expenses_key> -> JSON array of records
        <budget_key>   -> budget as a number string
    """

    def __init__(
        self,
        store: KeyValueStore,
        name: str,
        expenses_key: str = "expenses",
        budget_key: str = "budget",
    ):
        self._store = store
        self.name = name
        self._expenses_key = expenses_key
        self._budget_key = budget_key

    async def load(self) -> LoadedState:
        raw_expenses = await self._store.get_item(self._expenses_key)
        raw_budget = await self._store.get_item(self._budget_key)

        records = None
        if raw_expenses:
            try:
                decoded = json.loads(raw_expenses)
            except json.JSONDecodeError as e:
                raise BackendError(self.name, f"Stored expenses are not valid JSON: {e}") from e
            if not isinstance(decoded, list):
                raise BackendError(self.name, "Stored expenses are not a list")
            records = parse_stored_records(decoded, source=self.name)

        budget = None
        if raw_budget:
            budget = max(0.0, coerce_amount(raw_budget))

        return LoadedState(records=records, budget=budget)

    async def save(self, state: TrackerState) -> None:
        payload = json.dumps(
            [record.to_storage_dict() for record in state.records],
            ensure_ascii=False,
        )
        try:
            await self._store.set_item(self._expenses_key, payload)
            await self._store.set_item(self._budget_key, json.dumps(state.budget))
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(self.name, f"Write failed: {e}") from e
        logger.debug("state_saved", backend=self.name, records=len(state.records))

    async def clear(self) -> None:
        try:
            await self._store.remove_item(self._expenses_key)
            await self._store.remove_item(self._budget_key)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(self.name, f"Clear failed: {e}") from e
