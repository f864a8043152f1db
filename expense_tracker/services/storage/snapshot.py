"""
Snapshot Backend

Keeps a base64-encoded export document under its own key in a key-value
store. It is written on every persist but only read back by an explicit
restore.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from expense_tracker.codec.documents import (
    FormatError,
    decode_snapshot,
    encode_snapshot,
    read_document,
    to_json,
)
from expense_tracker.models.expense import LoadedState, TrackerState
from expense_tracker.services.storage.interface import (
    BackendError,
    KeyValueStore,
    StateBackend,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotBackend(StateBackend):
    """Base64 JSON snapshot stored under a single key."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "expense_backup",
        clock: Optional[Callable[[], datetime]] = None,
        name: str = "snapshot",
    ):
        self._store = store
        self._key = key
        self._clock = clock or _utcnow
        self.name = name

    async def load(self) -> LoadedState:
        """
        Decode the snapshot.

        A snapshot without a usable budget reports budget None, so the
        caller keeps its current one.
        """
        encoded = await self._store.get_item(self._key)
        if not encoded:
            return LoadedState()
        try:
            return read_document(decode_snapshot(encoded))
        except FormatError as e:
            raise BackendError(self.name, f"Snapshot unreadable: {e}") from e

    async def save(self, state: TrackerState) -> None:
        encoded = encode_snapshot(to_json(state, now=self._clock()))
        try:
            await self._store.set_item(self._key, encoded)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(self.name, f"Write failed: {e}") from e

    async def clear(self) -> None:
        try:
            await self._store.remove_item(self._key)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(self.name, f"Clear failed: {e}") from e
