"""
SQLite Structured Record Backend

One row per expense, keyed by the expense id, plus one reserved row for
the budget. The budget row's key is a non-numeric sentinel, so it can
never collide with a record id.

Table layout:
    expenses(id TEXT PRIMARY KEY, payload TEXT NOT NULL)

    id = "<record id>"   payload = {"id", "date", "category", "amount", "description"}
    id = "<sentinel>"    payload = {"id": "<sentinel>", "value": <budget>}

Every save replaces the whole table inside one transaction.
"""

import asyncio
import json
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Optional

import structlog
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from expense_tracker.models.expense import LoadedState, TrackerState, coerce_amount
from expense_tracker.services.storage.interface import (
    BackendError,
    StateBackend,
    parse_stored_records,
)


logger = structlog.get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    payload TEXT NOT NULL
)
"""


class SQLiteRecordBackend(StateBackend):
    """Structured record store backed by a SQLite file."""

    def __init__(
        self,
        path: Path,
        budget_key: str = "budget",
        retry_attempts: int = 3,
        name: str = "structured",
    ):
        self._path = Path(path)
        self._budget_key = budget_key
        self._retry_attempts = retry_attempts
        self.name = name

    def _connect(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path)
        conn.execute(SCHEMA)
        return conn

    def _retrying(self) -> Retrying:
        # "database is locked" and friends surface as OperationalError
        return Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            retry=retry_if_exception_type(sqlite3.OperationalError),
            reraise=True,
        )

    # -------------------------------------------------------------------------
    # Synchronous workers (run in a thread)
    # -------------------------------------------------------------------------

    def _load_sync(self) -> tuple[list[dict], Optional[float]]:
        with closing(self._connect()) as conn:
            rows = conn.execute("SELECT id, payload FROM expenses").fetchall()

        raw_records = []
        budget = None
        for key, payload in rows:
            try:
                data = json.loads(payload)
            except json.JSONDecodeError:
                logger.warning("stored_row_skipped", source=self.name, key=key, reason="invalid JSON")
                continue
            if key == self._budget_key:
                value = data.get("value") if isinstance(data, dict) else None
                budget = max(0.0, coerce_amount(value))
            else:
                raw_records.append(data)
        return raw_records, budget

    def _save_sync(self, state: TrackerState) -> None:
        rows = [
            (str(record.id), json.dumps(record.to_storage_dict(), ensure_ascii=False))
            for record in state.records
        ]
        rows.append((
            self._budget_key,
            json.dumps({"id": self._budget_key, "value": state.budget}),
        ))
        for attempt in self._retrying():
            with attempt:
                with closing(self._connect()) as conn:
                    with conn:
                        conn.execute("DELETE FROM expenses")
                        conn.executemany(
                            "INSERT INTO expenses (id, payload) VALUES (?, ?)",
                            rows,
                        )

    def _clear_sync(self) -> None:
        for attempt in self._retrying():
            with attempt:
                with closing(self._connect()) as conn:
                    with conn:
                        conn.execute("DELETE FROM expenses")

    # -------------------------------------------------------------------------
    # StateBackend
    # -------------------------------------------------------------------------

    async def load(self) -> LoadedState:
        try:
            raw_records, budget = await asyncio.to_thread(self._load_sync)
        except sqlite3.Error as e:
            raise BackendError(self.name, f"Read failed: {e}") from e
        return LoadedState(
            records=parse_stored_records(raw_records, source=self.name),
            budget=budget,
        )

    async def save(self, state: TrackerState) -> None:
        try:
            await asyncio.to_thread(self._save_sync, state)
        except (sqlite3.Error, OSError) as e:
            raise BackendError(self.name, f"Write failed: {e}") from e

    async def clear(self) -> None:
        try:
            await asyncio.to_thread(self._clear_sync)
        except (sqlite3.Error, OSError) as e:
            raise BackendError(self.name, f"Clear failed: {e}") from e
