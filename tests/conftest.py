"""Shared fixtures for the expense tracker tests."""

from datetime import date, datetime, timezone

import pytest

from expense_tracker.models.expense import ExpenseRecord, LoadedState, TrackerState
from expense_tracker.services.storage.interface import BackendError, StateBackend


def make_record(
    record_id: int,
    day: str,
    category: str = "Food",
    amount: float = 100.0,
    description: str = "",
) -> ExpenseRecord:
    return ExpenseRecord(
        id=record_id,
        date=date.fromisoformat(day),
        category=category,
        amount=amount,
        description=description,
    )


class FakeBackend(StateBackend):
    """In-test backend that returns a fixed LoadedState and records saves."""

    def __init__(self, name: str, loaded: LoadedState = None):
        self.name = name
        self.loaded = loaded or LoadedState()
        self.saved: list[TrackerState] = []
        self.cleared = 0

    async def load(self) -> LoadedState:
        return self.loaded

    async def save(self, state: TrackerState) -> None:
        self.saved.append(state)
        self.loaded = LoadedState(records=list(state.records), budget=state.budget)

    async def clear(self) -> None:
        self.cleared += 1
        self.loaded = LoadedState()


class FailingBackend(StateBackend):
    """Backend whose every operation fails."""

    def __init__(self, name: str = "broken"):
        self.name = name

    async def load(self) -> LoadedState:
        raise BackendError(self.name, "unavailable")

    async def save(self, state: TrackerState) -> None:
        raise BackendError(self.name, "unavailable")

    async def clear(self) -> None:
        raise BackendError(self.name, "unavailable")


@pytest.fixture
def fixed_now() -> datetime:
    """Wednesday, 20 March 2024."""
    return datetime(2024, 3, 20, 10, 15, tzinfo=timezone.utc)


@pytest.fixture
def march_records() -> list[ExpenseRecord]:
    return [
        make_record(1, "2024-03-01", "Food", 100),
        make_record(2, "2024-03-15", "Food", 50),
        make_record(3, "2024-04-01", "Rent", 500),
    ]
