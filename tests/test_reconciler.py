"""Tests for the persistence reconciler."""

import asyncio

import pytest

from expense_tracker.models.expense import LoadedState, TrackerState
from expense_tracker.persistence import (
    PersistenceReconciler,
    merge_ranked,
    reconcile_loaded_state,
)

from tests.conftest import FailingBackend, FakeBackend, make_record


RECORDS_A = [make_record(1, "2024-03-01"), make_record(2, "2024-03-02")]
RECORDS_B = [make_record(10, "2024-02-01")]


class SlowBackend(FakeBackend):
    """FakeBackend whose load completes after a delay."""

    def __init__(self, name, loaded, delay):
        super().__init__(name, loaded)
        self.delay = delay

    async def load(self):
        await asyncio.sleep(self.delay)
        return await super().load()


class TestMergeFunctions:
    """Tests for the pure merge functions."""

    def test_merge_ranked_is_key_by_key(self):
        """Test that records and budget may come from different backends."""
        primary = LoadedState(records=RECORDS_A)
        fallback = LoadedState(records=RECORDS_B, budget=400)
        merged = merge_ranked([primary, fallback])
        assert merged.records == RECORDS_A
        assert merged.budget == 400

    def test_empty_list_beats_lower_ranked_records(self):
        """Test that a stored empty list counts as a value."""
        merged = merge_ranked([LoadedState(records=[]), LoadedState(records=RECORDS_B)])
        assert merged.records == []

    def test_structured_backfill_only_when_base_is_empty(self):
        """Test that structured records never override existing ones."""
        base = LoadedState(records=RECORDS_A, budget=100)
        structured = LoadedState(records=RECORDS_B, budget=900)
        state = reconcile_loaded_state(base, structured)
        assert state.records == RECORDS_A
        assert state.budget == 100

    def test_structured_budget_when_base_budget_is_zero(self):
        """Test that a zero base budget is backfilled."""
        state = reconcile_loaded_state(
            LoadedState(records=RECORDS_A, budget=0.0),
            LoadedState(records=[], budget=900),
        )
        assert state.budget == 900

    def test_nothing_anywhere_is_empty_state(self):
        """Test that no data at all gives an empty state."""
        assert reconcile_loaded_state(LoadedState(), LoadedState()) == TrackerState()


class TestLoad:
    """Tests for PersistenceReconciler.load."""

    @pytest.mark.asyncio
    async def test_primary_wins(self):
        """Test that the primary backend outranks the fallback."""
        reconciler = PersistenceReconciler([
            FakeBackend("primary", LoadedState(records=RECORDS_A, budget=100)),
            FakeBackend("fallback", LoadedState(records=RECORDS_B, budget=200)),
        ])
        state = await reconciler.load()
        assert state.records == RECORDS_A
        assert state.budget == 100

    @pytest.mark.asyncio
    async def test_fallback_used_when_primary_fails(self):
        """Test that a failing primary is skipped."""
        reconciler = PersistenceReconciler([
            FailingBackend("primary"),
            FakeBackend("fallback", LoadedState(records=RECORDS_B, budget=200)),
        ])
        state = await reconciler.load()
        assert state.records == RECORDS_B
        assert state.budget == 200

    @pytest.mark.asyncio
    async def test_structured_only_backfill(self):
        """Test that structured records fill an empty primary, budget staying 0."""
        reconciler = PersistenceReconciler(
            [FakeBackend("primary"), FakeBackend("fallback")],
            structured=FakeBackend("structured", LoadedState(records=RECORDS_A)),
        )
        state = await reconciler.load()
        assert state.records == RECORDS_A
        assert state.budget == 0

    @pytest.mark.asyncio
    async def test_backfill_independent_of_completion_order(self):
        """Test that a fast structured read cannot override a slow primary."""
        reconciler = PersistenceReconciler(
            [SlowBackend("primary", LoadedState(records=RECORDS_A, budget=50), delay=0.05)],
            structured=SlowBackend("structured", LoadedState(records=RECORDS_B, budget=9), delay=0),
        )
        state = await reconciler.load()
        assert state.records == RECORDS_A
        assert state.budget == 50

    @pytest.mark.asyncio
    async def test_everything_failing_gives_empty_state(self):
        """Test that load never raises for storage failures."""
        reconciler = PersistenceReconciler(
            [FailingBackend("primary"), FailingBackend("fallback")],
            structured=FailingBackend("structured"),
        )
        assert await reconciler.load() == TrackerState()


class TestPersistAndClear:
    """Tests for the write path."""

    @pytest.mark.asyncio
    async def test_persist_writes_every_backend(self):
        """Test that the state reaches all four backends."""
        backends = [FakeBackend("primary"), FakeBackend("fallback")]
        structured = FakeBackend("structured")
        snapshot = FakeBackend("snapshot")
        reconciler = PersistenceReconciler(backends, structured=structured, snapshot=snapshot)
        state = TrackerState(records=RECORDS_A, budget=300)

        results = await reconciler.persist(state)

        assert results == {"primary": True, "fallback": True, "structured": True, "snapshot": True}
        for backend in backends + [structured, snapshot]:
            assert backend.saved == [state]

    @pytest.mark.asyncio
    async def test_failing_backend_does_not_block_others(self):
        """Test that one failure is reported, not raised."""
        fallback = FakeBackend("fallback")
        reconciler = PersistenceReconciler([FailingBackend("primary"), fallback])

        results = await reconciler.persist(TrackerState(records=RECORDS_B))

        assert results == {"primary": False, "fallback": True}
        assert len(fallback.saved) == 1

    @pytest.mark.asyncio
    async def test_clear_reaches_snapshot(self):
        """Test that clearing includes the snapshot backend."""
        snapshot = FakeBackend("snapshot", LoadedState(records=RECORDS_A))
        primary = FakeBackend("primary")
        reconciler = PersistenceReconciler([primary], snapshot=snapshot)

        results = await reconciler.clear()

        assert results == {"primary": True, "snapshot": True}
        assert snapshot.cleared == 1
        assert await reconciler.restore_from_snapshot() is None


class TestSnapshot:
    """Tests for restore_from_snapshot."""

    @pytest.mark.asyncio
    async def test_no_snapshot_backend(self):
        """Test that a reconciler without a snapshot returns None."""
        assert await PersistenceReconciler([FakeBackend("primary")]).restore_from_snapshot() is None

    @pytest.mark.asyncio
    async def test_snapshot_returned(self):
        """Test that a stored snapshot is returned as loaded."""
        snapshot = FakeBackend("snapshot", LoadedState(records=RECORDS_B, budget=70))
        loaded = await PersistenceReconciler([], snapshot=snapshot).restore_from_snapshot()
        assert loaded.records == RECORDS_B
        assert loaded.budget == 70

    @pytest.mark.asyncio
    async def test_unreadable_snapshot_is_none(self):
        """Test that a failing snapshot read is treated as absent."""
        reconciler = PersistenceReconciler([], snapshot=FailingBackend("snapshot"))
        assert await reconciler.restore_from_snapshot() is None
