"""
Persistence Reconciler

Keeps the tracker state durable across sessions by writing it through to
several independent backends and deciding, on load, which of them wins.

WRITE PATH (persist):
- Every backend is attempted, concurrently and independently
- A failing backend is logged and reported in the result, never raised
- In-memory state stays authoritative whatever the storage outcome

READ PATH (load):
1. Records, then budget, from the first ranked backend that holds each
   (primary before fallback)
2. Amounts are coerced to finite numbers by the record model
3. The structured backend is read alongside; its records are adopted only
   when the ranked backends produced none, its budget only when theirs is
   exactly 0
4. Unreadable backends are skipped; nothing at all yields an empty state

The merge in step 3 runs after both reads complete, so the structured
result can never override a non-empty ranked result whichever finishes
first.
"""

import asyncio
from typing import Optional, Sequence

import structlog

from expense_tracker.models.expense import LoadedState, TrackerState
from expense_tracker.services.storage.interface import StateBackend


logger = structlog.get_logger(__name__)


# =============================================================================
# PURE MERGE FUNCTIONS
# =============================================================================

def merge_ranked(states: Sequence[LoadedState]) -> LoadedState:
    """
    Key-by-key priority merge: each key comes from the first state holding it.
    """
    records = next((s.records for s in states if s.records is not None), None)
    budget = next((s.budget for s in states if s.budget is not None), None)
    return LoadedState(records=records, budget=budget)


def reconcile_loaded_state(
    base: LoadedState,
    structured: Optional[LoadedState] = None,
) -> TrackerState:
    """
    Combine the ranked result with the structured backend's result.

    This is a backfill, not a merge of collections: structured records are
    taken only if the base has zero records, and the structured budget only
    if the base budget is exactly 0.
    """
    records = list(base.records or [])
    budget = base.budget or 0.0

    if structured is not None:
        if not records and structured.records:
            records = list(structured.records)
        if budget == 0 and structured.budget is not None:
            budget = structured.budget

    return TrackerState(records=records, budget=budget)


# =============================================================================
# RECONCILER
# =============================================================================

class PersistenceReconciler:
    """
    Writes tracker state through to every backend and reconciles on load.
    """

    def __init__(
        self,
        ranked: Sequence[StateBackend],
        structured: Optional[StateBackend] = None,
        snapshot: Optional[StateBackend] = None,
    ):
        """
        Initialize the reconciler.

        Args:
            ranked: Key-value backends in priority order (primary first)
            structured: Record-keyed backend used for backfill on load
            snapshot: Backend holding the restorable snapshot
        """
        self._ranked = list(ranked)
        self._structured = structured
        self._snapshot = snapshot

    @property
    def backends(self) -> list[StateBackend]:
        """Every backend a persist() writes to."""
        extra = [b for b in (self._structured, self._snapshot) if b is not None]
        return self._ranked + extra

    # -------------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------------

    async def persist(self, state: TrackerState) -> dict[str, bool]:
        """
        Write state to every backend.

        Returns:
            {backend name: True if the write succeeded}
        """
        backends = self.backends
        outcomes = await asyncio.gather(
            *(self._attempt(backend, "save", backend.save(state)) for backend in backends)
        )
        results = {backend.name: ok for backend, ok in zip(backends, outcomes)}
        logger.debug("state_persisted", records=len(state.records), results=results)
        return results

    async def clear(self) -> dict[str, bool]:
        """Best-effort removal of the tracker's data from every backend."""
        backends = self.backends
        outcomes = await asyncio.gather(
            *(self._attempt(backend, "clear", backend.clear()) for backend in backends)
        )
        return {backend.name: ok for backend, ok in zip(backends, outcomes)}

    # -------------------------------------------------------------------------
    # Read path
    # -------------------------------------------------------------------------

    async def load(self) -> TrackerState:
        """
        Reconcile every backend into one state. Never raises for storage
        problems.
        """
        if self._structured is not None:
            base, structured = await asyncio.gather(
                self._load_ranked(),
                self._safe_load(self._structured),
            )
        else:
            base, structured = await self._load_ranked(), None

        state = reconcile_loaded_state(base, structured)
        logger.info(
            "state_loaded",
            records=len(state.records),
            budget=state.budget,
            backfilled=bool(structured and not base.records and state.records),
        )
        return state

    async def restore_from_snapshot(self) -> Optional[LoadedState]:
        """
        Read the snapshot.

        Returns:
            The decoded snapshot, or None if there is none or it is unreadable
        """
        if self._snapshot is None:
            return None
        loaded = await self._safe_load(self._snapshot)
        if loaded.records is None:
            return None
        return loaded

    async def _load_ranked(self) -> LoadedState:
        loaded = []
        for backend in self._ranked:
            state = await self._safe_load(backend)
            loaded.append(state)
            merged = merge_ranked(loaded)
            if merged.records is not None and merged.budget is not None:
                return merged
        return merge_ranked(loaded)

    async def _safe_load(self, backend: StateBackend) -> LoadedState:
        try:
            return await backend.load()
        except Exception as e:
            logger.error("backend_load_failed", backend=backend.name, error=str(e))
            return LoadedState()

    async def _attempt(self, backend: StateBackend, operation: str, call) -> bool:
        try:
            await call
            return True
        except Exception as e:
            # Log failure but don't raise
            logger.error(
                f"backend_{operation}_failed",
                backend=backend.name,
                error=str(e),
            )
            return False
