"""Persistence reconciliation package."""

from expense_tracker.persistence.reconciler import (
    PersistenceReconciler,
    merge_ranked,
    reconcile_loaded_state,
)

__all__ = ["PersistenceReconciler", "merge_ranked", "reconcile_loaded_state"]
