"""
Data Models Package

This package contains all Pydantic models used by the expense tracker.
"""

from expense_tracker.models.expense import (
    ExpenseDraft,
    ExpenseFilter,
    ExpenseRecord,
    LoadedState,
    TrackerState,
    coerce_amount,
)
from expense_tracker.models.activity import (
    ActivityEvent,
    ActivityEventType,
    Severity,
)

__all__ = [
    # Expense models
    "ExpenseDraft",
    "ExpenseFilter",
    "ExpenseRecord",
    "LoadedState",
    "TrackerState",
    "coerce_amount",
    # Activity models
    "ActivityEvent",
    "ActivityEventType",
    "Severity",
]
