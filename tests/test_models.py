"""
Tests for the Expense Tracker models

Test strategy:
1. Unit tests for individual components (models, store, codec, aggregator)
2. Integration tests for flows (with fake and on-disk backends)
3. No network or UI in tests
"""

from datetime import date

import pytest

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

from tests.conftest import make_record


class TestCoerceAmount:
    """Tests for reading stored amounts."""

    def test_numeric_strings_are_parsed(self):
        """Test that numeric strings become floats."""
        assert coerce_amount("250.5") == 250.5
        assert coerce_amount(40) == 40.0

    def test_unreadable_values_become_zero(self):
        """Test that garbage, None and booleans become 0."""
        assert coerce_amount("abc") == 0.0
        assert coerce_amount(None) == 0.0
        assert coerce_amount(True) == 0.0
        assert coerce_amount([1]) == 0.0

    def test_non_finite_values_become_zero(self):
        """Test that inf and nan never leak into totals."""
        assert coerce_amount("inf") == 0.0
        assert coerce_amount(float("nan")) == 0.0


class TestExpenseRecord:
    """Tests for the stored expense model."""

    def test_record_creation(self):
        """Test ExpenseRecord creation from stored values."""
        record = ExpenseRecord(
            id=1710929700000,
            date="2024-03-20",
            category="  Food  ",
            amount="120",
            description="Vegetables",
        )
        assert record.date == date(2024, 3, 20)
        assert record.category == "Food"
        assert record.amount == 120.0

    def test_unparsable_amount_is_zero(self):
        """Test that a corrupt amount does not reject the record."""
        record = ExpenseRecord(id=1, date="2024-03-20", amount="twelve")
        assert record.amount == 0.0

    def test_missing_text_fields_default_to_empty(self):
        """Test that None category and description become empty strings."""
        record = ExpenseRecord(id=1, date="2024-03-20", category=None, description=None)
        assert record.category == ""
        assert record.description == ""

    def test_invalid_date_is_rejected(self):
        """Test that a record without a usable date cannot be built."""
        with pytest.raises(ValueError):
            ExpenseRecord(id=1, date="not-a-date")

    def test_record_is_immutable(self):
        """Test that records are frozen."""
        record = make_record(1, "2024-03-20")
        with pytest.raises(ValueError):
            record.amount = 5

    def test_to_storage_dict(self):
        """Test the persisted shape of a record."""
        record = make_record(7, "2024-03-20", "Travel", 80.5, "Bus")
        assert record.to_storage_dict() == {
            "id": 7,
            "date": "2024-03-20",
            "category": "Travel",
            "amount": 80.5,
            "description": "Bus",
        }


class TestExpenseDraft:
    """Tests for user-submitted expense data."""

    def test_draft_to_record_keeps_fields(self):
        """Test that a draft becomes a record with the given id."""
        draft = ExpenseDraft(date="2024-03-20", category="Food", amount=99.5)
        record = draft.to_record(42)
        assert record.id == 42
        assert record.amount == 99.5
        assert record.description == ""

    @pytest.mark.parametrize("amount", [0, -10, float("inf"), float("nan")])
    def test_draft_rejects_bad_amounts(self, amount):
        """Test that the amount must be finite and greater than zero."""
        with pytest.raises(ValueError):
            ExpenseDraft(date="2024-03-20", category="Food", amount=amount)

    def test_draft_requires_category(self):
        """Test that an empty category is rejected."""
        with pytest.raises(ValueError):
            ExpenseDraft(date="2024-03-20", category="   ", amount=10)


class TestExpenseFilter:
    """Tests for list filtering."""

    def test_empty_filter_matches_everything(self):
        """Test that an all-empty filter matches any record."""
        assert ExpenseFilter().matches(make_record(1, "2024-03-20"))

    def test_search_is_case_insensitive_substring(self):
        """Test description search ignores case."""
        record = make_record(1, "2024-03-20", description="Weekly GROCERIES")
        assert ExpenseFilter(search="groceries").matches(record)
        assert not ExpenseFilter(search="rent").matches(record)

    def test_criteria_are_combined(self):
        """Test that category and date must both match."""
        record = make_record(1, "2024-03-20", "Food")
        assert ExpenseFilter(category="Food", date="2024-03-20").matches(record)
        assert not ExpenseFilter(category="Food", date="2024-03-21").matches(record)
        assert not ExpenseFilter(category="food").matches(record)

    def test_blank_date_means_any_date(self):
        """Test that a blank date string is treated as unset."""
        assert ExpenseFilter(date="").date is None


class TestStateModels:
    """Tests for TrackerState and LoadedState."""

    def test_tracker_state_defaults(self):
        """Test that an empty state has no records and budget 0."""
        state = TrackerState()
        assert state.records == []
        assert state.budget == 0.0

    def test_tracker_state_rejects_negative_budget(self):
        """Test that the budget cannot be negative."""
        with pytest.raises(ValueError):
            TrackerState(budget=-1)

    def test_loaded_state_distinguishes_absent_from_empty(self):
        """Test that an empty list is not the same as no value."""
        assert LoadedState().is_empty
        assert not LoadedState(records=[]).is_empty
        assert not LoadedState(budget=0.0).is_empty


class TestActivityModels:
    """Tests for activity event models."""

    def test_activity_event_creation(self):
        """Test ActivityEvent model creation."""
        event = ActivityEvent(
            event_type=ActivityEventType.EXPENSE_ADDED,
            severity=Severity.SUCCESS,
            message="Expense added successfully!",
            details={"expense_id": 1},
        )
        assert event.notify_user is True
        assert event.timestamp.tzinfo is not None

    def test_activity_event_to_log_dict(self):
        """Test conversion to a structured log dict."""
        event = ActivityEvent(
            event_type=ActivityEventType.IMPORT_FAILED,
            severity=Severity.ERROR,
            details={"error": "bad json"},
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "import_failed"
        assert log_dict["severity"] == "error"
        assert log_dict["details"] == {"error": "bad json"}
        assert "timestamp" in log_dict

    def test_event_type_values(self):
        """Test that event types serialize as plain strings."""
        assert ActivityEventType.BUDGET_SET.value == "budget_set"
        assert ActivityEventType("backup_missing") == ActivityEventType.BACKUP_MISSING
