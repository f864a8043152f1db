"""
In-Memory Record Store

The authoritative collection of expenses and the monthly budget while the
application runs. Persistence is somebody else's job: the store only
guarantees that its own state is valid after every operation.

DESIGN DECISION: The store is an explicit object handed to whoever needs
it. There is no module-level instance.
"""

import math
import time
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from expense_tracker.models.expense import (
    ExpenseDraft,
    ExpenseFilter,
    ExpenseRecord,
    TrackerState,
)


class ValidationError(ValueError):
    """Raised when a draft or budget does not meet validation requirements."""

    def __init__(
        self,
        message: str,
        fields: Optional[list[str]] = None,
        missing: bool = False,
    ):
        super().__init__(message)
        self.fields = fields or []
        # True when a required field is absent rather than malformed
        self.missing = missing


class NotFoundError(LookupError):
    """Raised when an operation targets an expense id that does not exist."""


DraftInput = Union[ExpenseDraft, Mapping[str, Any]]


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _parse_draft(draft: DraftInput) -> ExpenseDraft:
    if isinstance(draft, ExpenseDraft):
        return draft
    try:
        return ExpenseDraft.model_validate(dict(draft))
    except PydanticValidationError as e:
        errors = e.errors()
        fields = sorted({str(err["loc"][0]) for err in errors if err.get("loc")})
        missing = [f for f in fields if _is_blank(draft.get(f))]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                fields=fields,
                missing=True,
            ) from e
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in errors
        )
        raise ValidationError(f"Invalid expense: {details}", fields=fields) from e


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class RecordStore:
    """
    Ordered in-memory collection of ExpenseRecord plus the budget.

    Insertion order is kept but carries no meaning; query() always
    re-sorts by date, newest first.
    """

    def __init__(
        self,
        records: Optional[list[ExpenseRecord]] = None,
        budget: float = 0.0,
        id_factory: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize the store.

        Args:
            records: Initial records (ids must be unique)
            budget: Initial monthly budget
            id_factory: Source of candidate ids; defaults to the current
                        time in milliseconds
        """
        self._records: list[ExpenseRecord] = []
        self._budget = 0.0
        self._id_factory = id_factory or _timestamp_ms
        self._last_issued_id = 0
        self.replace_state(TrackerState(records=records or [], budget=budget))

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def records(self) -> list[ExpenseRecord]:
        """Records in insertion order (a copy)."""
        return list(self._records)

    @property
    def budget(self) -> float:
        return self._budget

    def __len__(self) -> int:
        return len(self._records)

    def get(self, record_id: int) -> Optional[ExpenseRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def query(
        self,
        filter: Optional[Union[ExpenseFilter, Mapping[str, Any]]] = None,
    ) -> list[ExpenseRecord]:
        """
        Filtered view, sorted by date descending.

        Args:
            filter: ExpenseFilter or a mapping of its fields.
                    None (or all-empty fields) returns every record.
        """
        if filter is None:
            criteria = ExpenseFilter()
        elif isinstance(filter, ExpenseFilter):
            criteria = filter
        else:
            criteria = ExpenseFilter.model_validate(dict(filter))

        matched = [record for record in self._records if criteria.matches(record)]
        matched.sort(key=lambda r: r.date, reverse=True)
        return matched

    def snapshot(self) -> TrackerState:
        """The current state, detached from the store."""
        return TrackerState(records=list(self._records), budget=self._budget)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, draft: DraftInput) -> ExpenseRecord:
        """
        Create a record from a draft.

        Raises:
            ValidationError: If a required field is missing or the amount
                             is not a finite number greater than zero
        """
        parsed = _parse_draft(draft)
        record = parsed.to_record(self._next_id())
        self._records.append(record)
        return record

    def update(self, record_id: int, draft: DraftInput) -> ExpenseRecord:
        """
        Replace the record with this id, keeping the id and its position.

        Raises:
            ValidationError: If the draft is invalid
            NotFoundError: If no record has this id
        """
        parsed = _parse_draft(draft)
        for index, existing in enumerate(self._records):
            if existing.id == record_id:
                record = parsed.to_record(record_id)
                self._records[index] = record
                return record
        raise NotFoundError(f"Expense not found: {record_id}")

    def remove(self, record_id: int) -> bool:
        """
        Delete the record with this id.

        Returns True if a record was removed; an absent id is a no-op.
        """
        remaining = [r for r in self._records if r.id != record_id]
        removed = len(remaining) != len(self._records)
        self._records = remaining
        return removed

    def set_budget(self, amount: Any) -> float:
        """
        Overwrite the monthly budget.

        Raises:
            ValidationError: If amount is not a finite number greater than zero
        """
        if _is_blank(amount):
            raise ValidationError("Budget is required", fields=["budget"], missing=True)
        if isinstance(amount, bool):
            raise ValidationError("Budget must be a number", fields=["budget"])
        try:
            value = float(amount)
        except (TypeError, ValueError) as e:
            raise ValidationError("Budget must be a number", fields=["budget"]) from e
        if not math.isfinite(value) or value <= 0:
            raise ValidationError(
                "Budget must be a finite number greater than zero",
                fields=["budget"],
            )
        self._budget = value
        return value

    def clear(self) -> None:
        """Remove every record and reset the budget to 0."""
        self._records = []
        self._budget = 0.0

    def replace_state(self, state: TrackerState) -> None:
        """
        Swap in a whole state (load, import, backup restore).

        Raises:
            ValidationError: If the incoming records contain duplicate ids
        """
        ids = [record.id for record in state.records]
        if len(ids) != len(set(ids)):
            raise ValidationError("Duplicate expense ids", fields=["id"])
        self._records = list(state.records)
        self._budget = state.budget

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _next_id(self) -> int:
        """
        Next id: the clock reading, bumped past every id seen so far.
        """
        floor = max(
            [record.id for record in self._records] + [self._last_issued_id]
        )
        candidate = self._id_factory()
        if candidate <= floor:
            candidate = floor + 1
        self._last_issued_id = candidate
        return candidate
