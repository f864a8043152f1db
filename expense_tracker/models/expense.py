"""
Core Data Models for the Expense Tracker

These models define the schemas for everything the tracker stores,
filters and exchanges with its storage backends.

DESIGN DECISION: Two record shapes exist on purpose.
- ExpenseDraft is what a form submits. It is strict: date, category and a
  finite, positive amount are required.
- ExpenseRecord is what storage holds. Its read path is lenient: an
  unparsable amount becomes 0 instead of rejecting the whole collection.
"""

import datetime as dt
import math
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def coerce_amount(value: Any) -> float:
    """
    Read a stored amount as a finite float.

    Anything that cannot be read as a finite number becomes 0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseRecord(BaseModel):
    """
    A stored expense.

    `id` is assigned once at creation and never changes, including on edit.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: int = Field(
        ...,
        description="Unique identifier, derived from the creation timestamp (ms)"
    )
    date: dt.date = Field(
        ...,
        description="Day the expense occurred (not when it was entered)"
    )
    category: str = Field(
        default="",
        description="Open-ended category label"
    )
    amount: float = Field(
        default=0.0,
        description="Amount spent; unreadable stored values become 0"
    )
    description: str = Field(
        default="",
        description="Optional free text"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def normalize_amount(cls, v: Any) -> float:
        return coerce_amount(v)

    @field_validator('category', 'description', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    def to_storage_dict(self) -> dict:
        """Plain JSON-compatible dict, the shape every backend persists."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "category": self.category,
            "amount": self.amount,
            "description": self.description,
        }


class ExpenseDraft(BaseModel):
    """
    Expense data submitted by the user before it becomes a record.

    All required fields must be present and the amount must be a finite
    number greater than zero.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: dt.date = Field(
        ...,
        description="Day the expense occurred"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category label"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount spent"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="Optional free text"
    )

    @field_validator('description', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    def to_record(self, record_id: int) -> ExpenseRecord:
        return ExpenseRecord(
            id=record_id,
            date=self.date,
            category=self.category,
            amount=self.amount,
            description=self.description,
        )


class ExpenseFilter(BaseModel):
    """
    Conjunction of list filters. Empty fields match everything.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    search: str = Field(
        default="",
        description="Case-insensitive substring of the description"
    )
    category: str = Field(
        default="",
        description="Exact category"
    )
    date: Optional[dt.date] = Field(
        default=None,
        description="Exact expense date"
    )

    @field_validator('search', 'category', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('date', mode='before')
    @classmethod
    def blank_date_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def matches(self, record: ExpenseRecord) -> bool:
        if self.search and self.search.lower() not in record.description.lower():
            return False
        if self.category and record.category != self.category:
            return False
        if self.date and record.date != self.date:
            return False
        return True


# =============================================================================
# STATE MODELS
# =============================================================================

class TrackerState(BaseModel):
    """Everything the tracker persists: the records and the budget."""

    records: list[ExpenseRecord] = Field(default_factory=list)
    budget: float = Field(
        default=0.0,
        ge=0,
        description="Monthly budget ceiling; 0 means not set"
    )


class LoadedState(BaseModel):
    """
    What a single backend returned on load.

    None means the backend holds no value for that key, which is
    different from holding an empty list or a zero budget.
    """

    records: Optional[list[ExpenseRecord]] = None
    budget: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.records is None and self.budget is None
