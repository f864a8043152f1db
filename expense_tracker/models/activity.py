"""
Activity Models for the Expense Tracker

Every user action and every storage failure becomes an ActivityEvent.
Events are written to the structured log and, when they are meant for the
user, forwarded to the notification collaborator.

Events are not persisted: the log is for debugging, not an edit history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events the tracker reports."""
    # Record changes
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    BUDGET_SET = "budget_set"

    # Bulk data operations
    DATA_LOADED = "data_loaded"
    DATA_IMPORTED = "data_imported"
    DATA_EXPORTED = "data_exported"
    CSV_EXPORTED = "csv_exported"
    DATA_CLEARED = "data_cleared"
    BACKUP_RESTORED = "backup_restored"

    # Rejections
    MISSING_FIELDS = "missing_fields"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_BUDGET = "invalid_budget"
    EXPENSE_NOT_FOUND = "expense_not_found"
    IMPORT_FAILED = "import_failed"
    NOTHING_TO_EXPORT = "nothing_to_export"
    BACKUP_MISSING = "backup_missing"


class Severity(str, Enum):
    """Severity level for activity events and notifications."""
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """
    A single tracker event.

    `message` is the localized text shown to the user when
    `notify_user` is set.
    """

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType = Field(
        ...,
        description="Type of event"
    )
    severity: Severity = Field(
        default=Severity.INFO,
        description="Event severity"
    )
    message: str = Field(
        default="",
        max_length=500,
        description="User-facing message"
    )
    notify_user: bool = Field(
        default=True,
        description="Forward to the notification collaborator"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    def to_log_dict(self) -> dict:
        """Flatten for structured logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": self.details,
        }
