"""Activity logging and notification package."""

from expense_tracker.activity.logger import ActivityLogger, Notifier, configure_logging
from expense_tracker.activity.messages import MESSAGES, message_for

__all__ = ["ActivityLogger", "MESSAGES", "Notifier", "configure_logging", "message_for"]
