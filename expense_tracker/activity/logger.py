"""
Activity Logger

Every user-visible outcome of a tracker operation passes through here.
The activity logger:
- Always writes the event to the structured local log
- Forwards events meant for the user to the notification collaborator
  as a (message, severity) pair
- Never lets a failing notifier break the operation that triggered it
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

from expense_tracker.activity.messages import message_for
from expense_tracker.models.activity import ActivityEvent, ActivityEventType, Severity


Notifier = Callable[[str, str], Union[None, Awaitable[None]]]


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of the standard logging module.

    Called once by the tracker factory; safe to call again to change level.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))

    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ActivityLogger:
    """
    Central activity logging and notification dispatch.
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        locale: str = "gu",
    ):
        """
        Initialize activity logger.

        Args:
            notifier: Receives (message, severity) for user-facing events.
                      If None, events are only logged locally.
            locale: Language of notification messages
        """
        self._notifier = notifier
        self._locale = locale
        self._logger = structlog.get_logger(__name__)

    @property
    def locale(self) -> str:
        return self._locale

    async def log(self, event: ActivityEvent) -> None:
        """
        Log an activity event and notify the user if the event asks for it.
        """
        log_dict = event.to_log_dict()
        event_name = log_dict.pop("event_type")

        if event.severity == Severity.ERROR:
            self._logger.error(event_name, **log_dict)
        elif event.severity == Severity.WARNING:
            self._logger.warning(event_name, **log_dict)
        elif event.severity == Severity.DEBUG:
            self._logger.debug(event_name, **log_dict)
        else:
            self._logger.info(event_name, **log_dict)

        if event.notify_user and self._notifier:
            try:
                result = self._notifier(event.message, event.severity.value)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "notification_failed",
                    error=str(e),
                    event_type=event.event_type.value,
                )

    async def success(self, event_type: ActivityEventType, **details: Any) -> None:
        """Log a completed user action and tell the user."""
        await self.log(self._build(event_type, Severity.SUCCESS, True, details))

    async def rejected(
        self,
        event_type: ActivityEventType,
        error: Exception,
        **details: Any,
    ) -> None:
        """Log a rejected user action and tell the user why."""
        details["error"] = str(error)
        await self.log(self._build(event_type, Severity.ERROR, True, details))

    async def warning(self, event_type: ActivityEventType, **details: Any) -> None:
        """Log a request that could not be carried out and tell the user."""
        await self.log(self._build(event_type, Severity.WARNING, True, details))

    async def note(self, event_type: ActivityEventType, **details: Any) -> None:
        """Log an event the user is not told about."""
        await self.log(self._build(event_type, Severity.INFO, False, details))

    def _build(
        self,
        event_type: ActivityEventType,
        severity: Severity,
        notify_user: bool,
        details: dict,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=event_type,
            severity=severity,
            message=message_for(event_type, self._locale),
            notify_user=notify_user,
            details=details,
        )
