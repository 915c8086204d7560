"""Billing event logger.

Every billing operation reports what it did as a ``component / operation /
message`` triple. Events go to the standard library logger and, when enabled,
to a JSON Lines file for audit.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from ems_billing.observability.events import BillingEvent, EventType

logger = logging.getLogger(__name__)


class BillingEventLogger:
    """Fire-and-forget sink for billing events.

    Writing never raises: sink failures are reported through the standard
    logger and the caller carries on.
    """

    _instance: Optional["BillingEventLogger"] = None

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        enabled: bool = True,
        max_message_length: int = 500,
    ):
        """Initialize billing event logger.

        Args:
            log_dir: Directory for the event file (default: data/logs)
            enabled: Whether events are written to file
            max_message_length: Max length for stored error messages
        """
        self.enabled = enabled
        self.max_message_length = max_message_length

        if log_dir is None:
            log_dir = Path("data/logs")
        self.log_dir = log_dir
        if self.enabled:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / "billing_events.jsonl"

        self._callbacks: list[Callable[[BillingEvent], None]] = []

    @classmethod
    def get_instance(cls) -> "BillingEventLogger":
        """Get or create the instance configured from settings."""
        if cls._instance is None:
            from ems_billing.config import get_settings

            settings = get_settings()
            cls._instance = cls(log_dir=settings.log_dir, enabled=settings.events_enabled)
        return cls._instance

    def add_callback(self, callback: Callable[[BillingEvent], None]) -> None:
        """Add callback for real-time event monitoring."""
        self._callbacks.append(callback)

    def log(self, component: str, operation: str, message: str, **metadata: Any) -> None:
        """Record an informational event."""
        event = BillingEvent(
            component=component,
            operation=operation,
            message=message,
            metadata=metadata,
        )
        logging.getLogger(f"ems_billing.{component.lower()}").info(
            "%s: %s", operation, message
        )
        self._write_event(event)

    def log_exception(
        self,
        exc: BaseException,
        component: str,
        operation: str,
        message: str,
        **metadata: Any,
    ) -> None:
        """Record a failure together with the exception that caused it."""
        event = BillingEvent(
            event_type=EventType.ERROR,
            component=component,
            operation=operation,
            message=message,
            error_type=type(exc).__name__,
            error_message=str(exc)[: self.max_message_length],
            metadata=metadata,
        )
        logging.getLogger(f"ems_billing.{component.lower()}").error(
            "%s: %s (%s: %s)", operation, message, type(exc).__name__, exc
        )
        self._write_event(event)

    def _write_event(self, event: BillingEvent) -> None:
        if not self.enabled:
            return

        try:
            with open(self.log_file, "a") as f:
                f.write(event.model_dump_json() + "\n")

            for callback in self._callbacks:
                try:
                    callback(event)
                except Exception as e:
                    logger.warning(f"Billing event callback failed: {e}")

        except Exception as e:
            logger.warning(f"Failed to write billing event: {e}")

    def get_recent_events(self, limit: int = 100) -> list[dict[str, Any]]:
        """Read recent events from the log file."""
        if not self.log_file.exists():
            return []

        events = []
        with open(self.log_file) as f:
            for line in f:
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue

        return events[-limit:]


def get_event_logger() -> BillingEventLogger:
    """Get the global billing event logger instance."""
    return BillingEventLogger.get_instance()
