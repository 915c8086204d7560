"""Billing event logging."""

from ems_billing.observability.events import BillingEvent, EventType
from ems_billing.observability.logger import BillingEventLogger, get_event_logger

__all__ = [
    "BillingEvent",
    "BillingEventLogger",
    "EventType",
    "get_event_logger",
]
