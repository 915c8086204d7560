"""Structured billing events."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Types of billing events."""

    INFO = "info"
    ERROR = "error"


class BillingEvent(BaseModel):
    """One entry in the billing event log."""

    event_type: EventType = EventType.INFO
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    component: str
    operation: str
    message: str

    # Error fields (populated for exceptions)
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    metadata: dict[str, Any] = Field(default_factory=dict)
