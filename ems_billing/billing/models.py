"""Pydantic models for billing records and reconciliation output."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Fixed-point scale used by the payer for every currency amount.
CURRENCY_SCALE = Decimal(10000)


class ResponseCode(str, Enum):
    """Response codes returned by the payer for each submitted encounter."""

    PAID = "PAID"
    DECL = "DECL"  # declined
    FHCV = "FHCV"  # failed health card validation
    CMOH = "CMOH"  # contact Ministry of Health


# Response codes that require manual follow-up.
FOLLOW_UP_CODES = frozenset({ResponseCode.FHCV.value, ResponseCode.CMOH.value})


def parse_table_date(value: str) -> date:
    """Parse a date stored as ``YYYYMMDD`` or ISO ``YYYY-MM-DD``."""
    value = value.strip()
    for fmt in ("%Y%m%d", "%Y-%m-%d"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised date: {value!r}")


class BillingCodeEntry(BaseModel):
    """A single fee schedule entry."""

    model_config = {"frozen": True}

    code: str
    cost: Decimal
    date_initialized: date

    @field_validator("code")
    @classmethod
    def _normalise_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("billing code must not be empty")
        return v

    @property
    def scaled_cost(self) -> int:
        """Cost in the payer's fixed-point units, rounded half-up."""
        return int((self.cost * CURRENCY_SCALE).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    def to_row(self) -> list[str]:
        return [self.code, self.date_initialized.isoformat(), str(self.cost)]


class ApptBillingRecord(BaseModel):
    """Association of an appointment and patient with a billing code."""

    billing_record_id: str
    appointment_id: str
    patient_id: str
    billing_code: str

    def to_row(self) -> list[str]:
        """Field order used by the AppointmentBills table."""
        return [self.billing_record_id, self.appointment_id, self.patient_id, self.billing_code]

    @classmethod
    def from_row(cls, row: list[str]) -> "ApptBillingRecord":
        if len(row) < 4:
            raise ValueError(f"Appointment billing row needs 4 fields, got {len(row)}")
        return cls(
            billing_record_id=row[0],
            appointment_id=row[1],
            patient_id=row[2],
            billing_code=row[3].upper(),
        )


class FlaggedEncounter(BaseModel):
    """A response row whose code requires manual follow-up."""

    response_row: list[str]
    patient_hcn: str
    billing_code: str

    @property
    def row_key(self) -> str:
        """First field of the response row (the service date)."""
        return self.response_row[0] if self.response_row else ""

    @classmethod
    def from_response_row(cls, row: list[str]) -> "FlaggedEncounter":
        return cls(
            response_row=list(row),
            patient_hcn=row[1] if len(row) > 1 else "",
            billing_code=row[3] if len(row) > 3 else "",
        )


class ReconciliationSummary(BaseModel):
    """Aggregate figures for one payer response file."""

    total_encounters: int = 0
    total_billed: Decimal = Decimal(0)
    total_received: Decimal = Decimal(0)
    received_percentage: Decimal = Decimal(0)
    average_billing: Decimal = Decimal(0)
    follow_up_count: int = 0
    skipped_rows: int = 0
    year: Optional[int] = None
    month: Optional[int] = None


class ReconciliationReport(BaseModel):
    """Result of reconciling one response file."""

    source: str
    summary: ReconciliationSummary = Field(default_factory=ReconciliationSummary)
    flagged: list[FlaggedEncounter] = Field(default_factory=list)
    lines: list[str] = Field(default_factory=list)
