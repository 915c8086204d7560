"""Billing module: fee catalog, appointment billing, submission and reconciliation."""

from ems_billing.billing.catalog import BillingCodeCatalog, parse_master_fee_line
from ems_billing.billing.generator import MonthlyBillingFileGenerator, monthly_billing_filename
from ems_billing.billing.models import (
    ApptBillingRecord,
    BillingCodeEntry,
    FlaggedEncounter,
    ReconciliationReport,
    ReconciliationSummary,
    ResponseCode,
)
from ems_billing.billing.reconciliation import ReconciliationEngine, is_code_valid
from ems_billing.billing.repository import ApptBillingRepository
from ems_billing.billing.store import AppointmentBillingStore

__all__ = [
    "AppointmentBillingStore",
    "ApptBillingRecord",
    "ApptBillingRepository",
    "BillingCodeCatalog",
    "BillingCodeEntry",
    "FlaggedEncounter",
    "MonthlyBillingFileGenerator",
    "ReconciliationEngine",
    "ReconciliationReport",
    "ReconciliationSummary",
    "ResponseCode",
    "is_code_valid",
    "monthly_billing_filename",
    "parse_master_fee_line",
]
