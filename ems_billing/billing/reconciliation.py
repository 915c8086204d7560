"""Reconciliation of the payer's monthly response file.

The payer answers each submitted encounter with a response code:

  PAID  paid in full
  DECL  declined
  FHCV  failed health card validation   -> follow up
  CMOH  contact the Ministry of Health  -> follow up

A run loads the response file, aggregates billed and received totals,
summarises them and renders a display listing that includes every encounter
still awaiting follow-up. Follow-up encounters accumulate across runs on the
same engine until ``clear_flagged_encounters`` is called.
"""
from __future__ import annotations

import os
import re
from decimal import Decimal
from typing import Optional

from ems_billing.billing.errors import ResponseParseError
from ems_billing.billing.models import (
    CURRENCY_SCALE,
    FOLLOW_UP_CODES,
    FlaggedEncounter,
    ReconciliationReport,
    ReconciliationSummary,
    ResponseCode,
)
from ems_billing.observability import BillingEventLogger, get_event_logger
from ems_billing.services.demographics import DemographicsProvider
from ems_billing.services.tables import BillingFileStore, Table

_COMPONENT = "Billing"
_VALID_CODES = frozenset(c.value for c in ResponseCode)

DEFAULT_RESPONSE_FILE = "govFile.txt"

# Response row layout
_AMOUNT_FIELD = 4
_STATUS_FIELD = 5
_AMOUNT = re.compile(r"\d{1,11}", re.ASCII)


def is_code_valid(code: str) -> bool:
    """True only for the payer's response codes. Case-sensitive."""
    return code in _VALID_CODES


def period_from_filename(path: str) -> tuple[Optional[int], Optional[int]]:
    """Year and month from a ``YYYYMM...`` file name, if it has one."""
    name = os.path.basename(path)
    prefix = name[:6]
    if len(prefix) == 6 and prefix.isdigit():
        month = int(prefix[4:6])
        if 1 <= month <= 12:
            return int(prefix[:4]), month
    return None, None


def _parse_amount(key: str, text: str) -> Decimal:
    """Scaled amount as written in the submission file: up to 11 plain digits."""
    if not _AMOUNT.fullmatch(text.strip()):
        raise ResponseParseError(f"Row {key} amount is not a scaled integer: {text!r}")
    return Decimal(text.strip())


def _ratio(numerator: Decimal, denominator: Decimal) -> Optional[Decimal]:
    if denominator == 0:
        return None
    return numerator / denominator


class ReconciliationEngine:
    """Load → Aggregate → Summarize → Render over a payer response file."""

    def __init__(
        self,
        files: BillingFileStore,
        demographics: DemographicsProvider,
        events: Optional[BillingEventLogger] = None,
    ) -> None:
        self.files = files
        self.demographics = demographics
        self.events = events or get_event_logger()
        self.flagged_encounters: list[FlaggedEncounter] = []

    def is_code_valid(self, code: str) -> bool:
        return is_code_valid(code)

    def clear_flagged_encounters(self) -> None:
        self.flagged_encounters.clear()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def generate_monthly_summary(self, month: str) -> list[str]:
        """Summary lines for the response file of *month* (``YYYYMM``)."""
        return self.reconcile_monthly_billing(f"{month}{DEFAULT_RESPONSE_FILE}")

    def reconcile_monthly_billing(self, path: str = DEFAULT_RESPONSE_FILE) -> list[str]:
        """Rendered summary lines, or an empty list if the file can't be read."""
        report = self.reconcile(path)
        return report.lines if report is not None else []

    def reconcile(self, path: str = DEFAULT_RESPONSE_FILE) -> Optional[ReconciliationReport]:
        """Run a full reconciliation of *path*. Returns None if loading fails."""
        year, month = period_from_filename(path)
        try:
            rows = self.files.read_response_file(path)
        except Exception as e:
            self.events.log_exception(e, _COMPONENT, "ReconcileMonthlyBilling", f"FAILED LOADING RESPONSE FILE {path}")
            return None

        summary, flagged = self._aggregate(rows)
        summary.year, summary.month = year, month
        self.flagged_encounters.extend(flagged)

        report = ReconciliationReport(
            source=path,
            summary=summary,
            flagged=flagged,
            lines=self.render(summary),
        )
        self.events.log(
            _COMPONENT,
            "ReconcileMonthlyBilling",
            f"Summary displayed for Month: {month if month is not None else '?'} "
            f"Year: {year if year is not None else '?'}",
            source=path,
        )
        return report

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _aggregate(self, rows: Table) -> tuple[ReconciliationSummary, list[FlaggedEncounter]]:
        billed = Decimal(0)
        received = Decimal(0)
        skipped = 0
        flagged: list[FlaggedEncounter] = []

        for key, fields in rows.items():
            try:
                if len(fields) <= _STATUS_FIELD:
                    raise ResponseParseError(f"Row {key} has {len(fields)} fields, expected 6")
                amount = _parse_amount(key, fields[_AMOUNT_FIELD])
            except ResponseParseError as e:
                skipped += 1
                self.events.log_exception(
                    e, _COMPONENT, "ReconcileMonthlyBilling", "FAILED CONVERTING AMOUNT - ROW SKIPPED"
                )
                continue

            billed += amount
            status = fields[_STATUS_FIELD]
            if status == ResponseCode.PAID.value:
                received += amount
            elif status in FOLLOW_UP_CODES:
                flagged.append(FlaggedEncounter.from_response_row(fields))

        return self._summarize(len(rows), billed, received, len(flagged), skipped), flagged

    def _summarize(
        self,
        row_count: int,
        billed: Decimal,
        received: Decimal,
        follow_ups: int,
        skipped: int,
    ) -> ReconciliationSummary:
        total_billed = billed / CURRENCY_SCALE
        total_received = received / CURRENCY_SCALE

        percentage = _ratio(total_received, total_billed)
        if percentage is None:
            self.events.log(_COMPONENT, "ReconcileMonthlyBilling", "Nothing billed; received percentage reported as 0")
            percentage = Decimal(0)
        else:
            percentage *= 100

        average = _ratio(total_received, Decimal(row_count))
        if average is None:
            self.events.log(_COMPONENT, "ReconcileMonthlyBilling", "No encounters; average billing reported as 0")
            average = Decimal(0)

        return ReconciliationSummary(
            total_encounters=row_count,
            total_billed=total_billed,
            total_received=total_received,
            received_percentage=percentage,
            average_billing=average,
            follow_up_count=follow_ups,
            skipped_rows=skipped,
        )

    def render(self, summary: ReconciliationSummary) -> list[str]:
        """Display lines for *summary* plus every outstanding follow-up."""
        lines = [
            f"Total Encounters : {summary.total_encounters}",
            f"Total Billed : {_money(summary.total_billed)}",
            f"Total Received : {_money(summary.total_received)}",
            f"Received Percentage : {_money(summary.received_percentage)}",
            f"Average Billing : {_money(summary.average_billing)}",
            f"Number of Follow Ups : {summary.follow_up_count}",
        ]
        for encounter in self.flagged_encounters:
            try:
                patient = self.demographics.get_patient_by_hcn(encounter.patient_hcn)
            except Exception as e:
                self.events.log_exception(e, _COMPONENT, "ReconcileMonthlyBilling", "FAILED RESOLVING PATIENT BY HCN")
                continue
            if patient is None:
                continue
            lines.append(
                f"{encounter.row_key} - {patient.last_name},{patient.first_name} - {encounter.billing_code}"
            )
        return lines


def _money(value: Decimal) -> str:
    return f"{value.quantize(Decimal('0.01'))}"
