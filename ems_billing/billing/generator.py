"""Monthly billing submission file.

One line per billed encounter, no header and no delimiters::

    20230510 1234567890 M A001 00000337000
    ^^^^^^^^ ^^^^^^^^^^ ^ ^^^^ ^^^^^^^^^^^
    date     HCN        sex code fee x 10000, 11 digits

(spaces shown for readability only).
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from ems_billing.billing.catalog import BillingCodeCatalog
from ems_billing.billing.models import ApptBillingRecord
from ems_billing.billing.store import AppointmentBillingStore
from ems_billing.observability import BillingEventLogger, get_event_logger
from ems_billing.services.demographics import DemographicsProvider, Patient
from ems_billing.services.scheduling import SchedulingProvider
from ems_billing.services.tables import BillingFileStore

_COMPONENT = "Billing"


def monthly_billing_filename(year: int, month: int) -> str:
    return f"{year}{month:02d}MonthlyBillingFile"


def format_billing_line(
    service_date: date,
    patient: Patient,
    billing_code: str,
    scaled_cost: int,
) -> str:
    """Build one fixed-concatenation submission record."""
    return f"{service_date:%Y%m%d}{patient.hcn}{patient.sex}{billing_code}{scaled_cost:011d}"


class MonthlyBillingFileGenerator:
    """Joins a month's appointments with their billing records and fees."""

    def __init__(
        self,
        store: AppointmentBillingStore,
        catalog: BillingCodeCatalog,
        scheduling: SchedulingProvider,
        demographics: DemographicsProvider,
        files: BillingFileStore,
        events: Optional[BillingEventLogger] = None,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.scheduling = scheduling
        self.demographics = demographics
        self.files = files
        self.events = events or get_event_logger()

    def build_lines(self, year: int, month: int) -> list[str]:
        """Submission lines for every billed appointment in the month.

        Raises on any lookup failure; ``generate`` turns that into False.
        """
        lines: list[str] = []
        for appointment in self.scheduling.get_appointments_by_month(date(year, month, 1)):
            for record in self.store.records_for_appointment(appointment.appointment_id):
                lines.append(self._line_for(record))
        return lines

    def generate(self, year: int, month: int) -> bool:
        """Write the monthly billing file. Returns False if nothing was written."""
        try:
            lines = self.build_lines(year, month)
        except Exception as e:
            self.events.log_exception(
                e, _COMPONENT, "GenerateMonthlyBillingFile", "FAILED GENERATING MONTHLY BILLING FILE - EXCEPTION HIT"
            )
            return False

        filename = monthly_billing_filename(year, month)
        try:
            saved = self.files.save_file(filename, lines)
        except Exception as e:
            self.events.log_exception(
                e, _COMPONENT, "GenerateMonthlyBillingFile", "FAILED GENERATING MONTHLY BILLING FILE - EXCEPTION HIT"
            )
            return False

        if not saved:
            self.events.log(_COMPONENT, "GenerateMonthlyBillingFile", "FAILED GENERATING MONTHLY BILLING FILE")
            return False

        self.events.log(
            _COMPONENT,
            "GenerateMonthlyBillingFile",
            f"Generated Monthly Billing File for YEAR: {year} and Month: {month}",
            filename=filename,
            records=len(lines),
        )
        return True

    def _line_for(self, record: ApptBillingRecord) -> str:
        patient = self.demographics.get_patient_by_id(int(record.patient_id))
        service_date = self.scheduling.get_date_by_appointment_id(record.appointment_id)
        entry = self.catalog.lookup(record.billing_code)
        return format_billing_line(service_date, patient, entry.code, entry.scaled_cost)
