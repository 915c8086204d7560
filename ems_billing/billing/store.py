"""Appointment billing store.

Holds every appointment billing record in memory and writes the whole table
back through the repository after each change. Not safe for concurrent
writers; callers serialise access.
"""
from __future__ import annotations

from typing import Optional

from ems_billing.billing.catalog import BillingCodeCatalog
from ems_billing.billing.errors import (
    BillingValidationError,
    DuplicateRecordError,
    PersistenceError,
    RecordNotFoundError,
)
from ems_billing.billing.models import ApptBillingRecord
from ems_billing.billing.repository import ApptBillingRepository
from ems_billing.observability import BillingEventLogger, get_event_logger
from ems_billing.services.scheduling import SchedulingProvider

_COMPONENT = "Billing"


class AppointmentBillingStore:
    """Mutable map of billing record ID to appointment billing record."""

    def __init__(
        self,
        catalog: BillingCodeCatalog,
        repository: ApptBillingRepository,
        events: Optional[BillingEventLogger] = None,
    ) -> None:
        self.catalog = catalog
        self.repository = repository
        self.events = events or get_event_logger()
        self._records: dict[str, ApptBillingRecord] = {}
        self._by_appointment: dict[str, list[str]] = {}

        for record in repository.load():
            self._insert(record)
        self.events.log(_COMPONENT, "AppointmentBillingStore", f"Loaded {len(self._records)} appointment billing records")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_record(self, record_id: str) -> ApptBillingRecord:
        try:
            return self._records[record_id]
        except KeyError:
            raise RecordNotFoundError(record_id) from None

    def records(self) -> list[ApptBillingRecord]:
        return list(self._records.values())

    def records_for_appointment(self, appointment_id: str) -> list[ApptBillingRecord]:
        """Records billed against *appointment_id*, in insertion order."""
        return [self._records[rid] for rid in self._by_appointment.get(str(appointment_id), [])]

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_record(self, appointment_id: str, patient_id: str, billing_code: str) -> Optional[str]:
        """Bill *billing_code* against an appointment.

        Returns the new record ID, or None if validation or persistence
        failed. Nothing changes on failure.
        """
        try:
            appointment_id, patient_id, code = self._validate(appointment_id, patient_id, billing_code)
        except BillingValidationError as e:
            self.events.log(_COMPONENT, "AddNewRecord", f"FAILED ADDING NEW RECORD - {e}")
            return None

        try:
            record_id = self.repository.next_id()
            record = ApptBillingRecord(
                billing_record_id=record_id,
                appointment_id=appointment_id,
                patient_id=patient_id,
                billing_code=code,
            )
            self._insert(record)
            try:
                self._save()
            except PersistenceError:
                self._discard(record_id)
                raise
        except Exception as e:
            self.events.log_exception(e, _COMPONENT, "AddNewRecord", "FAILED ADDING NEW RECORD - EXCEPTION HIT")
            return None

        self.events.log(
            _COMPONENT,
            "AddNewRecord",
            f"Adding {code} to Appointment ID : {appointment_id} Patient ID : {patient_id} "
            f"For ApptBilling ID : {record_id}",
        )
        return record_id

    def update_record(self, record_id: str, appointment_id: str, patient_id: str, billing_code: str) -> bool:
        """Replace the fields of an existing record.

        The record keeps its ID. Returns False, leaving the store as it was,
        if the record is missing, the input is invalid or the save fails.
        """
        self.events.log(
            _COMPONENT,
            "UpdateRecord",
            f"UPDATING {billing_code} to Appointment ID : {appointment_id} Patient ID : {patient_id} "
            f"For ApptBilling ID : {record_id}",
        )
        try:
            previous = self.get_record(record_id)
            appointment_id, patient_id, code = self._validate(appointment_id, patient_id, billing_code)
        except (RecordNotFoundError, BillingValidationError) as e:
            self.events.log(_COMPONENT, "UpdateRecord", f"FAILED UPDATING RECORD - {e}")
            return False

        replacement = ApptBillingRecord(
            billing_record_id=record_id,
            appointment_id=appointment_id,
            patient_id=patient_id,
            billing_code=code,
        )
        try:
            self._replace(replacement)
            try:
                self._save()
            except PersistenceError:
                self._replace(previous)
                raise
        except Exception as e:
            self.events.log_exception(e, _COMPONENT, "UpdateRecord", "FAILED UPDATING RECORD - EXCEPTION HIT")
            return False
        return True

    def remove_record(self, record_id: str) -> bool:
        try:
            previous = self._discard(record_id)
        except RecordNotFoundError as e:
            self.events.log(_COMPONENT, "RemoveRecord", f"FAILED REMOVING RECORD - {e}")
            return False

        try:
            self._save()
        except PersistenceError as e:
            self._insert(previous)
            self.events.log_exception(e, _COMPONENT, "RemoveRecord", "FAILED REMOVING RECORD - EXCEPTION HIT")
            return False

        self.events.log(_COMPONENT, "RemoveRecord", f"Removed ApptBilling ID : {record_id}")
        return True

    def persist(self) -> bool:
        """Write every record to the table provider, replacing its contents."""
        try:
            self._save()
        except PersistenceError as e:
            self.events.log_exception(e, _COMPONENT, "SaveApptBillingRecords", "FAILED SAVING RECORDS")
            return False
        return True

    def flag_appointment(self, scheduling: SchedulingProvider, appointment_id: str, recall_flag: int) -> bool:
        """Ask the scheduling service to set a recall flag on an appointment."""
        try:
            self.events.log(
                _COMPONENT,
                "FlagAppointment",
                f"Flagged appointment for recall Appointment ID: {appointment_id} Recall Flag: {recall_flag}",
            )
            return bool(scheduling.update_appointment_info(appointment_id, recall_flag))
        except Exception as e:
            self.events.log_exception(e, _COMPONENT, "FlagAppointment", "FAILED FLAGGING APPOINTMENT - EXCEPTION HIT")
            return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate(self, appointment_id: str, patient_id: str, billing_code: str) -> tuple[str, str, str]:
        """Check the inputs and return them stripped, with the code upper-cased."""
        normalised = []
        for name, value in (
            ("appointment ID", appointment_id),
            ("patient ID", patient_id),
            ("billing code", billing_code),
        ):
            value = str(value).strip() if value is not None else ""
            if not value:
                raise BillingValidationError(f"Missing {name}")
            normalised.append(value)
        appointment_id, patient_id, code = normalised
        code = code.upper()
        if code not in self.catalog:
            raise BillingValidationError(f"Unknown billing code: {code}")
        return appointment_id, patient_id, code

    def _insert(self, record: ApptBillingRecord) -> None:
        if record.billing_record_id in self._records:
            raise DuplicateRecordError(f"Duplicate appointment billing ID: {record.billing_record_id}")
        self._records[record.billing_record_id] = record
        self._by_appointment.setdefault(record.appointment_id, []).append(record.billing_record_id)

    def _replace(self, record: ApptBillingRecord) -> None:
        """Swap in *record* under its existing ID, keeping table order."""
        previous = self._records[record.billing_record_id]
        self._records[record.billing_record_id] = record
        if previous.appointment_id == record.appointment_id:
            return
        self._unindex(previous)
        self._by_appointment.setdefault(record.appointment_id, []).append(record.billing_record_id)

    def _discard(self, record_id: str) -> ApptBillingRecord:
        record = self._records.pop(record_id, None)
        if record is None:
            raise RecordNotFoundError(record_id)
        self._unindex(record)
        return record

    def _unindex(self, record: ApptBillingRecord) -> None:
        ids = self._by_appointment.get(record.appointment_id, [])
        if record.billing_record_id in ids:
            ids.remove(record.billing_record_id)
        if not ids:
            self._by_appointment.pop(record.appointment_id, None)

    def _save(self) -> None:
        self.repository.replace_all(list(self._records.values()))
