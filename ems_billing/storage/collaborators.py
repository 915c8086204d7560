"""Scheduling and demographics lookups backed by tables.

Appointments table rows: ``[appointment_id, date, patient_id, recall_flag]``
Patients table rows:     ``[patient_id, hcn, last_name, first_name, sex]``
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from ems_billing.billing.models import parse_table_date
from ems_billing.services.demographics import DemographicsProvider, Patient
from ems_billing.services.scheduling import Appointment, SchedulingProvider
from ems_billing.services.tables import TableProvider


def _appointment_from_row(row: list[str]) -> Appointment:
    return Appointment(
        appointment_id=row[0],
        appointment_date=parse_table_date(row[1]),
        patient_id=row[2],
        recall_flag=int(row[3]) if len(row) > 3 and row[3] else 0,
    )


def _patient_from_row(row: list[str]) -> Patient:
    return Patient(
        patient_id=int(row[0]),
        hcn=row[1],
        last_name=row[2],
        first_name=row[3],
        sex=row[4],
    )


class TableSchedulingProvider(SchedulingProvider):
    def __init__(self, provider: TableProvider, table_name: str = "Appointments"):
        self.provider = provider
        self.table_name = table_name

    def get_appointments_by_month(self, day: date) -> list[Appointment]:
        appointments = [_appointment_from_row(r) for r in self.provider.get_table(self.table_name).values()]
        return [
            a
            for a in appointments
            if a.appointment_date.year == day.year and a.appointment_date.month == day.month
        ]

    def get_date_by_appointment_id(self, appointment_id: str) -> date:
        row = self.provider.get_table(self.table_name).get(str(appointment_id))
        if row is None:
            raise LookupError(f"No appointment with ID {appointment_id!r}")
        return parse_table_date(row[1])

    def update_appointment_info(self, appointment_id: str, recall_flag: int) -> bool:
        table = self.provider.get_table(self.table_name)
        row = table.get(str(appointment_id))
        if row is None:
            return False
        while len(row) < 4:
            row.append("")
        row[3] = str(recall_flag)
        self.provider.set_table(self.table_name, table.values())
        return True


class TableDemographicsProvider(DemographicsProvider):
    def __init__(self, provider: TableProvider, table_name: str = "Patients"):
        self.provider = provider
        self.table_name = table_name

    def get_patient_by_id(self, patient_id: int) -> Patient:
        row = self.provider.get_table(self.table_name).get(str(patient_id))
        if row is None:
            raise LookupError(f"No patient with ID {patient_id}")
        return _patient_from_row(row)

    def get_patient_by_hcn(self, hcn: str) -> Optional[Patient]:
        for row in self.provider.get_table(self.table_name).values():
            if len(row) > 1 and row[1] == hcn:
                return _patient_from_row(row)
        return None
