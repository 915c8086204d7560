"""Pytest configuration and fixtures."""

from datetime import date
from typing import Optional

import pytest

from ems_billing.billing import (
    AppointmentBillingStore,
    ApptBillingRepository,
    BillingCodeCatalog,
    MonthlyBillingFileGenerator,
    ReconciliationEngine,
)
from ems_billing.observability import BillingEventLogger
from ems_billing.services import Appointment, DemographicsProvider, Patient, SchedulingProvider
from ems_billing.storage import InMemoryTableProvider


CATALOG_ROWS = [
    ["A001", "20230101", "33.70"],
    ["A665", "2023-01-01", "91.35"],
    ["B100", "20230101", "0.45"],
]


class FakeScheduling(SchedulingProvider):
    """Scheduling stand-in holding appointments in a dict."""

    def __init__(self, appointments: Optional[list[Appointment]] = None, fail_updates: bool = False):
        self.appointments = {a.appointment_id: a for a in appointments or []}
        self.fail_updates = fail_updates
        self.updates: list[tuple[str, int]] = []

    def get_appointments_by_month(self, day: date) -> list[Appointment]:
        return [
            a
            for a in self.appointments.values()
            if (a.appointment_date.year, a.appointment_date.month) == (day.year, day.month)
        ]

    def get_date_by_appointment_id(self, appointment_id: str) -> date:
        return self.appointments[str(appointment_id)].appointment_date

    def update_appointment_info(self, appointment_id: str, recall_flag: int) -> bool:
        if self.fail_updates:
            raise ConnectionError("scheduling unavailable")
        self.updates.append((appointment_id, recall_flag))
        return appointment_id in self.appointments


class FakeDemographics(DemographicsProvider):
    """Demographics stand-in holding patients in a dict."""

    def __init__(self, patients: Optional[list[Patient]] = None):
        self.patients = {p.patient_id: p for p in patients or []}

    def get_patient_by_id(self, patient_id: int) -> Patient:
        try:
            return self.patients[patient_id]
        except KeyError:
            raise LookupError(f"No patient {patient_id}") from None

    def get_patient_by_hcn(self, hcn: str) -> Optional[Patient]:
        return next((p for p in self.patients.values() if p.hcn == hcn), None)


@pytest.fixture
def events(tmp_path):
    """Event logger writing to a temporary directory."""
    return BillingEventLogger(log_dir=tmp_path / "logs", enabled=True)


@pytest.fixture
def catalog():
    return BillingCodeCatalog(CATALOG_ROWS)


@pytest.fixture
def provider():
    return InMemoryTableProvider(tables={"BillingCodes": CATALOG_ROWS})


@pytest.fixture
def repository(provider):
    return ApptBillingRepository(provider, "AppointmentBills")


@pytest.fixture
def store(catalog, repository, events):
    return AppointmentBillingStore(catalog=catalog, repository=repository, events=events)


@pytest.fixture
def patients():
    return [
        Patient(patient_id=1, hcn="1234567890", first_name="John", last_name="Smith", sex="M"),
        Patient(patient_id=2, hcn="9876543210AB", first_name="Jane", last_name="Doe", sex="F"),
    ]


@pytest.fixture
def demographics(patients):
    return FakeDemographics(patients)


@pytest.fixture
def scheduling():
    return FakeScheduling(
        [
            Appointment(appointment_id="10", patient_id="1", appointment_date=date(2023, 5, 10)),
            Appointment(appointment_id="11", patient_id="2", appointment_date=date(2023, 5, 22)),
            Appointment(appointment_id="12", patient_id="1", appointment_date=date(2023, 6, 1)),
        ]
    )


@pytest.fixture
def generator(store, catalog, scheduling, demographics, provider, events):
    return MonthlyBillingFileGenerator(
        store=store,
        catalog=catalog,
        scheduling=scheduling,
        demographics=demographics,
        files=provider,
        events=events,
    )


@pytest.fixture
def engine(provider, demographics, events):
    return ReconciliationEngine(files=provider, demographics=demographics, events=events)


@pytest.fixture
def catalog_rows():
    return [list(row) for row in CATALOG_ROWS]


@pytest.fixture
def failing_scheduling():
    return FakeScheduling(fail_updates=True)
