"""Tests for the table-backed scheduling and demographics lookups."""

from datetime import date

import pytest

from ems_billing.storage import InMemoryTableProvider, TableDemographicsProvider, TableSchedulingProvider


@pytest.fixture
def tables():
    return InMemoryTableProvider(
        tables={
            "Appointments": [
                ["10", "2023-05-10", "1", "0"],
                ["11", "20230522", "2", ""],
                ["12", "2023-06-01", "1", "0"],
            ],
            "Patients": [
                ["1", "1234567890", "Smith", "John", "M"],
                ["2", "9876543210AB", "Doe", "Jane", "F"],
            ],
        }
    )


class TestTableScheduling:
    def test_appointments_by_month(self, tables):
        scheduling = TableSchedulingProvider(tables)
        appointments = scheduling.get_appointments_by_month(date(2023, 5, 17))
        assert [a.appointment_id for a in appointments] == ["10", "11"]
        assert appointments[1].recall_flag == 0

    def test_date_by_appointment_id(self, tables):
        scheduling = TableSchedulingProvider(tables)
        assert scheduling.get_date_by_appointment_id("11") == date(2023, 5, 22)

    def test_date_for_unknown_appointment(self, tables):
        with pytest.raises(LookupError):
            TableSchedulingProvider(tables).get_date_by_appointment_id("99")

    def test_update_recall_flag(self, tables):
        scheduling = TableSchedulingProvider(tables)
        assert scheduling.update_appointment_info("12", 3)
        assert tables.get_table("Appointments")["12"] == ["12", "2023-06-01", "1", "3"]

    def test_update_unknown_appointment(self, tables):
        assert not TableSchedulingProvider(tables).update_appointment_info("99", 3)


class TestTableDemographics:
    def test_patient_by_id(self, tables):
        patient = TableDemographicsProvider(tables).get_patient_by_id(2)
        assert (patient.hcn, patient.last_name, patient.first_name, patient.sex) == ("9876543210AB", "Doe", "Jane", "F")

    def test_unknown_patient_id(self, tables):
        with pytest.raises(LookupError):
            TableDemographicsProvider(tables).get_patient_by_id(99)

    def test_patient_by_hcn(self, tables):
        assert TableDemographicsProvider(tables).get_patient_by_hcn("1234567890").patient_id == 1

    def test_unknown_hcn(self, tables):
        assert TableDemographicsProvider(tables).get_patient_by_hcn("0000000000") is None
