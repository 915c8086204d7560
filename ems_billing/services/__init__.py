"""Interfaces to the collaborators around the billing core."""

from ems_billing.services.demographics import DemographicsProvider, Patient
from ems_billing.services.scheduling import Appointment, SchedulingProvider
from ems_billing.services.tables import BillingFileStore, Table, TableProvider

__all__ = [
    "Appointment",
    "BillingFileStore",
    "DemographicsProvider",
    "Patient",
    "SchedulingProvider",
    "Table",
    "TableProvider",
]
