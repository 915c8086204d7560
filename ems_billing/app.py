"""Wires the billing services together from settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ems_billing.billing import (
    AppointmentBillingStore,
    ApptBillingRepository,
    BillingCodeCatalog,
    MonthlyBillingFileGenerator,
    ReconciliationEngine,
)
from ems_billing.config import Settings, get_settings
from ems_billing.observability import BillingEventLogger
from ems_billing.services import BillingFileStore, DemographicsProvider, SchedulingProvider, TableProvider
from ems_billing.storage import FileTableProvider, TableDemographicsProvider, TableSchedulingProvider


@dataclass
class BillingContext:
    """Everything a caller needs to bill and reconcile."""

    settings: Settings
    tables: TableProvider
    files: BillingFileStore
    events: BillingEventLogger
    catalog: BillingCodeCatalog
    store: AppointmentBillingStore
    scheduling: SchedulingProvider
    demographics: DemographicsProvider
    generator: MonthlyBillingFileGenerator
    reconciliation: ReconciliationEngine


def build_billing_context(
    settings: Optional[Settings] = None,
    provider: Optional[FileTableProvider] = None,
    events: Optional[BillingEventLogger] = None,
) -> BillingContext:
    """Load the catalog and store and construct every billing service."""
    settings = settings or get_settings()
    provider = provider or FileTableProvider(
        data_dir=settings.data_dir,
        output_dir=settings.output_dir,
        delimiter=settings.table_delimiter,
    )
    events = events or BillingEventLogger(log_dir=settings.log_dir, enabled=settings.events_enabled)

    events.log("Billing", "Billing", "Initialize the Billing object")
    catalog = BillingCodeCatalog.from_table(provider, settings.billing_codes_table)
    store = AppointmentBillingStore(
        catalog=catalog,
        repository=ApptBillingRepository(provider, settings.appointment_bills_table),
        events=events,
    )
    scheduling = TableSchedulingProvider(provider, settings.appointments_table)
    demographics = TableDemographicsProvider(provider, settings.patients_table)

    return BillingContext(
        settings=settings,
        tables=provider,
        files=provider,
        events=events,
        catalog=catalog,
        store=store,
        scheduling=scheduling,
        demographics=demographics,
        generator=MonthlyBillingFileGenerator(
            store=store,
            catalog=catalog,
            scheduling=scheduling,
            demographics=demographics,
            files=provider,
            events=events,
        ),
        reconciliation=ReconciliationEngine(files=provider, demographics=demographics, events=events),
    )
