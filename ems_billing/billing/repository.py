"""Persistence for appointment billing records."""

from __future__ import annotations

from ems_billing.billing.errors import PersistenceError
from ems_billing.billing.models import ApptBillingRecord
from ems_billing.services.tables import TableProvider


class ApptBillingRepository:
    """Reads and writes the AppointmentBills table as a whole."""

    def __init__(self, provider: TableProvider, table_name: str = "AppointmentBills"):
        self.provider = provider
        self.table_name = table_name

    def load(self) -> list[ApptBillingRecord]:
        return [ApptBillingRecord.from_row(row) for row in self.provider.get_table(self.table_name).values()]

    def replace_all(self, records: list[ApptBillingRecord]) -> None:
        """Replace the stored table with *records* in one write."""
        try:
            self.provider.set_table(self.table_name, [r.to_row() for r in records])
        except Exception as e:
            raise PersistenceError(f"Failed to write {self.table_name}: {e}") from e

    def next_id(self) -> str:
        return self.provider.generate_id(self.table_name)
