"""Billing code catalog: the clinic's fee schedule.

Built once from a table of ``[code, date_initialized, cost, ...]`` rows and
read-only afterwards. A new schedule means a new catalog.

The payer distributes its schedule of benefits as a fixed-width text file::

    A001 20230401 00000337000
    ^^^^ ^^^^^^^^ ^^^^^^^^^^^
    code effective fee x 10000

``from_master_file`` imports that layout (without the spaces).
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator

from ems_billing.billing.errors import BillingCodeNotFoundError, CatalogLoadError
from ems_billing.billing.models import CURRENCY_SCALE, BillingCodeEntry, parse_table_date
from ems_billing.services.tables import TableProvider

_MASTER_LINE_LENGTH = 23


def _entry_from_row(row: list[str]) -> BillingCodeEntry:
    if len(row) < 3:
        raise CatalogLoadError(f"Billing code row needs at least 3 fields, got {row!r}")
    try:
        return BillingCodeEntry(
            code=row[0],
            date_initialized=parse_table_date(row[1]),
            cost=Decimal(row[2].strip()),
        )
    except (ValueError, InvalidOperation) as e:
        raise CatalogLoadError(f"Invalid billing code row {row!r}: {e}") from e


def parse_master_fee_line(line: str) -> BillingCodeEntry:
    """Parse one line of the payer's fixed-width schedule of benefits."""
    line = line.strip()
    if len(line) != _MASTER_LINE_LENGTH:
        raise CatalogLoadError(
            f"Master fee line must be {_MASTER_LINE_LENGTH} characters, got {len(line)}: {line!r}"
        )
    code, effective, fee = line[:4], line[4:12], line[12:]
    if not fee.isdigit():
        raise CatalogLoadError(f"Non-numeric fee in master fee line: {line!r}")
    try:
        return BillingCodeEntry(
            code=code,
            date_initialized=parse_table_date(effective),
            cost=Decimal(fee) / CURRENCY_SCALE,
        )
    except ValueError as e:
        raise CatalogLoadError(f"Invalid master fee line {line!r}: {e}") from e


class BillingCodeCatalog:
    """Immutable mapping from billing code to fee schedule entry."""

    def __init__(self, rows: Iterable[list[str]]) -> None:
        entries: dict[str, BillingCodeEntry] = {}
        for row in rows:
            entry = _entry_from_row(row)
            if entry.code in entries:
                raise CatalogLoadError(f"Duplicate billing code: {entry.code}")
            entries[entry.code] = entry
        self._entries = entries

    @classmethod
    def from_table(cls, provider: TableProvider, table_name: str) -> "BillingCodeCatalog":
        return cls(provider.get_table(table_name).values())

    @classmethod
    def from_master_file(cls, lines: Iterable[str]) -> "BillingCodeCatalog":
        """Build a catalog from the payer's schedule of benefits.

        Blank lines are ignored. When a code appears more than once the
        latest effective date wins.
        """
        latest: dict[str, BillingCodeEntry] = {}
        for line in lines:
            if not line.strip():
                continue
            entry = parse_master_fee_line(line)
            current = latest.get(entry.code)
            if current is None or entry.date_initialized >= current.date_initialized:
                latest[entry.code] = entry
        return cls(e.to_row() for e in latest.values())

    def lookup(self, code: str) -> BillingCodeEntry:
        """Return the entry for *code* (case-insensitive)."""
        try:
            return self._entries[code.strip().upper()]
        except (KeyError, AttributeError):
            raise BillingCodeNotFoundError(code) from None

    def codes(self) -> list[str]:
        return sorted(self._entries)

    def to_rows(self) -> list[list[str]]:
        """Rows in BillingCodes table order, sorted by code."""
        return [self._entries[c].to_row() for c in self.codes()]

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[BillingCodeEntry]:
        return iter(self._entries[c] for c in self.codes())
