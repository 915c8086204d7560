"""In-memory table and file storage, for tests and dry runs."""

from __future__ import annotations

from typing import Iterable, Optional

from ems_billing.services.tables import BillingFileStore, Table, TableProvider, next_numeric_key
from ems_billing.storage.response_format import parse_response_lines


class InMemoryTableProvider(TableProvider, BillingFileStore):
    """Tables and files held in dictionaries."""

    def __init__(
        self,
        tables: Optional[dict[str, Iterable[list[str]]]] = None,
        files: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self.tables: dict[str, Table] = {}
        self.files: dict[str, list[str]] = dict(files or {})
        for name, rows in (tables or {}).items():
            self.set_table(name, rows)

    def get_table(self, name: str) -> Table:
        return {key: list(fields) for key, fields in self.tables.get(name, {}).items()}

    def set_table(self, name: str, rows: Iterable[list[str]]) -> None:
        self.tables[name] = {row[0]: list(row) for row in rows}

    def add_row(self, name: str, fields: list[str]) -> None:
        self.tables.setdefault(name, {})[fields[0]] = list(fields)

    def generate_id(self, name: str) -> str:
        return next_numeric_key(self.tables.get(name, {}))

    def read_response_file(self, path: str) -> Table:
        try:
            lines = self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None
        return parse_response_lines(lines)

    def save_file(self, name: str, lines: list[str]) -> bool:
        self.files[name] = list(lines)
        return True
