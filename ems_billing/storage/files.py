"""File-backed table provider.

Each table is a UTF-8 text file ``<data_dir>/<name>.txt`` with one row per
line and fields joined by a delimiter. Replacing a table writes a temporary
file and renames it over the original, so readers see either the old or the
new table and never a partial one.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable

from ems_billing.services.tables import BillingFileStore, Table, TableProvider, next_numeric_key
from ems_billing.storage.response_format import parse_response_lines

logger = logging.getLogger(__name__)


class FileTableProvider(TableProvider, BillingFileStore):
    """Tables and billing files stored as plain text under two directories."""

    def __init__(self, data_dir: Path, output_dir: Path, delimiter: str = "|") -> None:
        self.data_dir = Path(data_dir)
        self.output_dir = Path(output_dir)
        self.delimiter = delimiter
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def table_path(self, name: str) -> Path:
        return self.data_dir / f"{name}.txt"

    # ------------------------------------------------------------------
    # TableProvider
    # ------------------------------------------------------------------

    def get_table(self, name: str) -> Table:
        path = self.table_path(name)
        if not path.exists():
            return {}
        table: Table = {}
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\r\n")
                if not line:
                    continue
                fields = line.split(self.delimiter)
                table[fields[0]] = fields
        return table

    def set_table(self, name: str, rows: Iterable[list[str]]) -> None:
        lines = [self._join(row) for row in rows]
        self._atomic_write(self.table_path(name), lines)

    def add_row(self, name: str, fields: list[str]) -> None:
        with open(self.table_path(name), "a", encoding="utf-8") as f:
            f.write(self._join(fields) + "\n")

    def generate_id(self, name: str) -> str:
        return next_numeric_key(self.get_table(name))

    # ------------------------------------------------------------------
    # BillingFileStore
    # ------------------------------------------------------------------

    def read_response_file(self, path: str) -> Table:
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.output_dir / file_path
        with open(file_path, encoding="utf-8") as f:
            return parse_response_lines(f)

    def save_file(self, name: str, lines: list[str]) -> bool:
        try:
            self._atomic_write(self.output_dir / name, lines)
        except OSError as e:
            logger.error("Failed to write %s: %s", name, e)
            return False
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _join(self, fields: list[str]) -> str:
        for value in fields:
            if self.delimiter in value or "\n" in value:
                raise ValueError(f"Field {value!r} contains the delimiter or a newline")
        return self.delimiter.join(fields)

    @staticmethod
    def _atomic_write(path: Path, lines: list[str]) -> None:
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
