"""Abstract table and file interfaces consumed by the billing core."""

from abc import ABC, abstractmethod
from typing import Iterable

# A table is a mapping from row key to its ordered fields.
Table = dict[str, list[str]]


class TableProvider(ABC):
    """Key-value table storage."""

    @abstractmethod
    def get_table(self, name: str) -> Table:
        """Return every row of *name*, keyed by the first field."""
        ...

    @abstractmethod
    def set_table(self, name: str, rows: Iterable[list[str]]) -> None:
        """Replace the full contents of *name* with *rows*.

        Implementations must leave the previous contents intact if the
        replacement fails part way.
        """
        ...

    @abstractmethod
    def add_row(self, name: str, fields: list[str]) -> None:
        """Append a single row to *name*."""
        ...

    @abstractmethod
    def generate_id(self, name: str) -> str:
        """Return a key not yet used in *name*."""
        ...


class BillingFileStore(ABC):
    """Reads payer response files and writes submission files."""

    @abstractmethod
    def read_response_file(self, path: str) -> Table:
        """Parse a government response file into rows of six fields."""
        ...

    @abstractmethod
    def save_file(self, name: str, lines: list[str]) -> bool:
        """Write *lines* to the file *name*. Returns False on failure."""
        ...


def next_numeric_key(table: Table) -> str:
    """One past the largest numeric key in *table*."""
    numeric = [int(k) for k in table if k.isdigit()]
    candidate = max(numeric, default=0) + 1
    while str(candidate) in table:
        candidate += 1
    return str(candidate)
