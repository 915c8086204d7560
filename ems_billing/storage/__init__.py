"""Concrete table providers and table-backed collaborators."""

from ems_billing.storage.collaborators import TableDemographicsProvider, TableSchedulingProvider
from ems_billing.storage.files import FileTableProvider
from ems_billing.storage.memory import InMemoryTableProvider
from ems_billing.storage.response_format import parse_response_line, parse_response_lines

__all__ = [
    "FileTableProvider",
    "InMemoryTableProvider",
    "TableDemographicsProvider",
    "TableSchedulingProvider",
    "parse_response_line",
    "parse_response_lines",
]
