"""Parser for the payer's government response file.

Each line echoes a submission record with the payer's 4-character response
code appended::

    20230510 1234567890KV F A001 00000337000 PAID

Health card numbers are ten digits with an optional two-letter version code.
Lines containing ``|`` or ``,`` are treated as already delimited.
"""
from __future__ import annotations

import re
from typing import Iterable

from ems_billing.billing.errors import ResponseParseError
from ems_billing.services.tables import Table

_RESPONSE_LINE = re.compile(
    r"""
    ^(?P<date>\d{8})
    (?P<hcn>\d{10}[A-Z]{0,2})
    (?P<sex>[MFIH])
    (?P<code>[A-Z]\d{3})
    (?P<amount>.{11})
    (?P<status>[A-Z]{4})$
    """,
    re.VERBOSE,
)

_DELIMITERS = ("|", ",")
_FIELD_COUNT = 6


def parse_response_line(line: str) -> list[str]:
    """Split one response line into its six fields."""
    text = line.strip()
    for delimiter in _DELIMITERS:
        if delimiter in text:
            fields = [f.strip() for f in text.split(delimiter)]
            if len(fields) < _FIELD_COUNT:
                raise ResponseParseError(f"Expected {_FIELD_COUNT} fields, got {len(fields)}: {line!r}")
            return fields

    match = _RESPONSE_LINE.match(text)
    if match is None:
        raise ResponseParseError(f"Unrecognised response line: {line!r}")
    return list(match.groups())


def parse_response_lines(lines: Iterable[str]) -> Table:
    """Rows keyed by 1-based line number. Blank lines are skipped."""
    rows: Table = {}
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        rows[str(number)] = parse_response_line(line)
    return rows
