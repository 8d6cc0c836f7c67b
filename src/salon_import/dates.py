from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

from salon_import.errors import InvalidDateError

# Day zero of spreadsheet date serials (accounts for the 1900 leap-year bug).
SPREADSHEET_EPOCH = datetime(1899, 12, 30)
# 9999-12-31 in serial form.
_MAX_SERIAL = 2958465

_DAY_FIRST = re.compile(
    r"^(?P<day>\d{1,2})[-/.](?P<month>\d{1,2})[-/.](?P<year>\d{4})"
    r"(?:[ T]+(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?)?$"
)
_ISO = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})"
    r"(?:[ T]+(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?)?$"
)


def from_spreadsheet_serial(serial: float) -> datetime:
    """Convert a spreadsheet date serial (fraction = time of day) to a datetime."""

    if math.isnan(serial) or serial < 0 or serial > _MAX_SERIAL:
        raise InvalidDateError(serial, "serial number out of range")
    return SPREADSHEET_EPOCH + timedelta(seconds=round(serial * 86400))


def _from_match(match: re.Match[str], raw: Any) -> datetime:
    parts = match.groupdict()
    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
        )
    except ValueError as exc:
        raise InvalidDateError(raw, str(exc)) from exc


def parse_transaction_date(value: Any) -> datetime:
    """Interpret a transaction date cell.

    Accepts workbook datetime/date cells, spreadsheet serial numbers, and text in
    ``DD-MM-YYYY[ HH:mm[:ss]]`` form (``-``, ``/`` or ``.`` separated). ISO
    ``YYYY-MM-DD`` text is accepted too. Returned datetimes are naive.
    """

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        raise InvalidDateError(value)
    if isinstance(value, (int, float)):
        return from_spreadsheet_serial(float(value))
    if value is None:
        raise InvalidDateError(value, "value is missing")

    text = " ".join(str(value).split())
    if not text:
        raise InvalidDateError(value, "value is missing")
    if re.fullmatch(r"\d+(\.\d+)?", text):
        return from_spreadsheet_serial(float(text))
    for pattern in (_DAY_FIRST, _ISO):
        match = pattern.match(text)
        if match:
            return _from_match(match, value)
    raise InvalidDateError(value)
