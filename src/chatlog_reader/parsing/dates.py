"""Interpret the numeric dates found in transcript timestamps.

Exports write dates as ``D/M/Y`` or ``M/D/Y`` depending on the phone's locale
and never say which. The rule used here:

1. a first number above 12 can only be a day, so it is ``D/M``;
2. otherwise a second number above 12 can only be a day, so it is ``M/D``;
3. otherwise the date is ambiguous and read day-first.

Rule 3 is a convention, not a detection: ``5/6/23`` is always 5 June.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from . import ChatMessage

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_DATE_SPLIT_RE = re.compile(r"[/.\-]")
_LEADING_INT_RE = re.compile(r"\s*(\d+)")


def interpret_day_month(first: int, second: int) -> tuple[int, int]:
    """Return ``(day, month_index)`` for the two leading date numbers.

    ``month_index`` is zero-based and is not range-checked.
    """
    if first > 12:
        return first, second - 1
    if second > 12:
        return second, first - 1
    return first, second - 1


def expand_year(year: int) -> int:
    return year + 2000 if year < 100 else year


def _leading_int(token: str) -> int | None:
    match = _LEADING_INT_RE.match(token)
    return int(match.group(1)) if match else None


def format_full_date(date_str: str) -> str:
    """Render a numeric date such as ``26/05/23`` as ``26 May 2023``.

    Year-first dates such as ``2023-05-26`` are recognised by a first group
    above 31. Strings that do not start with two numeric groups are returned
    unchanged, so the function can be applied to its own output. A month
    number outside 1-12 is echoed as written. A missing year means the current
    year.
    """
    if not date_str:
        return ""
    parts = [p.strip() for p in _DATE_SPLIT_RE.split(date_str)]
    if len(parts) < 2:
        return date_str
    first, second = _leading_int(parts[0]), _leading_int(parts[1])
    if first is None or second is None:
        return date_str

    third = _leading_int(parts[2]) if len(parts) > 2 and parts[2] else None
    if first > 31 and third is not None:
        # Year-first exports (2023-05-26) put the year in the first group.
        first, third = third, first
    day, month_index = interpret_day_month(first, second)

    year = third
    if year is None:
        year = datetime.now().year
    else:
        year = expand_year(year)

    month = MONTH_NAMES[month_index] if 0 <= month_index < 12 else parts[1]
    return f"{day} {month} {year}"


def split_timestamp(timestamp: str) -> tuple[str, str]:
    """Split a raw timestamp into its date part and its time part."""
    cleaned = timestamp.replace("[", "").replace("]", "")
    date_part, sep, time_part = cleaned.partition(",")
    if not sep:
        # "2023-05-26 21:14" style exports have no comma.
        date_part, _, time_part = cleaned.strip().partition(" ")
    return date_part.strip(), time_part.strip()


def display_timestamp(timestamp: str) -> str:
    """Presentation form of a raw timestamp: ``26 May 2023 • 10:00:00 am``."""
    date_part, time_part = split_timestamp(timestamp)
    full_date = format_full_date(date_part)
    if time_part:
        return f"{full_date} • {time_part.lower()}"
    return full_date


def parse_message_date(date_str: str) -> date | None:
    """Return the calendar date for a numeric date string, or None.

    Uses the same day/month rule as :func:`format_full_date`. Dates without a
    year or with impossible values yield None.
    """
    parts = [p.strip() for p in _DATE_SPLIT_RE.split(date_str)]
    if len(parts) < 3:
        return None
    numbers = [_leading_int(p) for p in parts[:3]]
    if any(n is None for n in numbers):
        return None
    first, second, year = numbers
    # Year-first exports (2023-05-26) put the year in the first group.
    if first > 31:
        first, second, year = year, second, first
    day, month_index = interpret_day_month(first, second)
    try:
        return date(expand_year(year), month_index + 1, day)
    except ValueError:
        return None


def message_date(message: ChatMessage) -> date | None:
    date_part, _ = split_timestamp(message.timestamp)
    return parse_message_date(date_part)
