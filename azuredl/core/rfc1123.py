"""
RFC-1123 date/time formatting for the ``x-ms-date`` header.

The text produced here is part of the SharedKey string-to-sign, so the output
form is fixed: ``Tue, 03 Jun 2008 11:05:30 GMT``.

Grammar::

    [Www, ]dd Mon yyyy HH:mm[:ss] zzzz

- Day and month names come from hard-coded English tables, never the locale.
- Only four digit years are handled.
- The zone is ``GMT`` for a zero offset, otherwise ``+HHMM`` / ``-HHMM``.
  North American and military zone names are not handled.

Parsing is case-insensitive and lenient: day, hour, minute and second accept
one or two digits, and out-of-range values carry into the next unit (day 32 of
June resolves to 2 July). A day-of-week, when present, must match the
resolved date.
"""

import re
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Callable, Optional

from azuredl.core.exceptions import MalformedDateError

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_MONTH_LOOKUP = MappingProxyType(
    {name.lower(): index for index, name in enumerate(MONTH_NAMES, start=1)}
)

_DAY_LOOKUP = MappingProxyType(
    {name.lower(): index for index, name in enumerate(DAY_NAMES)}
)

_RFC1123_PATTERN = re.compile(
    r"^(?:(?P<dow>[A-Za-z]{3}), )?"
    r"(?P<day>\d{1,2}) (?P<month>[A-Za-z]{3}) (?P<year>\d{4}) "
    r"(?P<hour>\d{1,2}):(?P<minute>\d{1,2})(?::(?P<second>\d{1,2}))? "
    r"(?P<zone>GMT|[+-]\d{4})$",
    re.IGNORECASE,
)


def format_rfc1123(instant: datetime) -> str:
    """
    Format a point in time as RFC-1123 text.

    Naive datetimes are taken to be UTC. Offsets that are not a whole number
    of minutes cannot be written as +HHMM, so such instants are rendered in
    GMT. Sub-second precision is dropped.

    Args:
        instant: Point in time to format

    Returns:
        Text such as ``Tue, 03 Jun 2008 11:05:30 GMT``
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    offset = instant.utcoffset()
    if offset and offset % timedelta(minutes=1):
        instant = instant.astimezone(timezone.utc)

    return (
        f"{DAY_NAMES[instant.weekday()]}, "
        f"{instant.day:02d} {MONTH_NAMES[instant.month - 1]} {instant.year:04d} "
        f"{instant.hour:02d}:{instant.minute:02d}:{instant.second:02d} "
        f"{_format_offset(instant.utcoffset())}"
    )


def parse_rfc1123(text: str) -> datetime:
    """
    Parse RFC-1123 text into an aware UTC datetime.

    Args:
        text: Date string, e.g. ``Tue, 3 Jun 2008 11:05:30 GMT``

    Returns:
        Datetime normalized to UTC

    Raises:
        MalformedDateError: If the text cannot be resolved to a point in time
    """
    match = _RFC1123_PATTERN.match(text)
    if not match:
        raise MalformedDateError(text)

    month = _MONTH_LOOKUP.get(match.group("month").lower())
    if month is None:
        raise MalformedDateError(text, f"unknown month name '{match.group('month')}'")

    day = int(match.group("day"))
    if day == 0:
        raise MalformedDateError(text, "day-of-month must be at least 1")

    year = int(match.group("year"))
    offset = _parse_offset(text, match.group("zone"))

    try:
        resolved = datetime(year, month, 1, tzinfo=offset) + timedelta(
            days=day - 1,
            hours=int(match.group("hour")),
            minutes=int(match.group("minute")),
            seconds=int(match.group("second") or 0),
        )
    except (ValueError, OverflowError) as e:
        raise MalformedDateError(text, str(e)) from e

    dow = match.group("dow")
    if dow is not None:
        expected = _DAY_LOOKUP.get(dow.lower())
        if expected is None:
            raise MalformedDateError(text, f"unknown day name '{dow}'")
        if expected != resolved.weekday():
            raise MalformedDateError(
                text,
                f"day-of-week '{dow}' does not match {DAY_NAMES[resolved.weekday()]}",
            )

    return resolved.astimezone(timezone.utc)


def format_now(clock: Optional[Callable[[], datetime]] = None) -> str:
    """Format the current UTC time; ``clock`` replaces ``datetime.now`` in tests."""
    now = clock() if clock is not None else datetime.now(timezone.utc)
    return format_rfc1123(now)


def _format_offset(offset: Optional[timedelta]) -> str:
    if not offset:
        return "GMT"

    seconds = int(offset.total_seconds())
    sign = "-" if seconds < 0 else "+"
    hours, minutes = divmod(abs(seconds) // 60, 60)
    return f"{sign}{hours:02d}{minutes:02d}"


def _parse_offset(text: str, zone: str) -> timezone:
    if zone.upper() == "GMT":
        return timezone.utc

    hours = int(zone[1:3])
    minutes = int(zone[3:5])
    if hours > 23 or minutes > 59:
        raise MalformedDateError(text, f"offset '{zone}' out of range")

    delta = timedelta(hours=hours, minutes=minutes)
    if zone[0] == "-":
        delta = -delta
    return timezone(delta)
