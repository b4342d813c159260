"""DataCite date codec.

DataCite stores dates as a composite string: a single datetime token
(``2023-01-01``), a closed range (``2023-01-01/2023-12-31``) or an open
range (``/2024-12-31``). A token may carry a time and a UTC offset
(``2023-01-01T10:30:00.250+02:00``).

The editor shows date, time and timezone as separate controls, so this
module decomposes a token into DateComponents and composes it back.
Decomposition keeps the time at full source precision; only display
code truncates seconds.
"""

import re
from collections.abc import Mapping
from datetime import date
from typing import Any

from dcform.exceptions import DateCodecError

from .models import DateComponents, DateRangeEntry

_OFFSET_PATTERN = re.compile(r"([+-])(\d{2}):?(\d{2})$")
_DATE_PART_PATTERN = re.compile(r"^(\d{4})(?:-(\d{2})(?:-(\d{2}))?)?$")


def parse_date_time(value: str | None) -> DateComponents:
    """Split a DataCite datetime token into date, time and timezone.

    Args:
        value: Token such as ``2023-01-01T10:30:00Z``. Empty or None is allowed.

    Returns:
        DateComponents. ``time`` is set only when the token has a ``T``
        separator; ``timezone`` is ``Z`` or a ``±HH:MM`` offset, with
        ``±HHMM`` offsets rewritten to ``±HH:MM``.
    """
    text = (value or "").strip()
    if not text:
        return DateComponents(date="")

    if "T" not in text:
        return DateComponents(date=text)

    date_part, _, remainder = text.partition("T")
    timezone = None

    if remainder.endswith("Z"):
        timezone = "Z"
        remainder = remainder[:-1]
    else:
        match = _OFFSET_PATTERN.search(remainder)
        if match:
            sign, hours, minutes = match.groups()
            timezone = f"{sign}{hours}:{minutes}"
            remainder = remainder[: match.start()]

    return DateComponents(date=date_part, time=remainder, timezone=timezone)


def build_date_time(
    date_value: str, time: str | None = None, timezone: str | None = None
) -> str:
    """Compose a DataCite datetime token from its components.

    The timezone is only appended after a non-empty time, since an offset
    without a time is not part of the grammar.
    """
    result = date_value or ""
    if time:
        result += f"T{time}"
        if timezone:
            result += timezone
    return result


def _clean(value: str | None) -> str:
    return (value or "").strip()


def has_valid_date_value(entry: DateRangeEntry | Mapping[str, Any]) -> bool:
    """Check whether an entry has a start or end date worth serializing."""
    entry = DateRangeEntry.coerce(entry)
    return bool(_clean(entry.start_date) or _clean(entry.end_date))


def serialize_date_entry(entry: DateRangeEntry | Mapping[str, Any]) -> str:
    """Reduce a start/end pair to the DataCite composite grammar.

    Args:
        entry: Date entry; callers gate with ``has_valid_date_value`` first.

    Returns:
        ``start/end``, ``start`` or ``/end``.

    Raises:
        DateCodecError: If neither start nor end date is present.
    """
    entry = DateRangeEntry.coerce(entry)
    start = _clean(entry.start_date)
    end = _clean(entry.end_date)

    if start and end:
        return f"{start}/{end}"
    if start:
        return start
    if end:
        return f"/{end}"

    raise DateCodecError(
        f"Date entry '{entry.date_type or 'unknown'}' has neither start nor end date"
    )


def parse_date_entry(value: str | None, date_type: str = "") -> DateRangeEntry:
    """Split a stored composite date back into a start/end entry.

    Accepts every shape ``serialize_date_entry`` produces, plus the
    open-ended ``start/`` form found in imported records.
    """
    text = _clean(value)
    if "/" not in text:
        return DateRangeEntry(date_type=date_type, start_date=text or None)

    start, _, end = text.partition("/")
    return DateRangeEntry(
        date_type=date_type,
        start_date=start.strip() or None,
        end_date=end.strip() or None,
    )


def parse_date_part(value: str | None) -> date | None:
    """Convert the date part of a token to a ``date``.

    ``YYYY`` maps to January 1st and ``YYYY-MM`` to the first of the month.
    Returns None when the text is not a calendar date.
    """
    match = _DATE_PART_PATTERN.match(_clean(value))
    if not match:
        return None

    year, month, day = match.groups()
    try:
        return date(int(year), int(month or 1), int(day or 1))
    except ValueError:
        return None
