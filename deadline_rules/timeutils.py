"""
Time helpers for deadline handling.

Every function that interprets a wall-clock value takes the timezone as an
argument. Naive datetimes are treated as local time in that zone.
"""
from datetime import datetime, tzinfo
from typing import Optional, Union
import pytz

from .constants import DEFAULT_TIMEZONE, LOCAL_INPUT_FORMAT

Instant = Union[datetime, str, None]


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Return the pytz zone for ``name``, falling back to the default zone."""
    return pytz.timezone(name or DEFAULT_TIMEZONE)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Attach ``tz`` to a naive datetime; convert an aware one into ``tz``."""
    if value.tzinfo is None:
        if hasattr(tz, "localize"):
            return tz.localize(value)
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def parse_instant(value: Instant, tz: tzinfo) -> Optional[datetime]:
    """
    Parse an ISO-8601 instant (or pass a datetime through).

    Empty values and unparseable strings yield None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return localize(value, tz)
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return localize(parsed, tz)


def parse_local_input(value: Optional[str], tz: tzinfo) -> Optional[datetime]:
    """Parse a ``YYYY-MM-DDTHH:MM`` form value as wall-clock time in ``tz``."""
    if not value:
        return None
    try:
        naive = datetime.strptime(value, LOCAL_INPUT_FORMAT)
    except ValueError:
        return None
    return localize(naive, tz)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, truncated toward zero."""
    seconds = (end - start).total_seconds()
    return int(seconds / 60)
