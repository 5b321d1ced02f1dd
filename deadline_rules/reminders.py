"""
Deadline-relative reminder rules.

A reminder offset is a positive whole number of minutes before a task's
deadline. All functions here are pure: the caller passes ``now`` and the
deadline (an aware datetime, or None when the task has no due date).
"""
import json
import math
from datetime import datetime, timedelta
from numbers import Real
from typing import Iterable, List, Optional, Tuple, Union

from .constants import DEFAULT_REMINDER_OFFSETS, MAX_OFFSET_MINUTES, MINUTES
from .enums import OffsetUnit
from .timeutils import minutes_between


def _to_minutes(value, allow_text: bool = False) -> Optional[int]:
    """Return ``value`` as a positive int, or None if it is not one."""
    if isinstance(value, bool):
        return None
    if allow_text and isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if not isinstance(value, Real):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if not math.isfinite(value) or not value.is_integer() or value <= 0:
        return None
    if value > MAX_OFFSET_MINUTES:
        return None
    return int(value)


def _as_collection(offsets) -> list:
    """Accept a list, a JSON array string, a CSV string or a single value."""
    if offsets is None:
        return []
    if isinstance(offsets, str):
        try:
            parsed = json.loads(offsets)
        except ValueError:
            return [part.strip() for part in offsets.split(",")]
        return parsed if isinstance(parsed, list) else [parsed]
    if isinstance(offsets, (list, tuple, set, frozenset)):
        return list(offsets)
    return [offsets]


# =========================================================
# CORE RULES
# =========================================================
def max_valid_offset_minutes(deadline: Optional[datetime], now: datetime) -> int:
    """Largest offset whose reminder instant is not in the past."""
    if deadline is None:
        return 0
    return max(0, minutes_between(now, deadline))


def is_offset_addable(offset_minutes, deadline: Optional[datetime], now: datetime) -> bool:
    if deadline is None:
        return False
    minutes = _to_minutes(offset_minutes)
    if minutes is None:
        return False
    return minutes <= max_valid_offset_minutes(deadline, now)


def normalize_offsets(offsets: Iterable) -> List[int]:
    """Deduplicate, drop anything that is not a positive integer, sort descending."""
    cleaned = set()
    for value in _as_collection(offsets):
        minutes = _to_minutes(value, allow_text=True)
        if minutes is not None:
            cleaned.add(minutes)
    return sorted(cleaned, reverse=True)


def prune_offsets_for_deadline(
    offsets: Iterable,
    deadline: Optional[datetime],
    now: datetime,
) -> Tuple[List[int], int]:
    """
    Keep only offsets that still fire in the future for ``deadline``.

    Returns the kept offsets (descending) and how many normalized offsets
    were dropped, so the caller can tell the user.
    """
    normalized = normalize_offsets(offsets)
    limit = max_valid_offset_minutes(deadline, now)
    kept = [m for m in normalized if m <= limit]
    return kept, len(normalized) - len(kept)


def label_for_offset(minutes: int) -> str:
    if minutes % MINUTES["day"] == 0:
        return f"{minutes // MINUTES['day']} day(s) before"
    if minutes % MINUTES["hour"] == 0:
        return f"{minutes // MINUTES['hour']} hour(s) before"
    return f"{minutes} minute(s) before"


def effective_offsets(offsets: Iterable, deadline: Optional[datetime]) -> List[int]:
    """Offsets used for display and scheduling; defaults apply only with a deadline."""
    normalized = normalize_offsets(offsets)
    if deadline is not None and not normalized:
        return list(DEFAULT_REMINDER_OFFSETS)
    return normalized


def reminder_instant(deadline: datetime, minutes: int) -> Optional[datetime]:
    """Instant ``minutes`` before ``deadline``, or None if it falls outside the calendar."""
    try:
        return deadline - timedelta(minutes=minutes)
    except OverflowError:
        return None


def reminder_instants(deadline: Optional[datetime], offsets: Iterable) -> List[datetime]:
    if deadline is None:
        return []
    instants = (reminder_instant(deadline, m) for m in normalize_offsets(offsets))
    return [instant for instant in instants if instant is not None]


# =========================================================
# FORM HELPERS
# =========================================================
def offset_to_minutes(value, unit: Union[OffsetUnit, str]) -> Optional[int]:
    """Convert a value + unit pair from the reminder picker into minutes."""
    try:
        unit = OffsetUnit(unit)
    except ValueError:
        return None
    count = _to_minutes(value, allow_text=True)
    if count is None:
        return None
    return _to_minutes(count * MINUTES[unit.value])


def offset_rejection_message(offset_minutes, deadline: Optional[datetime], now: datetime) -> Optional[str]:
    """User-facing reason an offset cannot be added, or None if it can."""
    if deadline is None:
        return "Set a deadline before adding reminders."
    if _to_minutes(offset_minutes) is None:
        return "Reminder must be a positive whole number of minutes."
    if is_offset_addable(offset_minutes, deadline, now):
        return None
    latest_days = max_valid_offset_minutes(deadline, now) // MINUTES["day"]
    return f"That reminder would be in the past. Latest allowed is {latest_days} day(s) before."


def add_offset(
    offsets: Iterable,
    offset_minutes,
    deadline: Optional[datetime],
    now: datetime,
) -> Tuple[List[int], Optional[str]]:
    """Merge a candidate offset into ``offsets`` or explain why it was refused."""
    message = offset_rejection_message(offset_minutes, deadline, now)
    if message:
        return normalize_offsets(offsets), message
    return normalize_offsets(list(_as_collection(offsets)) + [offset_minutes]), None


# =========================================================
# SCHEDULING HELPERS
# =========================================================
def reminders_due(
    deadline: Optional[datetime],
    offsets: Iterable,
    now: datetime,
    tolerance_minutes: int = 1,
) -> List[int]:
    """Effective offsets whose reminder instant is within ``tolerance_minutes`` of now."""
    if deadline is None:
        return []
    due = []
    for minutes in effective_offsets(offsets, deadline):
        remind_at = reminder_instant(deadline, minutes)
        if remind_at is None:
            continue
        if abs(minutes_between(remind_at, now)) <= tolerance_minutes:
            due.append(minutes)
    return due


def describe_lead_time(minutes: int) -> str:
    """Phrase used in notifications, e.g. "3 days" or "1 hour"."""
    if minutes >= MINUTES["day"]:
        count, noun = minutes // MINUTES["day"], "day"
    elif minutes >= MINUTES["hour"]:
        count, noun = minutes // MINUTES["hour"], "hour"
    else:
        count, noun = minutes, "minute"
    return f"{count} {noun}{'s' if count > 1 else ''}"
