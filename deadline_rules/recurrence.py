"""
Recurrence rules for tasks with a deadline.

Month steps follow the calendar. When the target month is shorter than the
day being stepped from, the date is clamped to that month's last day
(Jan 31 + 1 month -> Feb 28, or Feb 29 in a leap year). Passing the series'
original day as ``anchor_day`` lets later steps return to it (Feb 28 -> Mar 31).
"""
import calendar
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Any, Dict, List, Optional

from .enums import Frequency, RecurrenceEnds
from .timeutils import localize, parse_instant


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: Frequency
    interval: int = 1
    ends: RecurrenceEnds = RecurrenceEnds.never
    until: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frequency": self.frequency.value,
            "interval": self.interval,
            "ends": self.ends.value,
            "until": self.until.isoformat() if self.until else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], tz: tzinfo) -> Optional["RecurrenceRule"]:
        return coerce_recurrence(data, tz)


def _coerce_interval(value) -> int:
    try:
        interval = int(float(value))
    except (TypeError, ValueError):
        return 1
    return max(1, interval)


def coerce_recurrence(raw, tz: tzinfo) -> Optional[RecurrenceRule]:
    """
    Build a rule from a mapping or JSON string sent by a form.

    Missing input, unknown frequencies and the explicit "none" choice all
    mean "not recurring" and return None.
    """
    if not raw:
        return None
    if isinstance(raw, RecurrenceRule):
        return raw
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    if not isinstance(raw, dict):
        return None

    try:
        frequency = Frequency(str(raw.get("frequency") or "").lower())
    except ValueError:
        return None

    try:
        ends = RecurrenceEnds(raw.get("ends") or RecurrenceEnds.never.value)
    except ValueError:
        ends = RecurrenceEnds.never

    return RecurrenceRule(
        frequency=frequency,
        interval=_coerce_interval(raw.get("interval")),
        ends=ends,
        until=parse_instant(raw.get("until"), tz),
    )


def validate_recurrence(rule: Optional[RecurrenceRule], deadline: Optional[datetime]) -> List[str]:
    """Messages describing why ``rule`` cannot be attached to ``deadline``."""
    if rule is None:
        return []
    errors = []
    if deadline is None:
        errors.append("A deadline is required when recurrence is enabled.")
    if rule.interval < 1:
        errors.append("Repeat interval must be at least 1.")
    if rule.ends == RecurrenceEnds.on_date:
        if rule.until is None:
            errors.append("Choose an end date for the repeat.")
        elif deadline is not None and rule.until < deadline:
            errors.append("Repeat end date must be on or after the deadline.")
    return errors


# =========================================================
# EXPANSION
# =========================================================
def _add_months(value: datetime, months: int, anchor_day: Optional[int] = None) -> datetime:
    total = value.month - 1 + months
    year = value.year + total // 12
    month = total % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    day = min(anchor_day or value.day, last_day)
    return value.replace(year=year, month=month, day=day)


def _step(local: datetime, rule: RecurrenceRule, steps: int, anchor_day: Optional[int]) -> datetime:
    """Advance a naive wall-clock datetime by ``steps`` rule periods."""
    if rule.frequency == Frequency.daily:
        return local + timedelta(days=rule.interval * steps)
    if rule.frequency == Frequency.weekly:
        return local + timedelta(weeks=rule.interval * steps)
    return _add_months(local, rule.interval * steps, anchor_day)


def _past_end(candidate: datetime, rule: RecurrenceRule) -> bool:
    return rule.ends == RecurrenceEnds.on_date and rule.until is not None and candidate > rule.until


def next_deadline(
    current: Optional[datetime],
    rule: Optional[RecurrenceRule],
    tz: tzinfo,
    anchor_day: Optional[int] = None,
) -> Optional[datetime]:
    """
    Deadline of the occurrence after ``current``, or None when the series ends.

    Steps are taken on the wall clock in ``tz`` so a 09:00 deadline stays at
    09:00 local time.
    """
    if current is None or rule is None:
        return None
    local = localize(current, tz).replace(tzinfo=None)
    candidate = localize(_step(local, rule, 1, anchor_day), tz)
    if _past_end(candidate, rule):
        return None
    return candidate


def occurrences(
    start: datetime,
    rule: RecurrenceRule,
    tz: tzinfo,
    limit: int,
) -> List[datetime]:
    """
    First ``limit`` deadlines of a series beginning at ``start`` (inclusive).

    Each date is computed from ``start`` rather than from the previous date,
    so month clamping never accumulates.
    """
    local_start = localize(start, tz).replace(tzinfo=None)
    series = []
    for index in range(max(0, limit)):
        candidate = localize(_step(local_start, rule, index, local_start.day), tz)
        if _past_end(candidate, rule):
            break
        series.append(candidate)
    return series
