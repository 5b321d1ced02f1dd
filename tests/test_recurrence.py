import pytest
import pytz
from datetime import datetime

from deadline_rules.enums import Frequency, RecurrenceEnds
from deadline_rules.recurrence import (
    RecurrenceRule,
    coerce_recurrence,
    next_deadline,
    occurrences,
    validate_recurrence,
)

UTC = pytz.utc
SGT = pytz.timezone("Asia/Singapore")
MONTHLY = RecurrenceRule(Frequency.monthly)


def utc(*args):
    return datetime(*args, tzinfo=UTC)


def test_month_end_clamps_to_february():
    assert next_deadline(utc(2025, 1, 31), MONTHLY, UTC) == utc(2025, 2, 28)


def test_month_end_clamps_in_singapore_time():
    # 00:00Z is 08:00 local, still Jan 31 in Singapore
    result = next_deadline(utc(2025, 1, 31), MONTHLY, SGT)
    assert result == utc(2025, 2, 28)
    assert result.astimezone(SGT).day == 28


def test_leap_year_february():
    assert next_deadline(utc(2024, 1, 31, 9), MONTHLY, UTC) == utc(2024, 2, 29, 9)


def test_month_without_overflow():
    assert next_deadline(utc(2025, 3, 15, 9), MONTHLY, UTC) == utc(2025, 4, 15, 9)


def test_anchor_day_returns_to_month_end():
    assert next_deadline(utc(2025, 2, 28), MONTHLY, UTC, anchor_day=31) == utc(2025, 3, 31)
    assert next_deadline(utc(2025, 3, 31), MONTHLY, UTC, anchor_day=31) == utc(2025, 4, 30)


def test_month_steps_cross_year():
    assert next_deadline(utc(2025, 12, 15), MONTHLY, UTC) == utc(2026, 1, 15)
    rule = RecurrenceRule(Frequency.monthly, interval=14)
    assert next_deadline(utc(2025, 11, 30), rule, UTC) == utc(2027, 1, 30)


def test_daily_and_weekly_intervals():
    assert next_deadline(utc(2025, 1, 30), RecurrenceRule(Frequency.daily, interval=3), UTC) == utc(2025, 2, 2)
    assert next_deadline(utc(2025, 1, 30), RecurrenceRule(Frequency.weekly, interval=2), UTC) == utc(2025, 2, 13)


def test_series_ends_after_until():
    rule = RecurrenceRule(Frequency.daily, ends=RecurrenceEnds.on_date, until=utc(2025, 2, 1))
    assert next_deadline(utc(2025, 1, 31), rule, UTC) == utc(2025, 2, 1)
    assert next_deadline(utc(2025, 2, 1), rule, UTC) is None


def test_never_ending_rule_ignores_until():
    rule = RecurrenceRule(Frequency.daily, ends=RecurrenceEnds.never, until=utc(2025, 2, 1))
    assert next_deadline(utc(2025, 2, 1), rule, UTC) == utc(2025, 2, 2)


def test_missing_inputs_yield_none():
    assert next_deadline(None, MONTHLY, UTC) is None
    assert next_deadline(utc(2025, 1, 1), None, UTC) is None


def test_occurrences_do_not_drift():
    assert occurrences(utc(2025, 1, 31), MONTHLY, UTC, 4) == [
        utc(2025, 1, 31),
        utc(2025, 2, 28),
        utc(2025, 3, 31),
        utc(2025, 4, 30),
    ]


def test_occurrences_stop_at_until():
    rule = RecurrenceRule(Frequency.monthly, ends=RecurrenceEnds.on_date, until=utc(2025, 3, 15))
    assert occurrences(utc(2025, 1, 31), rule, UTC, 10) == [utc(2025, 1, 31), utc(2025, 2, 28)]


def test_coerce_recurrence_from_form_values():
    rule = coerce_recurrence({"frequency": "Weekly", "interval": "2"}, UTC)
    assert rule == RecurrenceRule(Frequency.weekly, interval=2)


def test_coerce_recurrence_from_json_string():
    rule = coerce_recurrence(
        '{"frequency": "monthly", "interval": 0, "ends": "onDate", "until": "2025-06-01T00:00:00Z"}',
        UTC,
    )
    assert rule.frequency == Frequency.monthly
    assert rule.interval == 1
    assert rule.ends == RecurrenceEnds.on_date
    assert rule.until == utc(2025, 6, 1)


@pytest.mark.parametrize("raw", [None, "", {}, {"frequency": "none"}, {"frequency": "yearly"}, "not json", [1, 2]])
def test_coerce_recurrence_rejects_non_rules(raw):
    assert coerce_recurrence(raw, UTC) is None


def test_coerce_recurrence_unknown_end_falls_back_to_never():
    rule = coerce_recurrence({"frequency": "daily", "ends": "afterCount"}, UTC)
    assert rule.ends == RecurrenceEnds.never


def test_validate_recurrence():
    deadline = utc(2025, 5, 1)
    assert validate_recurrence(None, None) == []
    assert validate_recurrence(MONTHLY, deadline) == []
    assert validate_recurrence(MONTHLY, None) == ["A deadline is required when recurrence is enabled."]
    assert validate_recurrence(RecurrenceRule(Frequency.daily, interval=0), deadline) == [
        "Repeat interval must be at least 1."
    ]
    early = RecurrenceRule(Frequency.daily, ends=RecurrenceEnds.on_date, until=utc(2025, 4, 1))
    assert validate_recurrence(early, deadline) == ["Repeat end date must be on or after the deadline."]
    open_ended = RecurrenceRule(Frequency.daily, ends=RecurrenceEnds.on_date)
    assert validate_recurrence(open_ended, deadline) == ["Choose an end date for the repeat."]


def test_rule_to_dict():
    rule = RecurrenceRule(Frequency.weekly, interval=2, ends=RecurrenceEnds.on_date, until=utc(2025, 6, 1))
    assert rule.to_dict() == {
        "frequency": "weekly",
        "interval": 2,
        "ends": "onDate",
        "until": "2025-06-01T00:00:00+00:00",
    }
    assert RecurrenceRule.from_dict(rule.to_dict(), UTC) == rule
