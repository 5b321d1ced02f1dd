import pytz
from datetime import datetime, timedelta

from deadline_rules.enums import Frequency
from deadline_rules.policy import (
    ScheduleDraft,
    build_schedule_payload,
    change_deadline,
    check_deadline,
    minimum_deadline,
    set_no_due_date,
)
from deadline_rules.recurrence import RecurrenceRule

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=pytz.utc)
WEEKLY = RecurrenceRule(Frequency.weekly)


def test_new_tasks_need_a_future_deadline():
    assert minimum_deadline(NOW) == NOW
    assert check_deadline(NOW - timedelta(minutes=5), NOW) == "Deadline cannot be in the past."
    assert check_deadline(NOW + timedelta(minutes=5), NOW) is None
    assert check_deadline(None, NOW) is None


def test_editing_overdue_task_lifts_minimum():
    original = NOW - timedelta(days=2)
    assert minimum_deadline(NOW, is_edit=True, original_deadline=original) is None
    assert check_deadline(original, NOW, is_edit=True, original_deadline=original) is None


def test_editing_future_task_keeps_minimum():
    original = NOW + timedelta(days=2)
    assert minimum_deadline(NOW, is_edit=True, original_deadline=original) == NOW
    assert check_deadline(NOW - timedelta(days=1), NOW, is_edit=True, original_deadline=original) is not None


def test_no_due_date_clears_deadline_and_recurrence():
    draft = ScheduleDraft(deadline=NOW + timedelta(days=3), reminder_offsets=(1440,), recurrence=WEEKLY)
    toggled = set_no_due_date(draft, True)
    assert toggled.no_due_date is True
    assert toggled.deadline is None
    assert toggled.recurrence is None
    assert toggled.reminder_offsets == (1440,)

    assert set_no_due_date(toggled, False).no_due_date is False


def test_moving_deadline_earlier_prunes_with_notice():
    draft = ScheduleDraft(deadline=NOW + timedelta(days=30), reminder_offsets=(10080, 1440))
    updated, notice = change_deadline(draft, NOW + timedelta(hours=12), NOW)
    assert updated.reminder_offsets == ()
    assert notice == "2 reminder(s) removed because they would be in the past."


def test_moving_deadline_later_keeps_offsets_silently():
    draft = ScheduleDraft(deadline=NOW + timedelta(days=2), reminder_offsets=(1440,))
    updated, notice = change_deadline(draft, NOW + timedelta(days=9), NOW)
    assert updated.reminder_offsets == (1440,)
    assert notice is None


def test_clearing_deadline_drops_recurrence():
    draft = ScheduleDraft(deadline=NOW + timedelta(days=2), recurrence=WEEKLY)
    updated, notice = change_deadline(draft, None, NOW)
    assert updated.deadline is None
    assert updated.recurrence is None
    assert notice is None


def test_recurrence_without_deadline_is_rejected():
    payload, errors = build_schedule_payload(ScheduleDraft(recurrence=WEEKLY), NOW)
    assert payload is None
    assert errors == ["A deadline is required when recurrence is enabled."]


def test_no_due_date_payload_has_no_reminders():
    draft = ScheduleDraft(deadline=NOW + timedelta(days=1), no_due_date=True, reminder_offsets=(60,))
    payload, errors = build_schedule_payload(draft, NOW)
    assert errors == []
    assert payload.to_dict() == {"deadline": None, "reminder_offsets": [], "recurrence": None}


def test_submit_prunes_reminders_in_the_past():
    deadline = NOW + timedelta(days=2)
    draft = ScheduleDraft(deadline=deadline, reminder_offsets=(60, 4320, 60, 1440), recurrence=WEEKLY)
    payload, errors = build_schedule_payload(draft, NOW)
    assert errors == []
    assert payload.deadline == deadline
    assert payload.reminder_offsets == [1440, 60]
    assert payload.dropped_count == 1
    assert payload.notice == "1 reminder(s) removed because they would be in the past."
    assert payload.recurrence == WEEKLY


def test_submit_keeps_empty_offsets_empty():
    payload, errors = build_schedule_payload(ScheduleDraft(deadline=NOW + timedelta(days=10)), NOW)
    assert errors == []
    assert payload.reminder_offsets == []
    assert payload.notice is None


def test_submit_collects_all_errors():
    draft = ScheduleDraft(deadline=NOW - timedelta(days=1), recurrence=RecurrenceRule(Frequency.daily, interval=0))
    payload, errors = build_schedule_payload(draft, NOW)
    assert payload is None
    assert errors == ["Deadline cannot be in the past.", "Repeat interval must be at least 1."]


def test_submit_edit_of_overdue_task():
    original = NOW - timedelta(days=1)
    draft = ScheduleDraft(deadline=original, reminder_offsets=(1440,))
    payload, errors = build_schedule_payload(draft, NOW, is_edit=True, original_deadline=original)
    assert errors == []
    assert payload.deadline == original
    assert payload.reminder_offsets == []
