"""
Task form scheduling policy: deadline bounds, the "no due date" toggle,
deadline edits and submit-time normalization.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .recurrence import RecurrenceRule, validate_recurrence
from .reminders import prune_offsets_for_deadline


@dataclass(frozen=True)
class ScheduleDraft:
    deadline: Optional[datetime] = None
    no_due_date: bool = False
    reminder_offsets: Tuple[int, ...] = ()
    recurrence: Optional[RecurrenceRule] = None


@dataclass
class SchedulePayload:
    deadline: Optional[datetime]
    reminder_offsets: List[int] = field(default_factory=list)
    recurrence: Optional[RecurrenceRule] = None
    dropped_count: int = 0

    @property
    def notice(self) -> Optional[str]:
        return dropped_notice(self.dropped_count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "reminder_offsets": list(self.reminder_offsets),
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
        }


def dropped_notice(count: int) -> Optional[str]:
    if count <= 0:
        return None
    return f"{count} reminder(s) removed because they would be in the past."


def minimum_deadline(
    now: datetime,
    is_edit: bool = False,
    original_deadline: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    Earliest deadline the form accepts.

    Editing a task whose saved deadline has already passed lifts the bound
    so the task can be saved without moving its deadline.
    """
    if is_edit and original_deadline is not None and original_deadline < now:
        return None
    return now


def check_deadline(
    deadline: Optional[datetime],
    now: datetime,
    is_edit: bool = False,
    original_deadline: Optional[datetime] = None,
) -> Optional[str]:
    if deadline is None:
        return None
    earliest = minimum_deadline(now, is_edit, original_deadline)
    if earliest is not None and deadline < earliest:
        return "Deadline cannot be in the past."
    return None


def set_no_due_date(draft: ScheduleDraft, enabled: bool) -> ScheduleDraft:
    """Toggle "no due date"; turning it on drops the deadline and any recurrence."""
    if not enabled:
        return replace(draft, no_due_date=False)
    return replace(draft, no_due_date=True, deadline=None, recurrence=None)


def change_deadline(
    draft: ScheduleDraft,
    deadline: Optional[datetime],
    now: datetime,
) -> Tuple[ScheduleDraft, Optional[str]]:
    """Move the deadline and drop reminders that would now fire in the past."""
    if deadline is None:
        return replace(draft, deadline=None, recurrence=None), None
    kept, dropped = prune_offsets_for_deadline(draft.reminder_offsets, deadline, now)
    updated = replace(draft, deadline=deadline, no_due_date=False, reminder_offsets=tuple(kept))
    return updated, dropped_notice(dropped)


def build_schedule_payload(
    draft: ScheduleDraft,
    now: datetime,
    is_edit: bool = False,
    original_deadline: Optional[datetime] = None,
) -> Tuple[Optional[SchedulePayload], List[str]]:
    """
    Normalize a draft at submit time.

    Returns ``(payload, [])`` on success or ``(None, errors)``. Reminders that
    would fire in the past are pruned from the payload, never persisted.
    """
    if draft.no_due_date or draft.deadline is None:
        errors = validate_recurrence(draft.recurrence, None)
        if errors:
            return None, errors
        return SchedulePayload(deadline=None), []

    errors = []
    deadline_error = check_deadline(draft.deadline, now, is_edit, original_deadline)
    if deadline_error:
        errors.append(deadline_error)
    errors.extend(validate_recurrence(draft.recurrence, draft.deadline))
    if errors:
        return None, errors

    kept, dropped = prune_offsets_for_deadline(draft.reminder_offsets, draft.deadline, now)
    return SchedulePayload(
        deadline=draft.deadline,
        reminder_offsets=kept,
        recurrence=draft.recurrence,
        dropped_count=dropped,
    ), []
