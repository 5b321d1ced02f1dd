from .reminders import (
    max_valid_offset_minutes,
    is_offset_addable,
    normalize_offsets,
    prune_offsets_for_deadline,
    label_for_offset,
    effective_offsets,
    reminder_instants,
)
from .recurrence import RecurrenceRule, next_deadline
