"""
Spawning the next occurrence of a recurring task when it is completed.

The trigger fires on a transition into Done for a task that has both a
deadline and a recurrence rule. Spawns are recorded in a ledger keyed by
(series id, deadline of the completed task), so a completion event delivered
twice yields the same occurrence instead of a second copy, whatever anchor day
each delivery carries.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional, Tuple

from .enums import TaskStatus
from .recurrence import RecurrenceRule, next_deadline
from .reminders import effective_offsets
from .timeutils import localize

logger = logging.getLogger(__name__)


@dataclass
class TaskSnapshot:
    id: str
    title: str
    status: TaskStatus
    deadline: Optional[datetime] = None
    reminder_offsets: List[int] = field(default_factory=list)
    recurrence: Optional[RecurrenceRule] = None
    series_id: Optional[str] = None
    anchor_day: Optional[int] = None
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def series(self) -> str:
        return self.series_id or self.id


@dataclass
class Occurrence:
    series_id: str
    source_task_id: str
    title: str
    deadline: datetime
    reminder_offsets: List[int]
    recurrence: RecurrenceRule
    anchor_day: int
    follows: datetime
    status: TaskStatus = TaskStatus.todo
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return occurrence_key(self.series_id, self.follows)


def occurrence_key(series_id: str, deadline: datetime) -> str:
    return f"{series_id}:{deadline.astimezone(timezone.utc).isoformat()}"


class OccurrenceLedger:
    """
    In-memory record of spawned occurrences.

    A persistent store can replace it by providing the same ``claim`` method
    backed by a unique index on the key.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._spawned: Dict[str, Occurrence] = {}

    def claim(self, key: str, build: Callable[[], Occurrence]) -> Tuple[Occurrence, bool]:
        """Return the occurrence for ``key``, building it only the first time."""
        with self._lock:
            existing = self._spawned.get(key)
            if existing is not None:
                return existing, False
            occurrence = build()
            self._spawned[key] = occurrence
            return occurrence, True

    def get(self, key: str) -> Optional[Occurrence]:
        return self._spawned.get(key)

    def __len__(self) -> int:
        return len(self._spawned)


def is_completion(previous_status: TaskStatus, new_status: TaskStatus) -> bool:
    return previous_status != TaskStatus.done and new_status == TaskStatus.done


def spawn_next_occurrence(
    task: TaskSnapshot,
    previous_status: TaskStatus,
    tz: tzinfo,
    ledger: OccurrenceLedger,
) -> Tuple[Optional[Occurrence], bool]:
    """
    Create (or look up) the occurrence following ``task``.

    Returns ``(occurrence, created)``. ``occurrence`` is None when the event
    is not a completion, the task does not recur, or the series has ended.
    """
    if not is_completion(previous_status, task.status):
        return None, False
    if task.deadline is None or task.recurrence is None:
        return None, False

    anchor_day = task.anchor_day or localize(task.deadline, tz).day
    upcoming = next_deadline(task.deadline, task.recurrence, tz, anchor_day=anchor_day)
    if upcoming is None:
        logger.info(f"Series {task.series} ended after task {task.id}")
        return None, False

    def build() -> Occurrence:
        return Occurrence(
            series_id=task.series,
            source_task_id=task.id,
            title=task.title,
            deadline=upcoming,
            reminder_offsets=effective_offsets(task.reminder_offsets, upcoming),
            recurrence=task.recurrence,
            anchor_day=anchor_day,
            follows=task.deadline,
            fields=dict(task.fields),
        )

    occurrence, created = ledger.claim(occurrence_key(task.series, task.deadline), build)
    if created:
        logger.info(f"Spawned next occurrence of series {task.series} due {upcoming.isoformat()}")
    else:
        logger.info(f"Occurrence {occurrence.key} already exists, skipping duplicate completion")
    return occurrence, created
