from typing import Any, Dict, List, Optional
from datetime import datetime, tzinfo
from pydantic import BaseModel, Field, validator

from deadline_rules.enums import Frequency, RecurrenceEnds, OffsetUnit, TaskStatus
from deadline_rules.occurrences import Occurrence
from deadline_rules.recurrence import RecurrenceRule
from deadline_rules.timeutils import localize

# =========================================================
# PYDANTIC SCHEMAS
# =========================================================

# Recurrence
class RecurrenceRuleSchema(BaseModel):
    frequency: Frequency
    interval: int = Field(1, ge=1)
    ends: RecurrenceEnds = RecurrenceEnds.never
    until: Optional[datetime] = None

    @validator("frequency", pre=True)
    def lower_frequency(cls, v):
        return v.lower() if isinstance(v, str) else v

    def to_rule(self, tz: tzinfo) -> RecurrenceRule:
        return RecurrenceRule(
            frequency=self.frequency,
            interval=self.interval,
            ends=self.ends,
            until=localize(self.until, tz) if self.until else None,
        )

    @classmethod
    def from_rule(cls, rule: Optional[RecurrenceRule]) -> Optional["RecurrenceRuleSchema"]:
        if rule is None:
            return None
        return cls(frequency=rule.frequency, interval=rule.interval, ends=rule.ends, until=rule.until)

# Reminder offsets
class OffsetCheckRequest(BaseModel):
    deadline: Optional[datetime] = None
    offset_minutes: Optional[int] = None
    value: Optional[int] = None
    unit: OffsetUnit = OffsetUnit.day
    now: Optional[datetime] = None

class OffsetCheckResponse(BaseModel):
    addable: bool
    offset_minutes: Optional[int]
    max_offset_minutes: int
    message: Optional[str] = None

class OffsetsRequest(BaseModel):
    # Forms send arrays, JSON strings or CSV ("7200,1440")
    offsets: Any = []
    deadline: Optional[datetime] = None
    now: Optional[datetime] = None

class LabeledOffset(BaseModel):
    minutes: int
    label: str
    remind_at: Optional[datetime] = None

class NormalizeResponse(BaseModel):
    offsets: List[LabeledOffset]

class PruneResponse(BaseModel):
    kept: List[int]
    dropped_count: int
    notice: Optional[str] = None

class PreviewResponse(BaseModel):
    using_defaults: bool
    reminders: List[LabeledOffset]

# Submit-time schedule
class ScheduleRequest(BaseModel):
    deadline: Optional[datetime] = None
    deadline_local: Optional[str] = None  # "YYYY-MM-DDTHH:MM" in the configured zone
    no_due_date: bool = False
    reminder_offsets: Any = []
    recurrence: Optional[Any] = None      # mapping or JSON string, coerced leniently
    is_edit: bool = False
    original_deadline: Optional[datetime] = None
    now: Optional[datetime] = None

class ScheduleResponse(BaseModel):
    deadline: Optional[datetime]
    reminder_offsets: List[int]
    recurrence: Optional[RecurrenceRuleSchema]
    notice: Optional[str] = None

# Recurrence expansion
class NextDeadlineRequest(BaseModel):
    deadline: datetime
    rule: RecurrenceRuleSchema
    anchor_day: Optional[int] = Field(None, ge=1, le=31)

class NextDeadlineResponse(BaseModel):
    next_deadline: Optional[datetime]
    terminal: bool

class OccurrencesRequest(BaseModel):
    deadline: datetime
    rule: RecurrenceRuleSchema
    count: int = Field(5, ge=1, le=100)

class OccurrencesResponse(BaseModel):
    deadlines: List[datetime]

class CompletionRequest(BaseModel):
    task_id: str
    series_id: Optional[str] = None
    title: str
    previous_status: TaskStatus
    status: TaskStatus
    deadline: Optional[datetime] = None
    reminder_offsets: List[int] = []
    recurrence: Optional[RecurrenceRuleSchema] = None
    anchor_day: Optional[int] = Field(None, ge=1, le=31)
    details: Dict[str, Any] = {}

class OccurrenceResponse(BaseModel):
    series_id: str
    source_task_id: str
    title: str
    status: TaskStatus
    deadline: datetime
    reminder_offsets: List[int]
    recurrence: RecurrenceRuleSchema
    anchor_day: int
    details: Dict[str, Any] = {}

    @classmethod
    def from_occurrence(cls, occurrence: Occurrence) -> "OccurrenceResponse":
        return cls(
            series_id=occurrence.series_id,
            source_task_id=occurrence.source_task_id,
            title=occurrence.title,
            status=occurrence.status,
            deadline=occurrence.deadline,
            reminder_offsets=occurrence.reminder_offsets,
            recurrence=RecurrenceRuleSchema.from_rule(occurrence.recurrence),
            anchor_day=occurrence.anchor_day,
            details=occurrence.fields,
        )

class CompletionResponse(BaseModel):
    created: bool
    occurrence: Optional[OccurrenceResponse] = None
