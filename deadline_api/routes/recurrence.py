from datetime import tzinfo
import logging
from fastapi import APIRouter, Depends, HTTPException

from deadline_rules.occurrences import OccurrenceLedger, TaskSnapshot, spawn_next_occurrence
from deadline_rules.recurrence import next_deadline, occurrences, validate_recurrence
from deadline_rules.timeutils import localize
from deadline_api.schemas import (
    NextDeadlineRequest, NextDeadlineResponse, OccurrencesRequest, OccurrencesResponse,
    CompletionRequest, CompletionResponse, OccurrenceResponse
)
from deadline_api.dependencies import get_ledger, get_timezone
from deadline_api.routes.prometheus import OCCURRENCES_SPAWNED

logger = logging.getLogger(__name__)

router = APIRouter()

# =========================================================
# RECURRENCE ENDPOINTS
# =========================================================
@router.post("/next", response_model=NextDeadlineResponse)
def get_next_deadline(
    body: NextDeadlineRequest,
    tz: tzinfo = Depends(get_timezone)
):
    deadline = localize(body.deadline, tz)
    upcoming = next_deadline(deadline, body.rule.to_rule(tz), tz, anchor_day=body.anchor_day)
    return NextDeadlineResponse(next_deadline=upcoming, terminal=upcoming is None)


@router.post("/occurrences", response_model=OccurrencesResponse)
def list_occurrences(
    body: OccurrencesRequest,
    tz: tzinfo = Depends(get_timezone)
):
    """Upcoming deadlines of a series, starting with the given one."""
    start = localize(body.deadline, tz)
    return OccurrencesResponse(deadlines=occurrences(start, body.rule.to_rule(tz), tz, body.count))


@router.post("/complete", response_model=CompletionResponse)
def complete_task(
    body: CompletionRequest,
    tz: tzinfo = Depends(get_timezone),
    ledger: OccurrenceLedger = Depends(get_ledger)
):
    """
    Status-change hook for recurring tasks.

    Safe to call more than once for the same completion: the second call
    returns the occurrence created by the first with ``created`` false.
    """
    deadline = localize(body.deadline, tz) if body.deadline else None
    rule = body.recurrence.to_rule(tz) if body.recurrence else None

    errors = validate_recurrence(rule, deadline)
    if errors:
        raise HTTPException(status_code=422, detail={"errors": errors})

    task = TaskSnapshot(
        id=body.task_id,
        series_id=body.series_id,
        title=body.title,
        status=body.status,
        deadline=deadline,
        reminder_offsets=body.reminder_offsets,
        recurrence=rule,
        anchor_day=body.anchor_day,
        fields=body.details,
    )
    occurrence, created = spawn_next_occurrence(task, body.previous_status, tz, ledger)
    if created:
        OCCURRENCES_SPAWNED.inc()

    return CompletionResponse(
        created=created,
        occurrence=OccurrenceResponse.from_occurrence(occurrence) if occurrence else None,
    )
