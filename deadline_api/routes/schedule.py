from datetime import datetime, tzinfo
import logging
from fastapi import APIRouter, Depends, HTTPException, status

from deadline_rules.policy import ScheduleDraft, build_schedule_payload
from deadline_rules.recurrence import coerce_recurrence
from deadline_rules.timeutils import localize, parse_local_input
from deadline_api.schemas import ScheduleRequest, ScheduleResponse, RecurrenceRuleSchema
from deadline_api.dependencies import get_now, get_timezone, resolve_now
from deadline_api.routes.prometheus import SCHEDULE_VALIDATIONS

logger = logging.getLogger(__name__)

router = APIRouter()

# =========================================================
# SUBMIT-TIME SCHEDULE VALIDATION
# =========================================================
@router.post("/validate", response_model=ScheduleResponse)
def validate_schedule(
    body: ScheduleRequest,
    clock: datetime = Depends(get_now),
    tz: tzinfo = Depends(get_timezone)
):
    """
    Normalize the deadline, reminders and recurrence of a task form.

    Returns the payload to persist, or 422 with every problem found.
    """
    now = resolve_now(body.now, clock, tz)

    if body.deadline is not None:
        deadline = localize(body.deadline, tz)
    else:
        deadline = parse_local_input(body.deadline_local, tz)
        if body.deadline_local and deadline is None:
            SCHEDULE_VALIDATIONS.labels(result="rejected").inc()
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"errors": ["Deadline must look like YYYY-MM-DDTHH:MM."]}
            )

    draft = ScheduleDraft(
        deadline=deadline,
        no_due_date=body.no_due_date,
        reminder_offsets=body.reminder_offsets,
        recurrence=coerce_recurrence(body.recurrence, tz),
    )
    original = localize(body.original_deadline, tz) if body.original_deadline else None

    payload, errors = build_schedule_payload(draft, now, is_edit=body.is_edit, original_deadline=original)
    if errors:
        SCHEDULE_VALIDATIONS.labels(result="rejected").inc()
        logger.info(f"Schedule rejected: {errors}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": errors}
        )

    SCHEDULE_VALIDATIONS.labels(result="accepted").inc()
    return ScheduleResponse(
        deadline=payload.deadline,
        reminder_offsets=payload.reminder_offsets,
        recurrence=RecurrenceRuleSchema.from_rule(payload.recurrence),
        notice=payload.notice,
    )
