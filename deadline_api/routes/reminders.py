from datetime import datetime, tzinfo
import logging
from fastapi import APIRouter, Depends

from deadline_rules.reminders import (
    effective_offsets,
    is_offset_addable,
    label_for_offset,
    max_valid_offset_minutes,
    normalize_offsets,
    offset_rejection_message,
    offset_to_minutes,
    prune_offsets_for_deadline,
    reminder_instant,
)
from deadline_rules.policy import dropped_notice
from deadline_rules.timeutils import localize
from deadline_api.schemas import (
    OffsetCheckRequest, OffsetCheckResponse, OffsetsRequest,
    LabeledOffset, NormalizeResponse, PruneResponse, PreviewResponse
)
from deadline_api.dependencies import get_now, get_timezone, resolve_now
from deadline_api.routes.prometheus import OFFSET_CHECKS

logger = logging.getLogger(__name__)

router = APIRouter()

# =========================================================
# REMINDER OFFSET ENDPOINTS
# =========================================================
@router.post("/check", response_model=OffsetCheckResponse)
def check_offset(
    body: OffsetCheckRequest,
    clock: datetime = Depends(get_now),
    tz: tzinfo = Depends(get_timezone)
):
    """Can this reminder be added for the given deadline right now?"""
    now = resolve_now(body.now, clock, tz)
    deadline = localize(body.deadline, tz) if body.deadline else None

    minutes = body.offset_minutes
    if minutes is None and body.value is not None:
        minutes = offset_to_minutes(body.value, body.unit)

    addable = is_offset_addable(minutes, deadline, now)
    OFFSET_CHECKS.labels(result="accepted" if addable else "rejected").inc()

    return OffsetCheckResponse(
        addable=addable,
        offset_minutes=minutes,
        max_offset_minutes=max_valid_offset_minutes(deadline, now),
        message=None if addable else offset_rejection_message(minutes, deadline, now),
    )


@router.post("/normalize", response_model=NormalizeResponse)
def normalize(body: OffsetsRequest):
    offsets = normalize_offsets(body.offsets)
    return NormalizeResponse(
        offsets=[LabeledOffset(minutes=m, label=label_for_offset(m)) for m in offsets]
    )


@router.post("/prune", response_model=PruneResponse)
def prune(
    body: OffsetsRequest,
    clock: datetime = Depends(get_now),
    tz: tzinfo = Depends(get_timezone)
):
    """Re-check offsets after the deadline moved."""
    now = resolve_now(body.now, clock, tz)
    deadline = localize(body.deadline, tz) if body.deadline else None

    kept, dropped = prune_offsets_for_deadline(body.offsets, deadline, now)
    if dropped:
        logger.info(f"Pruned {dropped} reminder offset(s) for deadline {deadline}")
    return PruneResponse(kept=kept, dropped_count=dropped, notice=dropped_notice(dropped))


@router.post("/preview", response_model=PreviewResponse)
def preview(
    body: OffsetsRequest,
    tz: tzinfo = Depends(get_timezone)
):
    """Reminders that will actually be scheduled, with their instants."""
    deadline = localize(body.deadline, tz) if body.deadline else None

    reminders = [
        LabeledOffset(
            minutes=m,
            label=label_for_offset(m),
            remind_at=reminder_instant(deadline, m) if deadline else None,
        )
        for m in effective_offsets(body.offsets, deadline)
    ]
    return PreviewResponse(
        using_defaults=deadline is not None and not normalize_offsets(body.offsets),
        reminders=reminders,
    )
