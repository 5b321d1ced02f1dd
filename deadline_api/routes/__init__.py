from fastapi import APIRouter
from . import reminders, schedule, recurrence, prometheus

router = APIRouter()

router.include_router(reminders.router, prefix="/reminders", tags=["Reminders"])
router.include_router(schedule.router, prefix="/schedule", tags=["Schedule"])
router.include_router(recurrence.router, prefix="/recurrence", tags=["Recurrence"])
router.include_router(prometheus.router, prefix="/metrics", tags=["Metrics"])
