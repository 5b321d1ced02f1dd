"""
Deadline Reminder Scheduler

Periodically checks tasks from the task feed and notifies assignees when one
of a task's reminder offsets comes due, plus a daily notice for overdue tasks.
"""
import logging
from datetime import datetime
from typing import List, Optional, Set, Tuple
import requests
from apscheduler.schedulers.background import BackgroundScheduler

from deadline_rules.enums import TaskStatus
from deadline_rules.reminders import reminders_due
from deadline_rules.timeutils import parse_instant
from .config import config
from .scheduler_config import (
    SCHEDULER_CHECK_INTERVAL,
    REMINDER_TOLERANCE_MINUTES,
    OVERDUE_DIGEST_HOUR,
    OVERDUE_DIGEST_MINUTE,
    HTTP_TIMEOUT
)
from .send import send_reminder_notification, send_overdue_notification

logger = logging.getLogger(__name__)

# In-memory tracking of sent notifications
# Reminders: (task_id, recipient_id, offset_minutes)
# Overdue:   (task_id, recipient_id, local date)
sent_reminders: Set[Tuple[str, str, int]] = set()
sent_overdue: Set[Tuple[str, str, str]] = set()


def _get_tasks_with_deadlines() -> Optional[list]:
    """Fetch open tasks with deadlines from the task feed. None means the fetch failed."""
    try:
        resp = requests.get(config.TASK_FEED_URL, timeout=HTTP_TIMEOUT)
        resp.raise_for_status()
        tasks = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Failed to fetch tasks with deadlines: {e}")
        return None
    if not isinstance(tasks, list):
        logger.error(f"Task feed returned {type(tasks).__name__}, expected a list")
        return None
    return tasks


def _recipient_key(recipient: dict) -> Optional[str]:
    key = recipient.get("id") or recipient.get("email")
    return str(key) if key else None


def _open_tasks(tasks: list) -> List[Tuple[dict, datetime]]:
    """Tasks that are not done, have assignees and a parseable deadline."""
    result = []
    for task in tasks:
        if not isinstance(task, dict):
            logger.warning(f"Skipping malformed task entry: {task!r}")
            continue
        task_id = task.get("id")
        if not task_id or not task.get("deadline") or not task.get("assignees"):
            continue
        if task.get("status") == TaskStatus.done.value:
            continue
        deadline = parse_instant(task.get("deadline"), config.TIMEZONE)
        if deadline is None:
            logger.warning(f"Could not parse deadline for task {task_id}: {task.get('deadline')!r}")
            continue
        result.append((task, deadline))
    return result


def _cleanup_inactive_tasks(active_task_ids: Set[str]):
    """Forget tasks that left the feed (completed, deleted or deadline cleared)."""
    global sent_reminders, sent_overdue
    sent_reminders = {key for key in sent_reminders if key[0] in active_task_ids}
    sent_overdue = {key for key in sent_overdue if key[0] in active_task_ids}


def _send_due_reminders(task: dict, deadline: datetime, now: datetime) -> int:
    task_id = str(task["id"])
    due = reminders_due(deadline, task.get("reminder_offsets") or [], now, REMINDER_TOLERANCE_MINUTES)
    if not due:
        return 0

    sent = 0
    task_dict = {"id": task_id, "title": task.get("title", "Untitled"), "deadline": deadline}
    for offset in due:
        for assignee in task["assignees"]:
            recipient = _recipient_key(assignee)
            if not recipient or (task_id, recipient, offset) in sent_reminders:
                continue
            result, status_code = send_reminder_notification(assignee, task_dict, offset)
            if status_code == 200:
                sent_reminders.add((task_id, recipient, offset))
                sent += 1
                logger.info(f"✅ Sent {offset}min reminder for task {task_id} to {recipient}")
            else:
                logger.error(f"❌ Failed to send reminder for task {task_id}: {result}")
    return sent


def check_reminders(now: Optional[datetime] = None) -> int:
    """
    Main job: send every reminder whose instant falls within the tolerance window.

    Called every minute by the scheduler. Returns the number of notifications sent.
    A task that fails is logged and skipped; the rest of the pass still runs.
    """
    now = now or datetime.now(config.TIMEZONE)
    logger.info("🔍 Checking task deadlines for reminders...")

    tasks = _get_tasks_with_deadlines()
    if tasks is None:
        return 0
    if not tasks:
        logger.info("No tasks with upcoming deadlines found")

    sent = 0
    active_task_ids = set()

    for task, deadline in _open_tasks(tasks):
        task_id = str(task["id"])
        active_task_ids.add(task_id)
        try:
            sent += _send_due_reminders(task, deadline, now)
        except Exception as e:
            logger.error(f"Error processing reminders for task {task_id}: {e}")

    _cleanup_inactive_tasks(active_task_ids)
    logger.info(f"✅ Reminder check complete. Processed {len(tasks)} tasks, sent {sent}")
    return sent


def _send_overdue_notices(task: dict, deadline: datetime, today: str) -> int:
    task_id = str(task["id"])
    task_dict = {"id": task_id, "title": task.get("title", "Untitled"), "deadline": deadline}
    sent = 0
    for assignee in task["assignees"]:
        recipient = _recipient_key(assignee)
        if not recipient or (task_id, recipient, today) in sent_overdue:
            continue
        result, status_code = send_overdue_notification(assignee, task_dict)
        if status_code == 200:
            sent_overdue.add((task_id, recipient, today))
            sent += 1
        else:
            logger.error(f"❌ Failed to send overdue notice for task {task_id}: {result}")
    return sent


def check_overdue(now: Optional[datetime] = None) -> int:
    """Daily job: one overdue notice per task, assignee and local day."""
    global sent_overdue
    now = now or datetime.now(config.TIMEZONE)
    today = now.astimezone(config.TIMEZONE).date().isoformat()
    logger.info("⏰ Checking for overdue tasks...")

    tasks = _get_tasks_with_deadlines()
    if tasks is None:
        return 0

    # Only today's notices can still be duplicated
    sent_overdue = {key for key in sent_overdue if key[2] == today}

    sent = 0
    for task, deadline in _open_tasks(tasks):
        if deadline >= now:
            continue
        try:
            sent += _send_overdue_notices(task, deadline, today)
        except Exception as e:
            logger.error(f"Error processing overdue notice for task {task['id']}: {e}")

    logger.info(f"⏰ Overdue check complete, sent {sent}")
    return sent


# Global scheduler instance
scheduler = BackgroundScheduler(timezone=config.TIMEZONE)


def start_scheduler():
    """Start all scheduler jobs: reminder checks and the daily overdue notice."""
    scheduler.add_job(
        check_reminders,
        'interval',
        seconds=SCHEDULER_CHECK_INTERVAL,
        id='deadline_reminder_job',
        replace_existing=True
    )

    scheduler.add_job(
        check_overdue,
        'cron',
        hour=OVERDUE_DIGEST_HOUR,
        minute=OVERDUE_DIGEST_MINUTE,
        id='overdue_digest_job',
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"🚀 Scheduler started: reminders (every {SCHEDULER_CHECK_INTERVAL}s) + overdue notices (at {OVERDUE_DIGEST_HOUR}:{OVERDUE_DIGEST_MINUTE:02d})")


def stop_scheduler():
    """Stop the scheduler gracefully."""
    scheduler.shutdown(wait=False)
    logger.info("🛑 Scheduler stopped")
