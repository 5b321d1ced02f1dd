import logging
from datetime import datetime
from typing import Mapping, Optional, Tuple
import requests

from deadline_rules.reminders import describe_lead_time
from .config import config
from .scheduler_config import HTTP_TIMEOUT

logger = logging.getLogger(__name__)

def _headers() -> dict:
    headers = {"Content-type": "application/json"}
    if config.NOTIFY_TOKEN:
        headers["Authorization"] = f"Bearer {config.NOTIFY_TOKEN}"
    return headers

def _format_deadline(deadline: Optional[datetime]) -> str:
    if deadline is None:
        return "N/A"
    return deadline.astimezone(config.TIMEZONE).strftime("%d %b %Y %H:%M")

def post_notification(payload: dict) -> Tuple[Mapping, int]:
    """
    Deliver one notification to the configured webhook.

    Never raises; failures come back as an error body and status code.
    """
    if not (config.NOTIFY_WEBHOOK_URL and payload.get("to")):
        logger.error("Missing notification webhook configuration or recipient")
        return {"status": "error", "message": "Missing configuration"}, 500

    resp = None
    try:
        resp = requests.post(
            config.NOTIFY_WEBHOOK_URL,
            json=payload,
            headers=_headers(),
            timeout=HTTP_TIMEOUT
        )
        resp.raise_for_status()
        try:
            body = resp.json()
        except ValueError:
            body = {"status": "ok"}
        return body, resp.status_code

    except requests.Timeout:
        logger.error("Notification request timed out")
        return {"status": "error", "message": "Request timed out"}, 408

    except requests.RequestException as e:
        logger.error(f"Notification send error: {e}")
        if resp is not None:
            return {"status": "error", "message": resp.text}, resp.status_code
        return {"status": "error", "message": "Failed to send notification"}, 500

def send_reminder_notification(recipient: dict, task: dict, offset_minutes: int) -> Tuple[Mapping, int]:
    """Upcoming-deadline reminder for one assignee."""
    title = task.get("title", "Untitled")
    message = f'Task "{title}" is due in {describe_lead_time(offset_minutes)}.'
    payload = {
        "type": "reminder",
        "to": recipient.get("email"),
        "user_id": recipient.get("id"),
        "task_id": task.get("id"),
        "reminder_offset": offset_minutes,
        "subject": f"Reminder: {title} due soon",
        "message": message,
        "greeting": f"Hi {recipient.get('name') or 'there'},",
        "deadline": _format_deadline(task.get("deadline")),
    }
    return post_notification(payload)

def send_overdue_notification(recipient: dict, task: dict) -> Tuple[Mapping, int]:
    """Daily notice for a task whose deadline has passed."""
    title = task.get("title", "Untitled")
    payload = {
        "type": "overdue",
        "to": recipient.get("email"),
        "user_id": recipient.get("id"),
        "task_id": task.get("id"),
        "subject": f"Overdue: {title}",
        "message": f'Task "{title}" is overdue. Please complete it as soon as possible.',
        "greeting": f"Hi {recipient.get('name') or 'there'},",
        "deadline": _format_deadline(task.get("deadline")),
    }
    return post_notification(payload)
