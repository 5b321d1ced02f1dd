import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from deadline_rules.constants import DEFAULT_TIMEZONE
from deadline_rules.timeutils import resolve_timezone

current_file_path = Path(__file__).resolve()
root_dir = current_file_path.parent.parent
env_path = root_dir / ".env"

if env_path.exists():
    load_dotenv(dotenv_path=env_path)

class ReminderWorkerConfig:
    def __init__(
        self,
        task_feed_url: Optional[str] = None,
        notify_webhook_url: Optional[str] = None,
        notify_token: Optional[str] = None,
        timezone: Optional[str] = None,
    ) -> None:
        self.TASK_FEED_URL = task_feed_url or os.getenv("TASK_FEED_URL", "http://localhost:8000/internals/tasks-with-deadlines")
        self.NOTIFY_WEBHOOK_URL = notify_webhook_url or os.getenv("NOTIFY_WEBHOOK_URL")
        self.NOTIFY_TOKEN = notify_token or os.getenv("NOTIFY_TOKEN")
        self.TIMEZONE_NAME = timezone or os.getenv("APP_TIMEZONE") or DEFAULT_TIMEZONE
        self.TIMEZONE = resolve_timezone(self.TIMEZONE_NAME)
        self.LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").upper()

config = ReminderWorkerConfig()
