import os
import logging
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

from deadline_rules.constants import DEFAULT_TIMEZONE
from deadline_rules.timeutils import resolve_timezone

logger = logging.getLogger(__name__)

current_file_path = Path(__file__).resolve()
root_dir = current_file_path.parent.parent
env_path = root_dir / ".env"

if env_path.exists():
    load_dotenv(dotenv_path=env_path)
else:
    logger.debug(f".env file not found at {env_path}, using process environment")


def _split_origins(value: Optional[str]) -> List[str]:
    if not value:
        return ["http://localhost:5173", "http://localhost:3000", "http://localhost"]
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class ApiConfig:
    def __init__(
        self,
        timezone: Optional[str] = None,
        cors_origins: Optional[str] = None,
        log_level: Optional[str] = None,
    ) -> None:
        self.TIMEZONE_NAME = timezone or os.getenv("APP_TIMEZONE") or DEFAULT_TIMEZONE
        # Raises pytz.UnknownTimeZoneError for a bad name so startup fails loudly
        self.TIMEZONE = resolve_timezone(self.TIMEZONE_NAME)
        self.CORS_ORIGINS = _split_origins(cors_origins or os.getenv("CORS_ORIGINS"))
        self.LOG_LEVEL = (log_level or os.getenv("LOG_LEVEL") or "INFO").upper()

config = ApiConfig()
