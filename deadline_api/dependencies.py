from datetime import datetime, tzinfo
from typing import Optional

from deadline_rules.occurrences import OccurrenceLedger
from deadline_rules.timeutils import localize
from deadline_api.config import config

# Shared across requests; replace with a persistent ledger when tasks are stored
ledger = OccurrenceLedger()

def get_timezone() -> tzinfo:
    return config.TIMEZONE

def get_now() -> datetime:
    """Current wall-clock instant. Tests override this dependency to pin the clock."""
    return datetime.now(config.TIMEZONE)

def get_ledger() -> OccurrenceLedger:
    return ledger

def resolve_now(requested: Optional[datetime], clock: datetime, tz: tzinfo) -> datetime:
    """Prefer an explicit ``now`` from the request body over the server clock."""
    if requested is None:
        return clock
    return localize(requested, tz)
