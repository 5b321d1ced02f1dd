import pytest
import pytz
from datetime import datetime
from fastapi.testclient import TestClient

from deadline_api.main import app
from deadline_api.dependencies import get_ledger, get_now
from deadline_rules.occurrences import OccurrenceLedger

FIXED_NOW = datetime(2025, 3, 1, 9, 0, tzinfo=pytz.utc)

@pytest.fixture
def fixed_now():
    return FIXED_NOW

@pytest.fixture
def api_client():
    ledger = OccurrenceLedger()
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_ledger] = lambda: ledger
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
