import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from datetime import date, time

import pytest
from fastapi.testclient import TestClient

import meetsync.main as main
from meetsync.config import clear_settings_cache
from meetsync.db.memory import InMemoryEventStore
from meetsync.models.events import TimeSlot
from meetsync.service import EventService


@pytest.fixture
def slots():
    return [
        TimeSlot(day=date(2025, 3, 10), start_time=time(10, 0), end_time=time(11, 0)),
        TimeSlot(day=date(2025, 3, 11), start_time=time(14, 0), end_time=time(15, 0)),
        TimeSlot(day=date(2025, 3, 12), start_time=time(9, 30), end_time=time(10, 0)),
    ]


@pytest.fixture
def service():
    return EventService(InMemoryEventStore())


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.delenv("AGGREGATION_KEEP_STALE_BEST_TIME", raising=False)
    clear_settings_cache()
    with TestClient(main.app) as c:
        yield c
    clear_settings_cache()
