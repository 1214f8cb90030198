# backend/tests/conftest.py
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

# Ensure backend package root is importable
THIS_DIR = os.path.dirname(__file__)
PKG_ROOT = os.path.abspath(os.path.join(THIS_DIR, ".."))
if PKG_ROOT not in sys.path:
    sys.path.insert(0, PKG_ROOT)

from sparkvibe.core.config import Settings, Tuning
from sparkvibe.core.errors import UpstreamDegraded
from sparkvibe.domain.progress import MemoryProgressStore, ProgressLedger
from sparkvibe.schemas.push import DeliveryStatus


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kw) -> None:
        self.now = self.now + timedelta(**kw)


class FakeLLM:
    """Stands in for LLMClient: returns canned JSON or raises UpstreamDegraded."""

    def __init__(self, response: Optional[Dict[str, Any]] = None, error: Optional[str] = None):
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def complete_json(self, system: str, user: str, **kw) -> Dict[str, Any]:
        self.calls.append({"system": system, "user": user, **kw})
        if self.error:
            raise UpstreamDegraded(self.error)
        return dict(self.response or {})


class FakeSender:
    def __init__(self, status: DeliveryStatus = DeliveryStatus.delivered):
        self.status = status
        self.sent: List[Dict[str, Any]] = []

    def send(self, subscription, payload):
        self.sent.append({"subscription": subscription, "payload": payload})
        return self.status


def make_settings(**overrides) -> Settings:
    """Memory-backed settings with every external integration switched off."""
    base = dict(
        _env_file=None,
        STORE_BACKEND="memory",
        DEV_BYPASS_AUTH=True,
        OPENAI_API_KEY=None,
        VAPID_PUBLIC_KEY=None,
        VAPID_PRIVATE_KEY=None,
        SUPABASE_URL=None,
        PUSH_SENDERS="",
    )
    base.update(overrides)
    return Settings(**base)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def store() -> MemoryProgressStore:
    return MemoryProgressStore()


@pytest.fixture
def ledger(store, clock) -> ProgressLedger:
    return ProgressLedger(store, Tuning(), clock=clock)

