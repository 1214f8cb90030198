"""
Supabase progress store against a fake PostgREST query builder.

Run with: pytest backend/tests/test_supabase_store.py -v
"""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from sparkvibe.core.config import Tuning
from sparkvibe.core.errors import ServiceUnavailable
from sparkvibe.domain.progress import ProgressLedger, SupabaseProgressStore
from sparkvibe.schemas.progress import ProgressRecord


class DuplicateKey(Exception):
    code = "23505"


class FakeQuery:
    """Just enough of postgrest's SyncRequestBuilder to run the store."""

    def __init__(self, table: "FakeTable"):
        self.table = table
        self.filters: List[tuple] = []
        self.op = "select"
        self.payload: Dict[str, Any] = {}
        self.orders: List[tuple] = []
        self.n = None

    def select(self, *_cols):
        self.op = "select"
        return self

    def insert(self, row):
        self.op, self.payload = "insert", row
        return self

    def update(self, row):
        self.op, self.payload = "update", row
        return self

    def eq(self, col, val):
        self.filters.append((col, "eq", val))
        return self

    def gte(self, col, val):
        self.filters.append((col, "gte", val))
        return self

    def order(self, col, desc=False):
        self.orders.append((col, desc))
        return self

    def limit(self, n):
        self.n = n
        return self

    def _match(self, row):
        for col, op, val in self.filters:
            if op == "eq" and row.get(col) != val:
                return False
            if op == "gte" and (row.get(col) is None or row[col] < val):
                return False
        return True

    def execute(self):
        self.table.log.append(self)
        rows = self.table.rows
        if self.op == "insert":
            if any(r["user_id"] == self.payload["user_id"] for r in rows):
                raise DuplicateKey("duplicate key value violates unique constraint")
            rows.append(dict(self.payload))
            return SimpleNamespace(data=[dict(self.payload)])
        hits = [r for r in rows if self._match(r)]
        if self.op == "update":
            for r in hits:
                r.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in hits])
        for col, desc in reversed(self.orders):
            hits.sort(key=lambda r: r[col], reverse=desc)
        if self.n is not None:
            hits = hits[: self.n]
        return SimpleNamespace(data=[dict(r) for r in hits])


class FakeTable:
    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.log: List[FakeQuery] = []


class FakeHandle:
    configured = True

    def __init__(self):
        self.tables: Dict[str, FakeTable] = {}

    def client(self):
        return self

    def table(self, name):
        return FakeQuery(self.tables.setdefault(name, FakeTable()))


class DownHandle(FakeHandle):
    def client(self):
        raise RuntimeError("Missing required Supabase settings")


@pytest.fixture
def handle():
    return FakeHandle()


@pytest.fixture
def store(handle):
    return SupabaseProgressStore(handle, "user_progress")


class TestSupabaseStore:
    def test_insert_and_get(self, store):
        assert store.insert(ProgressRecord(user_id="u1", display_name="Ana"))
        rec = store.get("u1")
        assert rec.display_name == "Ana"
        assert store.get("nobody") is None

    def test_duplicate_insert_returns_false(self, store):
        assert store.insert(ProgressRecord(user_id="u1"))
        assert not store.insert(ProgressRecord(user_id="u1"))

    def test_replace_is_conditional_on_version(self, store, handle):
        store.insert(ProgressRecord(user_id="u1"))
        assert store.replace(ProgressRecord(user_id="u1", total_points=10, version=1), expected_version=0)
        assert not store.replace(ProgressRecord(user_id="u1", total_points=99, version=1), expected_version=0)
        assert store.get("u1").total_points == 10

        update = [q for q in handle.tables["user_progress"].log if q.op == "update"][0]
        assert ("version", "eq", 0) in update.filters
        assert "user_id" not in update.payload

    def test_top_orders_and_filters(self, store, handle):
        t = datetime(2026, 3, 10, tzinfo=timezone.utc)
        store.insert(ProgressRecord(user_id="b", total_points=50, last_activity=t))
        store.insert(ProgressRecord(user_id="a", total_points=50, last_activity=t))
        store.insert(ProgressRecord(user_id="c", total_points=70))
        out = store.top("total_points", 10, active_since=t)
        assert [r.user_id for r in out] == ["a", "b"]
        query = handle.tables["user_progress"].log[-1]
        assert query.orders == [("total_points", True), ("user_id", False)]

    def test_every_call_executes_its_query(self, store, handle):
        store.insert(ProgressRecord(user_id="u1"))
        store.get("u1")
        store.replace(ProgressRecord(user_id="u1", version=1), expected_version=0)
        store.top("streak", 5)
        ops = [q.op for q in handle.tables["user_progress"].log]
        assert ops == ["insert", "select", "update", "select"]

    def test_top_rejects_unknown_field(self, store):
        with pytest.raises(ValueError):
            store.top("display_name", 10)

    def test_unreachable_backend(self):
        store = SupabaseProgressStore(DownHandle())
        with pytest.raises(ServiceUnavailable):
            store.get("u1")
        with pytest.raises(ServiceUnavailable):
            store.insert(ProgressRecord(user_id="u1"))

    def test_ledger_round_trip(self, store):
        ledger = ProgressLedger(store, Tuning())
        ledger.register("u1")
        ledger.record_daily_checkin("u1")
        ledger.record_mood_analysis("u1", "happy", 0.9)
        rec = ledger.get("u1")
        assert (rec.total_points, rec.streak, rec.version) == (10, 1, 2)
        assert rec.mood_history[0].mood == "happy"
        assert rec.last_activity is not None
