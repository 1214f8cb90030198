# backend/sparkvibe/domain/progress/repo.py
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from sparkvibe.adapters.supabase_client import SupabaseHandle, supa_ping
from sparkvibe.core.errors import ServiceUnavailable
from sparkvibe.schemas.progress import ProgressRecord
from sparkvibe.utils.time import as_utc, utc_iso

log = logging.getLogger("sparkvibe.progress.repo")

__all__ = [
    "ProgressStore",
    "MemoryProgressStore",
    "SupabaseProgressStore",
    "RANKABLE_FIELDS",
]

RANKABLE_FIELDS = frozenset({"total_points", "streak", "cards_generated", "cards_shared"})

# Postgres unique_violation
_DUPLICATE_CODE = "23505"


class ProgressStore(Protocol):
    """
    Single-record persistence. `replace` is the conditional update-by-id the
    ledger builds its atomic operations on: it must only write when the stored
    version still equals `expected_version`.
    """

    def get(self, user_id: str) -> Optional[ProgressRecord]: ...

    def insert(self, record: ProgressRecord) -> bool: ...

    def replace(self, record: ProgressRecord, expected_version: int) -> bool: ...

    def top(self, field: str, limit: int, active_since: Optional[datetime] = None) -> List[ProgressRecord]: ...

    def ping(self) -> bool: ...


def _to_row(record: ProgressRecord) -> Dict[str, Any]:
    return record.model_dump(mode="json", by_alias=False)


def _from_row(row: Dict[str, Any]) -> ProgressRecord:
    return ProgressRecord.model_validate(row)


def _check_field(field: str) -> None:
    if field not in RANKABLE_FIELDS:
        raise ValueError(f"not a rankable field: {field}")


# ─────────────────────────────────────────────────────────────────────────────
# In-process store (local dev + tests)
# ─────────────────────────────────────────────────────────────────────────────
class MemoryProgressStore:
    def __init__(self) -> None:
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[ProgressRecord]:
        with self._lock:
            row = self._rows.get(user_id)
        return _from_row(row) if row is not None else None

    def insert(self, record: ProgressRecord) -> bool:
        with self._lock:
            if record.user_id in self._rows:
                return False
            self._rows[record.user_id] = _to_row(record)
            return True

    def replace(self, record: ProgressRecord, expected_version: int) -> bool:
        with self._lock:
            cur = self._rows.get(record.user_id)
            if cur is None or cur["version"] != expected_version:
                return False
            self._rows[record.user_id] = _to_row(record)
            return True

    def top(self, field: str, limit: int, active_since: Optional[datetime] = None) -> List[ProgressRecord]:
        _check_field(field)
        with self._lock:
            records = [_from_row(r) for r in self._rows.values()]
        if active_since is not None:
            since = as_utc(active_since)
            records = [r for r in records if r.last_activity is not None and as_utc(r.last_activity) >= since]
        records.sort(key=lambda r: (-getattr(r, field), r.user_id))
        return records[:limit]

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._rows)


# ─────────────────────────────────────────────────────────────────────────────
# Supabase (PostgREST) store; schema in backend/sql/schema.sql
# ─────────────────────────────────────────────────────────────────────────────
class SupabaseProgressStore:
    """
    Every client/transport failure becomes ServiceUnavailable; ledger writes
    are never dropped silently.
    """

    def __init__(self, handle: SupabaseHandle, table: str = "user_progress"):
        self._handle = handle
        self.table = table

    def _tbl(self):
        try:
            return self._handle.client().table(self.table)
        except Exception as e:
            raise ServiceUnavailable(f"progress store not available: {e}") from e

    def get(self, user_id: str) -> Optional[ProgressRecord]:
        try:
            resp = self._tbl().select("*").eq("user_id", user_id).limit(1).execute()
        except ServiceUnavailable:
            raise
        except Exception as e:
            raise ServiceUnavailable(f"progress read failed: {e}") from e
        data = getattr(resp, "data", None) or []
        return _from_row(data[0]) if data else None

    def insert(self, record: ProgressRecord) -> bool:
        try:
            self._tbl().insert(_to_row(record)).execute()
            return True
        except ServiceUnavailable:
            raise
        except Exception as e:
            if getattr(e, "code", None) == _DUPLICATE_CODE:
                return False
            raise ServiceUnavailable(f"progress insert failed: {e}") from e

    def replace(self, record: ProgressRecord, expected_version: int) -> bool:
        row = _to_row(record)
        row.pop("user_id", None)
        try:
            resp = (
                self._tbl()
                .update(row)
                .eq("user_id", record.user_id)
                .eq("version", expected_version)
                .execute()
            )
        except ServiceUnavailable:
            raise
        except Exception as e:
            raise ServiceUnavailable(f"progress update failed: {e}") from e
        return bool(getattr(resp, "data", None))

    def top(self, field: str, limit: int, active_since: Optional[datetime] = None) -> List[ProgressRecord]:
        _check_field(field)
        try:
            req = self._tbl().select("*")
            if active_since is not None:
                req = req.gte("last_activity", utc_iso(active_since))
            resp = req.order(field, desc=True).order("user_id").limit(limit).execute()
        except ServiceUnavailable:
            raise
        except Exception as e:
            raise ServiceUnavailable(f"leaderboard read failed: {e}") from e
        return [_from_row(r) for r in (getattr(resp, "data", None) or [])]

    def ping(self) -> bool:
        if not self._handle.configured:
            return False
        ok = supa_ping(self._handle, self.table)
        if not ok:
            log.warning("progress store ping failed (table=%s)", self.table)
        return ok
