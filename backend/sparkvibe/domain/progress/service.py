# backend/sparkvibe/domain/progress/service.py
"""
Progress Ledger: the only writer of user progress records.

Public API (each returns the updated ProgressRecord):
- register(user_id, display_name=None)
- get(user_id)
- record_mood_analysis(user_id, mood, confidence=None, at=None)
- record_choice(user_id, choice, capsule_id, at=None)
- record_completion(user_id, capsule_id, points_earned, completed_at=None)
- record_card_generation(user_id, card_metadata, generated_at=None)
- record_card_share(user_id)
- record_daily_checkin(user_id, action="daily_adventure", points=None)

Every mutation is read -> pure update -> conditional write on `version`.
A lost race re-reads and re-applies; nothing is merged by hand.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from sparkvibe.core.config import Tuning
from sparkvibe.core.errors import InvalidArgument, NotFound, ServiceUnavailable
from sparkvibe.schemas.progress import ChoiceEntry, MoodEntry, ProgressRecord
from sparkvibe.utils.text import squash_ws
from sparkvibe.utils.time import as_utc, utc_date, utc_now
from .repo import ProgressStore
from .rules import apply_streak, level_for

log = logging.getLogger("sparkvibe.progress")

CHECKIN_ACTIONS = frozenset({"daily_adventure"})

Mutation = Callable[[ProgressRecord, datetime], None]


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not squash_ws(value):
        raise InvalidArgument(f"{name} is required")
    return squash_ws(value)


def _stamp(at: Optional[datetime], now: datetime) -> datetime:
    """Client-supplied time, never later than the server clock."""
    return min(as_utc(at), now) if at else now


def _touch(rec: ProgressRecord, stamp: datetime) -> None:
    if rec.last_activity is None or stamp > as_utc(rec.last_activity):
        rec.last_activity = stamp


def _require_positive(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgument(f"{name} must be a positive integer")
    return value


class ProgressLedger:
    def __init__(
        self,
        store: ProgressStore,
        tuning: Optional[Tuning] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.tuning = tuning or Tuning()
        self._clock = clock

    def now(self) -> datetime:
        return as_utc(self._clock())

    # ---- lifecycle ----------------------------------------------------------

    def register(self, user_id: str, display_name: Optional[str] = None) -> ProgressRecord:
        uid = _require_text(user_id, "user_id")
        existing = self.store.get(uid)
        if existing is not None:
            return existing
        name = squash_ws(display_name) if display_name else None
        record = ProgressRecord(user_id=uid, display_name=name or None, created_at=self.now())
        if not self.store.insert(record):
            # registered concurrently; theirs wins
            existing = self.store.get(uid)
            if existing is None:
                raise ServiceUnavailable("progress record vanished after duplicate insert")
            return existing
        log.info("registered progress record user=%s", uid)
        return record

    def get(self, user_id: str) -> ProgressRecord:
        uid = _require_text(user_id, "user_id")
        record = self.store.get(uid)
        if record is None:
            raise NotFound(f"unknown user: {uid}")
        return record

    # ---- qualifying actions -------------------------------------------------

    def record_mood_analysis(self, user_id: str, mood: str, confidence: Optional[float] = None,
                             at: Optional[datetime] = None) -> ProgressRecord:
        label = _require_text(mood, "mood").lower()
        if confidence is not None and not 0.0 <= float(confidence) <= 1.0:
            raise InvalidArgument("confidence must be within 0..1")

        def apply(rec: ProgressRecord, now: datetime) -> None:
            stamp = _stamp(at, now)
            rec.mood_history.append(MoodEntry(mood=label, confidence=confidence, at=stamp))
            _touch(rec, stamp)

        return self._mutate(user_id, "mood", apply)

    def record_choice(self, user_id: str, choice: str, capsule_id: str,
                      at: Optional[datetime] = None) -> ProgressRecord:
        label = _require_text(choice, "choice")
        cid = _require_text(capsule_id, "capsule_id")

        def apply(rec: ProgressRecord, now: datetime) -> None:
            stamp = _stamp(at, now)
            rec.choices.append(ChoiceEntry(choice=label, capsule_id=cid, at=stamp))
            _touch(rec, stamp)

        return self._mutate(user_id, "choice", apply)

    def record_completion(self, user_id: str, capsule_id: str, points_earned: int,
                          completed_at: Optional[datetime] = None) -> ProgressRecord:
        _require_text(capsule_id, "capsule_id")
        points = _require_positive(points_earned, "points_earned")

        def apply(rec: ProgressRecord, now: datetime) -> None:
            rec.adventures_completed += 1
            rec.total_points += points
            _touch(rec, _stamp(completed_at, now))

        return self._mutate(user_id, "completion", apply)

    def record_card_generation(self, user_id: str, card_metadata: Mapping[str, Any],
                               generated_at: Optional[datetime] = None) -> ProgressRecord:
        if not isinstance(card_metadata, Mapping) or not card_metadata:
            raise InvalidArgument("card_metadata is required")
        award = self.tuning.card_generation_points

        def apply(rec: ProgressRecord, now: datetime) -> None:
            rec.cards_generated += 1
            rec.total_points += award
            _touch(rec, _stamp(generated_at, now))

        return self._mutate(user_id, "card_generation", apply)

    def record_card_share(self, user_id: str) -> ProgressRecord:
        award = self.tuning.card_share_points

        def apply(rec: ProgressRecord, now: datetime) -> None:
            rec.cards_shared += 1
            rec.total_points += award
            _touch(rec, now)

        return self._mutate(user_id, "card_share", apply)

    def record_daily_checkin(self, user_id: str, action: str = "daily_adventure",
                             points: Optional[int] = None) -> ProgressRecord:
        """
        Points are awarded on every call. The streak is judged against the UTC
        date of the previous last_activity, so it moves at most once per day.
        """
        if action not in CHECKIN_ACTIONS:
            raise InvalidArgument(f"unsupported action: {action!r}")
        award = self.tuning.daily_checkin_points if points is None else _require_positive(points, "points")

        def apply(rec: ProgressRecord, now: datetime) -> None:
            last = utc_date(rec.last_activity) if rec.last_activity else None
            rec.total_points += award
            rec.streak, rec.best_streak = apply_streak(rec.streak, rec.best_streak, last, utc_date(now))
            _touch(rec, now)

        return self._mutate(user_id, "checkin", apply)

    # ---- core ---------------------------------------------------------------

    def _mutate(self, user_id: str, op: str, apply: Mutation) -> ProgressRecord:
        uid = _require_text(user_id, "user_id")
        for attempt in range(self.tuning.ledger_max_retries):
            current = self.store.get(uid)
            if current is None:
                raise NotFound(f"unknown user: {uid}")

            updated = current.model_copy(deep=True)
            apply(updated, self.now())
            updated.level = level_for(updated.total_points, self.tuning.points_per_level)
            updated.version = current.version + 1

            if self.store.replace(updated, expected_version=current.version):
                log.info(
                    "ledger %s user=%s points=%d streak=%d v%d",
                    op, uid, updated.total_points, updated.streak, updated.version,
                )
                return updated
            log.debug("ledger %s user=%s version conflict (attempt %d)", op, uid, attempt + 1)

        raise ServiceUnavailable(f"could not apply {op} for {uid}: too much contention")


__all__ = ["ProgressLedger", "CHECKIN_ACTIONS"]
