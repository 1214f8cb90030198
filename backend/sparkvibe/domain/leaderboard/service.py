# backend/sparkvibe/domain/leaderboard/service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sparkvibe.core.config import Tuning
from sparkvibe.core.errors import InvalidArgument
from sparkvibe.domain.progress.repo import ProgressStore
from sparkvibe.domain.progress.rules import level_for
from sparkvibe.schemas.leaderboard import Leaderboard, LeaderboardEntry
from sparkvibe.schemas.progress import ProgressRecord
from sparkvibe.utils.time import days_ago, utc_now

log = logging.getLogger("sparkvibe.leaderboard")

CATEGORY_FIELDS: Dict[str, str] = {
    "points": "total_points",
    "streak": "streak",
    "cards": "cards_generated",
    "shares": "cards_shared",
}

TIMEFRAME_DAYS: Dict[str, Optional[int]] = {
    "week": 7,
    "month": 30,
    "all": None,
}

# shown on a fresh deployment so the board is never empty
_PLACEHOLDERS = [
    {"user_id": "placeholder-1", "display_name": "Vibe Master", "total_points": 2450,
     "streak": 25, "best_streak": 25, "cards_generated": 15, "cards_shared": 9},
    {"user_id": "placeholder-2", "display_name": "Adventure Seeker", "total_points": 1890,
     "streak": 12, "best_streak": 14, "cards_generated": 12, "cards_shared": 11},
    {"user_id": "placeholder-3", "display_name": "Spark Starter", "total_points": 640,
     "streak": 4, "best_streak": 6, "cards_generated": 3, "cards_shared": 2},
]


class LeaderboardService:
    def __init__(self, store: ProgressStore, tuning: Optional[Tuning] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.tuning = tuning or Tuning()
        self._clock = clock

    def query(self, category: str = "points", timeframe: str = "all",
              limit: Optional[int] = None) -> Leaderboard:
        field = CATEGORY_FIELDS.get(category)
        if field is None:
            raise InvalidArgument(f"unknown category: {category!r} (expected one of {sorted(CATEGORY_FIELDS)})")
        if timeframe not in TIMEFRAME_DAYS:
            raise InvalidArgument(f"unknown timeframe: {timeframe!r} (expected one of {sorted(TIMEFRAME_DAYS)})")

        cap = self.tuning.leaderboard_max
        n = cap if limit is None else max(1, min(int(limit), cap))
        days = TIMEFRAME_DAYS[timeframe]
        since = days_ago(days, self._clock()) if days is not None else None

        records = self.store.top(field, n, active_since=since)
        placeholder = False
        if not records and self.tuning.leaderboard_placeholder:
            records = self._placeholder_records()
            placeholder = True

        # the store already sorts; re-sorting keeps the tie-break identical across backends
        records = sorted(records, key=lambda r: (-getattr(r, field), r.user_id))[:n]
        entries = [self._entry(i + 1, r, field) for i, r in enumerate(records)]
        return Leaderboard(category=category, timeframe=timeframe, placeholder=placeholder, entries=entries)

    def _placeholder_records(self) -> List[ProgressRecord]:
        out = []
        for row in _PLACEHOLDERS:
            rec = ProgressRecord(**row)
            rec.level = level_for(rec.total_points, self.tuning.points_per_level)
            out.append(rec)
        return out

    @staticmethod
    def _entry(rank: int, r: ProgressRecord, field: str) -> LeaderboardEntry:
        return LeaderboardEntry(
            rank=rank,
            user_id=r.user_id,
            display_name=r.display_name,
            score=getattr(r, field),
            total_points=r.total_points,
            streak=r.streak,
            best_streak=r.best_streak,
            level=r.level,
            cards_generated=r.cards_generated,
            cards_shared=r.cards_shared,
        )


__all__ = ["LeaderboardService", "CATEGORY_FIELDS", "TIMEFRAME_DAYS"]
