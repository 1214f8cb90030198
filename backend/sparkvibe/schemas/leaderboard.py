from __future__ import annotations
from typing import List, Optional

from sparkvibe.schemas.common import CamelModel


class LeaderboardEntry(CamelModel):
    rank: int
    user_id: str
    display_name: Optional[str] = None
    score: int
    total_points: int
    streak: int
    best_streak: int
    level: int
    cards_generated: int
    cards_shared: int


class Leaderboard(CamelModel):
    category: str
    timeframe: str
    placeholder: bool = False
    entries: List[LeaderboardEntry]
