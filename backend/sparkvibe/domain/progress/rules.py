# backend/sparkvibe/domain/progress/rules.py
"""
Pure point/streak rules. No I/O; the ledger feeds them dates and counters.

Streak transitions, keyed on the UTC date of the last activity:

    SAME_DAY     last activity today          streak unchanged
    CONSECUTIVE  last activity yesterday      streak + 1
    GAP          anything else / never        streak = 1

A zero streak always takes the GAP row: the first check-in starts at 1 even
when other activity was logged earlier the same day.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

__all__ = [
    "StreakTransition",
    "streak_transition",
    "apply_streak",
    "level_for",
]


class StreakTransition(str, Enum):
    SAME_DAY = "same_day"
    CONSECUTIVE = "consecutive"
    GAP = "gap"


_STREAK_UPDATE: Dict[StreakTransition, Callable[[int], int]] = {
    StreakTransition.SAME_DAY: lambda s: s,
    StreakTransition.CONSECUTIVE: lambda s: s + 1,
    StreakTransition.GAP: lambda s: 1,
}


def streak_transition(last: Optional[date], today: date) -> StreakTransition:
    if last is None:
        return StreakTransition.GAP
    delta = (today - last).days
    if delta == 0:
        return StreakTransition.SAME_DAY
    if delta == 1:
        return StreakTransition.CONSECUTIVE
    # includes future-dated records (clock skew)
    return StreakTransition.GAP


def apply_streak(streak: int, best_streak: int, last: Optional[date], today: date) -> Tuple[int, int]:
    """Returns (streak, best_streak) after a check-in on `today`."""
    transition = StreakTransition.GAP if streak <= 0 else streak_transition(last, today)
    new_streak = _STREAK_UPDATE[transition](streak)
    return new_streak, max(best_streak, new_streak)


def level_for(total_points: int, points_per_level: int = 500) -> int:
    return max(0, total_points) // points_per_level + 1
