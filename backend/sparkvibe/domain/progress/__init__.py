from .service import ProgressLedger, CHECKIN_ACTIONS
from .repo import ProgressStore, MemoryProgressStore, SupabaseProgressStore, RANKABLE_FIELDS
from .rules import StreakTransition, streak_transition, apply_streak, level_for

__all__ = [
    "ProgressLedger",
    "CHECKIN_ACTIONS",
    "ProgressStore",
    "MemoryProgressStore",
    "SupabaseProgressStore",
    "RANKABLE_FIELDS",
    "StreakTransition",
    "streak_transition",
    "apply_streak",
    "level_for",
]
