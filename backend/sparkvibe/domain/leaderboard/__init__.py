from .service import LeaderboardService, CATEGORY_FIELDS, TIMEFRAME_DAYS

__all__ = ["LeaderboardService", "CATEGORY_FIELDS", "TIMEFRAME_DAYS"]
