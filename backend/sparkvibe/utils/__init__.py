from .time import utc_now, utc_iso, as_utc, utc_date, days_ago
from .text import clip, squash_ws, unique_preserve

__all__ = [
    "utc_now", "utc_iso", "as_utc", "utc_date", "days_ago",
    "clip", "squash_ws", "unique_preserve",
]
