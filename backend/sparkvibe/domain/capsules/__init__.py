from .service import ContentSelector, normalize_mood, demo_phrase, KNOWN_MOODS

__all__ = ["ContentSelector", "normalize_mood", "demo_phrase", "KNOWN_MOODS"]
