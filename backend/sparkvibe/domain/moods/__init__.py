from .service import MoodAnalyzer, heuristic_mood

__all__ = ["MoodAnalyzer", "heuristic_mood"]
