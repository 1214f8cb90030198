from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from sparkvibe.adapters.llm_client import LLMClient
from sparkvibe.core.errors import InvalidArgument, UpstreamDegraded
from sparkvibe.domain.capsules.tables import DEFAULT_MOOD, KNOWN_MOODS
from sparkvibe.schemas.capsule import MoodAnalysis
from sparkvibe.utils.text import clip, squash_ws, unique_preserve

log = logging.getLogger("sparkvibe.moods")

# first match wins; order puts the more specific feelings ahead of "happy"
_HEUR_MAP: List[Tuple[re.Pattern, str, float]] = [
    (re.compile(r"\banx|nervous|worr|stress|overwhelm|panic|spiral|overthink", re.I), "anxious", 0.7),
    (re.compile(r"\bsad\b|\bdown\b|depress|lonely|\btear(s|ful|y)?\b|\bcr(y|ying|ied)\b|\bblue\b|\bempty\b|\bnumb\b|upset", re.I), "sad", 0.7),
    (re.compile(r"energ|pumped|hyped|motivat|excit|can'?t sit still|let'?s go", re.I), "energetic", 0.65),
    (re.compile(r"\bchill|calm|relax|peace|cozy|mellow|\bzen\b|tired|sleepy", re.I), "chill", 0.6),
    (re.compile(r"\bhappy|\bglad\b|\bgreat\b|\bawesome|\bjoy|grateful|\bgood\b|amazing|\blove", re.I), "happy", 0.65),
    (re.compile(r"curious|wonder|learn|explore|interest|bored", re.I), "curious", 0.6),
]

# enrichment keyed by mood: (emotions, recommendations, template, energy, social)
_PROFILE: Dict[str, Tuple[List[str], List[str], str, str, str]] = {
    "happy": (["happy", "grateful"], ["Share your good vibes with a friend", "Celebrate a small win"],
              "sunset", "high", "outgoing"),
    "chill": (["calm", "content"], ["Keep it slow and steady", "Enjoy a quiet moment"],
              "ocean", "medium-low", "balanced"),
    "curious": (["curious", "hopeful"], ["Try something new today", "Embrace your curiosity"],
                "cosmic", "medium", "balanced"),
    "energetic": (["excited", "motivated"], ["Channel that energy into movement", "Start the task you've been avoiding"],
                  "neon", "high", "outgoing"),
    "anxious": (["anxious", "tense"], ["Take a few slow breaths", "Focus on one small thing you can control"],
                "forest", "medium-high", "reserved"),
    "sad": (["sad", "tired"], ["Be gentle with yourself today", "Reach out to someone you trust"],
            "rain", "low", "reserved"),
}

_LLM_SYSTEM = (
    "You are a strict mood router. "
    f"Return a JSON object with keys: label (one of {', '.join(KNOWN_MOODS)}) "
    "and confidence (0..1). If unclear, choose 'curious'. Respond with JSON only."
)


def heuristic_mood(text: str) -> Optional[Tuple[str, float]]:
    t = squash_ws(text)
    for rx, label, conf in _HEUR_MAP:
        if rx.search(t):
            return label, conf
    return None


class MoodAnalyzer:
    """Free text -> mood label + enrichment. LLM is consulted only when no pattern matches."""

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm

    def analyze(self, text: str, time_of_day: Optional[str] = None) -> MoodAnalysis:
        clean = squash_ws(text or "")
        if not clean:
            raise InvalidArgument("textInput must not be empty")

        hit = heuristic_mood(clean)
        if hit is not None:
            return self._shape(hit[0], hit[1], "heuristic")

        if self.llm is not None:
            routed = self._llm_label(clean, time_of_day)
            if routed is not None:
                return self._shape(routed[0], routed[1], "llm")

        return self._shape(DEFAULT_MOOD, 0.5, "default")

    def _llm_label(self, text: str, time_of_day: Optional[str] = None) -> Optional[Tuple[str, float]]:
        assert self.llm is not None
        try:
            prompt = f"({time_of_day}) {text[:512]}" if time_of_day else text[:512]
            data = self.llm.complete_json(_LLM_SYSTEM, prompt, max_tokens=60, temperature=0)
        except UpstreamDegraded as e:
            log.warning("mood llm routing failed: %s", e)
            return None
        label = str(data.get("label", "")).strip().lower()
        if label not in KNOWN_MOODS:
            log.warning("mood llm returned unknown label %r", label)
            return None
        return label, clip(data.get("confidence", 0.0))

    @staticmethod
    def _shape(mood: str, confidence: float, source: str) -> MoodAnalysis:
        emotions, recs, template, energy, social = _PROFILE[mood]
        return MoodAnalysis(
            mood=mood,
            confidence=round(confidence, 3),
            emotions=unique_preserve([mood, *emotions]),
            recommendations=list(recs),
            suggested_template=template,
            energy_level=energy,
            social_mood=social,
            source=source,  # type: ignore[arg-type]
        )


__all__ = ["MoodAnalyzer", "heuristic_mood"]
