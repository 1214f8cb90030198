# backend/sparkvibe/domain/capsules/service.py
"""
Content Selector: mood (+ interests, time of day) -> Capsule.

Public API:
- normalize_mood(mood) -> str
- ContentSelector(llm=None).generate_capsule(CapsuleRequest) -> Capsule

With an LLM handle the selector asks for a JSON capsule first; any failure
falls back to the static tables. Callers always get a usable capsule.
"""

from __future__ import annotations

import json
import logging
import random
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from sparkvibe.adapters.llm_client import LLMClient
from sparkvibe.core.errors import UpstreamDegraded
from sparkvibe.schemas.capsule import Adventure, BrainBite, Capsule, CapsuleRequest
from sparkvibe.utils.text import squash_ws
from .tables import (
    BRAIN_BITE,
    DEFAULT_CATEGORY,
    DEFAULT_GREETING,
    DEFAULT_MOOD,
    DEMO_PHRASES,
    GREETINGS,
    KNOWN_MOODS,
    MOOD_CONTENT,
)

log = logging.getLogger("sparkvibe.capsules")

_SYSTEM_PROMPT = (
    "You write short, upbeat micro-adventures for a mood tracking app. "
    "Respond with JSON only, using exactly these keys: "
    '{"adventure": {"title": str, "prompt": str, "options": [str, str]}, '
    '"moodBoost": str, "brainBite": {"question": str, "answer": str}, '
    '"habitNudge": str}. Keep every string under 120 characters.'
)


def normalize_mood(mood: Optional[str]) -> str:
    m = squash_ws(mood or "").lower()
    return m if m in MOOD_CONTENT else DEFAULT_MOOD


def _greeting(time_of_day: Optional[str]) -> str:
    return GREETINGS.get(squash_ws(time_of_day or "").lower(), DEFAULT_GREETING)


def _category(interests: List[str]) -> str:
    for it in interests:
        tag = squash_ws(str(it)).lower()
        if tag:
            return tag
    return DEFAULT_CATEGORY


def demo_phrase(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(DEMO_PHRASES)


def _new_id() -> str:
    return uuid.uuid4().hex


class ContentSelector:
    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm

    @property
    def llm_enabled(self) -> bool:
        return self.llm is not None

    def generate_capsule(self, req: CapsuleRequest) -> Capsule:
        mood = normalize_mood(req.mood)
        category = _category(req.interests)
        greeting = _greeting(req.time_of_day)

        if self.llm is not None:
            try:
                return self._from_llm(mood, category, greeting, req)
            except (UpstreamDegraded, ValidationError, KeyError, TypeError, ValueError) as e:
                log.warning("capsule llm path failed, using table (mood=%s): %s", mood, e)

        return self.table_capsule(mood, category=category, greeting=greeting)

    # ---- table generator ------------------------------------------------------

    def table_capsule(self, mood: str, *, category: str = DEFAULT_CATEGORY,
                      greeting: str = DEFAULT_GREETING) -> Capsule:
        row = MOOD_CONTENT[mood]
        return Capsule(
            id=_new_id(),
            mood=mood,
            greeting=greeting,
            adventure=Adventure(
                title=row["title"],
                prompt=row["prompt"],
                options=tuple(row["options"]),
                category=category,
                difficulty=row["difficulty"],
                estimated_time=row["estimated_time"],
            ),
            mood_boost=row["mood_boost"],
            brain_bite=BrainBite(**BRAIN_BITE),
            habit_nudge=row["habit_nudge"],
            source="table",
        )

    # ---- llm generator --------------------------------------------------------

    def _from_llm(self, mood: str, category: str, greeting: str, req: CapsuleRequest) -> Capsule:
        assert self.llm is not None
        user_prompt = json.dumps({
            "mood": mood,
            "interests": [squash_ws(str(i)) for i in req.interests if str(i).strip()][:5],
            "timeOfDay": req.time_of_day or "unknown",
        }, ensure_ascii=False)
        data = self.llm.complete_json(_SYSTEM_PROMPT, user_prompt)

        row = MOOD_CONTENT[mood]
        adv: Dict[str, Any] = dict(data["adventure"])
        adv.setdefault("category", category)
        adv.setdefault("difficulty", row["difficulty"])
        adv.setdefault("estimatedTime", row["estimated_time"])

        return Capsule.model_validate({
            "id": _new_id(),
            "mood": mood,
            "greeting": greeting,
            "adventure": adv,
            "moodBoost": data["moodBoost"],
            "brainBite": data["brainBite"],
            "habitNudge": data["habitNudge"],
            "source": "llm",
        })


__all__ = ["ContentSelector", "normalize_mood", "demo_phrase", "KNOWN_MOODS"]
