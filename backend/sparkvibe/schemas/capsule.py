from __future__ import annotations
from typing import List, Literal, Optional, Tuple
from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sparkvibe.schemas.common import CamelModel


class CapsuleRequest(CamelModel):
    mood: str = "curious"
    interests: List[str] = Field(default_factory=list)
    time_of_day: Optional[str] = None

    @field_validator("mood", mode="before")
    @classmethod
    def _none_mood(cls, v):
        return "curious" if v is None else v

    @field_validator("interests", mode="before")
    @classmethod
    def _none_interests(cls, v):
        return [] if v is None else v


class _Frozen(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Adventure(_Frozen):
    title: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)
    options: Tuple[str, ...] = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    difficulty: str = Field(..., min_length=1)
    estimated_time: str = Field(..., min_length=1)

    @field_validator("options")
    @classmethod
    def _non_empty_options(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if any(not str(o).strip() for o in v):
            raise ValueError("options must be non-empty strings")
        return v


class BrainBite(_Frozen):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class Capsule(_Frozen):
    id: str = Field(..., min_length=1)
    mood: str = Field(..., min_length=1)
    greeting: str = Field(..., min_length=1)
    adventure: Adventure
    mood_boost: str = Field(..., min_length=1)
    brain_bite: BrainBite
    habit_nudge: str = Field(..., min_length=1)
    source: Literal["table", "llm"] = "table"


class AnalyzeMoodIn(CamelModel):
    text_input: str = Field(..., min_length=1, max_length=2000)
    time_of_day: Optional[str] = None


class MoodAnalysis(CamelModel):
    mood: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    emotions: List[str]
    recommendations: List[str]
    suggested_template: str
    energy_level: str
    social_mood: str
    source: Literal["heuristic", "llm", "default"] = "heuristic"


class AnalyzeMoodOut(MoodAnalysis):
    recorded: bool = False
