from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import Field

from sparkvibe.schemas.common import CamelModel


class MoodEntry(CamelModel):
    mood: str
    confidence: Optional[float] = None
    at: datetime


class ChoiceEntry(CamelModel):
    choice: str
    capsule_id: str
    at: datetime


class ProgressRecord(CamelModel):
    """One row per user; written only through the ProgressLedger."""
    user_id: str
    display_name: Optional[str] = None
    total_points: int = Field(0, ge=0)
    streak: int = Field(0, ge=0)
    best_streak: int = Field(0, ge=0)
    level: int = Field(1, ge=1)
    cards_generated: int = Field(0, ge=0)
    cards_shared: int = Field(0, ge=0)
    adventures_completed: int = Field(0, ge=0)
    last_activity: Optional[datetime] = None
    mood_history: List[MoodEntry] = Field(default_factory=list)
    choices: List[ChoiceEntry] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    version: int = Field(0, ge=0)


# ---- request bodies ----------------------------------------------------------

class RegisterIn(CamelModel):
    display_name: Optional[str] = Field(None, max_length=80)


class SaveMoodIn(CamelModel):
    mood: str = Field(..., min_length=1, max_length=40)
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    timestamp: Optional[datetime] = None


class SaveChoiceIn(CamelModel):
    choice: str = Field(..., min_length=1, max_length=200)
    capsule_id: str = Field(..., min_length=1)
    timestamp: Optional[datetime] = None


class SaveCompletionIn(CamelModel):
    capsule_id: str = Field(..., min_length=1)
    points_earned: int = Field(..., gt=0)
    completed_at: Optional[datetime] = None


class SaveCardIn(CamelModel):
    card_data: Dict[str, Any] = Field(..., min_length=1)
    generated_at: Optional[datetime] = None


class UpdatePointsIn(CamelModel):
    points: Optional[int] = Field(None, gt=0)
    action: Literal["daily_adventure"] = "daily_adventure"


class UpdatePointsOut(CamelModel):
    total_points: int
    streak: int
    best_streak: int
    level: int
    points_added: int
