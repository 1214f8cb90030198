from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field, AnyHttpUrl
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class Tuning:
    """Point awards and limits handed to the domain services."""
    points_per_level: int = 500
    daily_checkin_points: int = 10
    card_generation_points: int = 25
    card_share_points: int = 15
    leaderboard_max: int = 50
    leaderboard_placeholder: bool = True
    ledger_max_retries: int = 5


class Settings(BaseSettings):
    # App
    APP_NAME: str = "SparkVibe API"
    ENV: str = "local"
    DEBUG: bool = False
    LOG_FORMAT: Literal["console", "json"] = "console"
    ALLOWED_ORIGINS: str = ""  # comma separated, honored when ENV=production
    DEV_BYPASS_AUTH: bool = False

    # Storage
    STORE_BACKEND: Literal["supabase", "memory"] = "supabase"

    # Supabase
    SUPABASE_URL: AnyHttpUrl | None = None
    SUPABASE_SERVICE_ROLE: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_SCHEMA: str = "public"
    SUPABASE_TIMEOUT_S: float = 15.0
    SUPABASE_PROGRESS_TABLE: str = "user_progress"
    SUPABASE_PUSH_TABLE: str = "push_subscriptions"

    # OpenAI / LLM
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.7
    LLM_TIMEOUT_S: float = Field(default=8.0, gt=0)

    # Web Push
    VAPID_PUBLIC_KEY: str | None = None
    VAPID_PRIVATE_KEY: str | None = None
    VAPID_EMAIL: str = "support@sparkvibe.app"
    PUSH_TIMEOUT_S: float = Field(default=5.0, gt=0)
    PUSH_SENDERS: str = ""  # comma separated user ids allowed to call /push/send

    # Tuning
    POINTS_PER_LEVEL: int = Field(default=500, gt=0)
    DAILY_CHECKIN_POINTS: int = Field(default=10, gt=0)
    CARD_GENERATION_POINTS: int = Field(default=25, ge=0)
    CARD_SHARE_POINTS: int = Field(default=15, ge=0)
    LEADERBOARD_MAX: int = Field(default=50, ge=1, le=50)
    LEADERBOARD_PLACEHOLDER: bool = True
    LEDGER_MAX_RETRIES: int = Field(default=5, ge=1)

    class Config:
        env_file = (".env.backend", ".env.local", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def tuning(self) -> Tuning:
        return Tuning(
            points_per_level=self.POINTS_PER_LEVEL,
            daily_checkin_points=self.DAILY_CHECKIN_POINTS,
            card_generation_points=self.CARD_GENERATION_POINTS,
            card_share_points=self.CARD_SHARE_POINTS,
            leaderboard_max=self.LEADERBOARD_MAX,
            leaderboard_placeholder=self.LEADERBOARD_PLACEHOLDER,
            ledger_max_retries=self.LEDGER_MAX_RETRIES,
        )

    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    def push_senders(self) -> set[str]:
        return {u.strip() for u in self.PUSH_SENDERS.split(",") if u.strip()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached Settings instance. Call anywhere.
    """
    return Settings()
