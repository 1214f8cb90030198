from __future__ import annotations
from fastapi import APIRouter

from . import health, capsules, leaderboard, progress, push

api = APIRouter()
api.include_router(health.router, prefix="/health", tags=["health"])
api.include_router(capsules.router, tags=["capsules"])
api.include_router(leaderboard.router, tags=["leaderboard"])
api.include_router(progress.router, tags=["progress"])
api.include_router(push.router, prefix="/push", tags=["push"])
