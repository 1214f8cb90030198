from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query

from sparkvibe.core.container import Services
from sparkvibe.interfaces.http.deps.services import get_services
from sparkvibe.schemas.leaderboard import Leaderboard

router = APIRouter()


@router.get("/leaderboard", response_model=Leaderboard)
def leaderboard(
    category: str = Query("points"),
    timeframe: str = Query("all"),
    limit: Optional[int] = Query(None, ge=1),
    services: Services = Depends(get_services),
):
    return services.leaderboard.query(category=category, timeframe=timeframe, limit=limit)
