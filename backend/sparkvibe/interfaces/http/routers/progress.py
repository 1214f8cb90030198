from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from sparkvibe.core.container import Services
from sparkvibe.interfaces.http.deps.auth import get_current_user
from sparkvibe.interfaces.http.deps.services import get_services
from sparkvibe.schemas.progress import (
    ProgressRecord,
    RegisterIn,
    SaveCardIn,
    SaveChoiceIn,
    SaveCompletionIn,
    SaveMoodIn,
    UpdatePointsIn,
    UpdatePointsOut,
)

router = APIRouter()


@router.post("/update-points", response_model=UpdatePointsOut)
def update_points(
    body: Optional[UpdatePointsIn] = None,
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    body = body or UpdatePointsIn()
    ledger = services.ledger
    points = body.points if body.points is not None else ledger.tuning.daily_checkin_points
    rec = ledger.record_daily_checkin(user["id"], action=body.action, points=points)
    return UpdatePointsOut(
        total_points=rec.total_points,
        streak=rec.streak,
        best_streak=rec.best_streak,
        level=rec.level,
        points_added=points,
    )


@router.post("/user/register", response_model=ProgressRecord)
def register(
    body: Optional[RegisterIn] = None,
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return services.ledger.register(user["id"], body.display_name if body else None)


@router.get("/user/profile", response_model=ProgressRecord)
def profile(user=Depends(get_current_user), services: Services = Depends(get_services)):
    return services.ledger.get(user["id"])


@router.post("/user/save-mood", response_model=ProgressRecord)
def save_mood(body: SaveMoodIn, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return services.ledger.record_mood_analysis(user["id"], body.mood, body.confidence, body.timestamp)


@router.post("/user/save-choice", response_model=ProgressRecord)
def save_choice(body: SaveChoiceIn, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return services.ledger.record_choice(user["id"], body.choice, body.capsule_id, body.timestamp)


@router.post("/user/save-completion", response_model=ProgressRecord)
def save_completion(
    body: SaveCompletionIn,
    background: BackgroundTasks,
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    rec = services.ledger.record_completion(user["id"], body.capsule_id, body.points_earned, body.completed_at)
    background.add_task(
        services.push.notify,
        user["id"],
        "Adventure complete! 🎉",
        f"You earned {body.points_earned} points. Total: {rec.total_points}",
        {"capsuleId": body.capsule_id},
        "adventure_completed",
    )
    return rec


@router.post("/user/save-card-generation", response_model=ProgressRecord)
def save_card_generation(body: SaveCardIn, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return services.ledger.record_card_generation(user["id"], body.card_data, body.generated_at)


@router.post("/user/share-card", response_model=ProgressRecord)
def share_card(
    background: BackgroundTasks,
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    rec = services.ledger.record_card_share(user["id"])
    background.add_task(
        services.push.notify,
        user["id"],
        "Vibe shared ✨",
        f"+{services.ledger.tuning.card_share_points} points for spreading the vibe!",
        None,
        "card_shared",
    )
    return rec
