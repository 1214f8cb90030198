from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from sparkvibe.core.container import Services
from sparkvibe.core.errors import NotFound
from sparkvibe.domain.capsules import demo_phrase
from sparkvibe.interfaces.http.deps.auth import get_optional_user
from sparkvibe.interfaces.http.deps.services import get_services
from sparkvibe.schemas.capsule import AnalyzeMoodIn, AnalyzeMoodOut, Capsule, CapsuleRequest

log = logging.getLogger("sparkvibe.http.capsules")

router = APIRouter()


@router.post("/analyze-mood", response_model=AnalyzeMoodOut)
def analyze_mood(
    body: AnalyzeMoodIn,
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
    services: Services = Depends(get_services),
):
    analysis = services.analyzer.analyze(body.text_input, body.time_of_day)
    recorded = False
    if user:
        try:
            services.ledger.record_mood_analysis(user["id"], analysis.mood, analysis.confidence)
            recorded = True
        except NotFound:
            log.info("mood not recorded, user %s has no progress record", user["id"])
    return AnalyzeMoodOut(**analysis.model_dump(), recorded=recorded)


@router.post("/generate-capsule-simple", response_model=Capsule)
def generate_capsule(body: Optional[CapsuleRequest] = None, services: Services = Depends(get_services)):
    return services.selector.generate_capsule(body or CapsuleRequest())


@router.get("/demo/vibe")
def demo_vibe():
    return {"message": demo_phrase()}
