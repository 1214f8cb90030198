from __future__ import annotations
from fastapi import APIRouter, Depends

from sparkvibe.core.container import Services
from sparkvibe.interfaces.http.deps.services import get_services

router = APIRouter()


@router.get("/healthz")
def healthz(services: Services = Depends(get_services)):
    ok_db = services.store.ping()
    return {
        "ok": ok_db,
        "store": ok_db,
        "llm": services.llm is not None,
        "push": services.push.enabled,
    }
