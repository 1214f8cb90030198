from __future__ import annotations
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from sparkvibe.core.container import Services
from sparkvibe.core.errors import NotFound
from sparkvibe.interfaces.http.deps.auth import get_current_user
from sparkvibe.interfaces.http.deps.services import get_services
from sparkvibe.schemas.common import OkResponse
from sparkvibe.schemas.push import BulkDelivery, SendNotificationIn

log = logging.getLogger("sparkvibe.http.push")

router = APIRouter()


@router.post("/subscribe", response_model=OkResponse)
def subscribe(
    subscription: Dict[str, Any] = Body(...),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.push.subscribe(user["id"], subscription)
    return OkResponse(meta={"push_enabled": services.push.enabled})


@router.post("/send", response_model=BulkDelivery)
def send(
    body: SendNotificationIn,
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    if user["id"] not in services.settings.push_senders():
        raise HTTPException(status_code=403, detail="Not allowed to send notifications")

    push = services.push
    if body.user_ids is None:
        log.info("push broadcast requested by %s", user["id"])
        return push.broadcast(body.title, body.body, body.data)
    return push.notify_many(body.user_ids, body.title, body.body, body.data, kind="direct")


@router.get("/vapid-public-key")
def vapid_public_key(services: Services = Depends(get_services)):
    key = services.settings.VAPID_PUBLIC_KEY
    if not key:
        raise NotFound("push notifications are not configured")
    return {"publicKey": key}
