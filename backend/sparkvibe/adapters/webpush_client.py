from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

from pywebpush import WebPushException, webpush

from sparkvibe.core.config import Settings
from sparkvibe.schemas.push import DeliveryStatus, PushSubscription

log = logging.getLogger("sparkvibe.push")

__all__ = ["PushSender", "WebPushSender", "build_push_sender"]

# push services answer 404/410 once a browser subscription is gone
_EXPIRED_STATUS = {404, 410}


class PushSender(Protocol):
    def send(self, subscription: PushSubscription, payload: Dict[str, Any]) -> DeliveryStatus: ...


class WebPushSender:
    """Single delivery attempt over the Web Push protocol, VAPID-signed."""

    def __init__(self, *, private_key: str, email: str, timeout_s: float = 5.0):
        self._private_key = private_key
        self._sub = email if email.startswith("mailto:") else f"mailto:{email}"
        self._timeout_s = timeout_s

    def send(self, subscription: PushSubscription, payload: Dict[str, Any]) -> DeliveryStatus:
        try:
            webpush(
                subscription_info=subscription.as_webpush_info(),
                data=json.dumps(payload, ensure_ascii=False),
                vapid_private_key=self._private_key,
                # pywebpush writes aud/exp into the claims dict
                vapid_claims={"sub": self._sub},
                timeout=self._timeout_s,
            )
            return DeliveryStatus.delivered
        except WebPushException as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            if status in _EXPIRED_STATUS:
                return DeliveryStatus.expired
            log.warning("push delivery failed (status=%s): %s", status, e)
            return DeliveryStatus.failed
        except Exception as e:
            log.warning("push delivery error: %s: %s", type(e).__name__, e)
            return DeliveryStatus.failed


def build_push_sender(settings: Settings) -> Optional[PushSender]:
    if not settings.VAPID_PRIVATE_KEY:
        return None
    return WebPushSender(
        private_key=settings.VAPID_PRIVATE_KEY,
        email=settings.VAPID_EMAIL,
        timeout_s=settings.PUSH_TIMEOUT_S,
    )
