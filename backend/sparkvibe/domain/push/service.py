# backend/sparkvibe/domain/push/service.py
"""
Push Dispatcher: subscription registry + one-shot notification delivery.

Delivery never raises to the caller. An expired subscription (404/410 from
the push service) is deactivated instead of retried; every other failure is
logged and reported as `failed`.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Protocol

from pydantic import ValidationError

from sparkvibe.adapters.supabase_client import SupabaseHandle
from sparkvibe.adapters.webpush_client import PushSender
from sparkvibe.core.errors import InvalidArgument, ServiceUnavailable
from sparkvibe.schemas.push import BulkDelivery, DeliveryStatus, PushSubscription
from sparkvibe.utils.text import unique_preserve
from sparkvibe.utils.time import utc_iso

log = logging.getLogger("sparkvibe.push")

DEFAULT_TITLE = "SparkVibe"
ICON = "/icon-192x192.png"
BADGE = "/badge-72x72.png"


class SubscriptionStore(Protocol):
    def upsert(self, user_id: str, subscription: PushSubscription) -> None: ...

    def get_active(self, user_id: str) -> Optional[PushSubscription]: ...

    def deactivate(self, user_id: str) -> None: ...

    def active_user_ids(self) -> List[str]: ...


class MemorySubscriptionStore:
    def __init__(self) -> None:
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def upsert(self, user_id: str, subscription: PushSubscription) -> None:
        with self._lock:
            self._rows[user_id] = {"subscription": subscription, "active": True}

    def get_active(self, user_id: str) -> Optional[PushSubscription]:
        with self._lock:
            row = self._rows.get(user_id)
        if not row or not row["active"]:
            return None
        return row["subscription"]

    def deactivate(self, user_id: str) -> None:
        with self._lock:
            if user_id in self._rows:
                self._rows[user_id]["active"] = False

    def active_user_ids(self) -> List[str]:
        with self._lock:
            return sorted(uid for uid, row in self._rows.items() if row["active"])


class SupabaseSubscriptionStore:
    def __init__(self, handle: SupabaseHandle, table: str = "push_subscriptions"):
        self._handle = handle
        self.table = table

    def _tbl(self):
        return self._handle.client().table(self.table)

    def upsert(self, user_id: str, subscription: PushSubscription) -> None:
        row = {
            "user_id": user_id,
            "subscription": subscription.model_dump(),
            "active": True,
            "updated_at": utc_iso(),
        }
        try:
            self._tbl().upsert(row, on_conflict="user_id").execute()
        except Exception as e:
            raise ServiceUnavailable(f"push subscription write failed: {e}") from e

    def get_active(self, user_id: str) -> Optional[PushSubscription]:
        resp = (
            self._tbl().select("subscription")
            .eq("user_id", user_id).eq("active", True).limit(1).execute()
        )
        data = getattr(resp, "data", None) or []
        return PushSubscription.model_validate(data[0]["subscription"]) if data else None

    def deactivate(self, user_id: str) -> None:
        self._tbl().update({"active": False, "updated_at": utc_iso()}).eq("user_id", user_id).execute()

    def active_user_ids(self) -> List[str]:
        try:
            resp = self._tbl().select("user_id").eq("active", True).order("user_id").execute()
        except Exception as e:
            raise ServiceUnavailable(f"push subscription read failed: {e}") from e
        return [row["user_id"] for row in (getattr(resp, "data", None) or [])]


class PushDispatcher:
    def __init__(self, sender: Optional[PushSender], subscriptions: SubscriptionStore):
        self.sender = sender
        self.subscriptions = subscriptions

    @property
    def enabled(self) -> bool:
        return self.sender is not None

    def subscribe(self, user_id: str, subscription: Dict[str, Any] | PushSubscription) -> PushSubscription:
        try:
            sub = subscription if isinstance(subscription, PushSubscription) \
                else PushSubscription.model_validate(subscription)
        except ValidationError as e:
            raise InvalidArgument(f"invalid push subscription: {e.errors()[0].get('msg')}") from e
        self.subscriptions.upsert(user_id, sub)
        log.info("push subscription stored user=%s", user_id)
        return sub

    def notify(self, user_id: str, title: Optional[str], body: str,
               data: Optional[Dict[str, Any]] = None, kind: str = "generic") -> DeliveryStatus:
        if self.sender is None:
            return DeliveryStatus.disabled

        try:
            sub = self.subscriptions.get_active(user_id)
        except Exception as e:
            log.warning("push lookup failed user=%s: %s", user_id, e)
            return DeliveryStatus.failed
        if sub is None:
            log.debug("no active push subscription user=%s", user_id)
            return DeliveryStatus.no_subscription

        payload = {
            "title": title or DEFAULT_TITLE,
            "body": body,
            "icon": ICON,
            "badge": BADGE,
            "vibrate": [200, 100, 200],
            "data": {"type": kind, **(data or {})},
        }
        status = self.sender.send(sub, payload)

        if status is DeliveryStatus.expired:
            try:
                self.subscriptions.deactivate(user_id)
                log.info("push subscription expired, deactivated user=%s", user_id)
            except Exception as e:
                log.warning("push deactivate failed user=%s: %s", user_id, e)
        elif status is DeliveryStatus.failed:
            log.warning("push %s not delivered user=%s", kind, user_id)
        return status

    def notify_many(self, user_ids: Iterable[str], title: Optional[str], body: str,
                    data: Optional[Dict[str, Any]] = None, kind: str = "broadcast") -> BulkDelivery:
        """One notify per distinct user; a bad recipient never stops the rest."""
        counts: Dict[str, int] = {}
        targets = unique_preserve(u for u in user_ids if u)
        for uid in targets:
            try:
                status = self.notify(uid, title, body, data, kind)
            except Exception as e:
                log.warning("push %s to user=%s raised: %s", kind, uid, e)
                status = DeliveryStatus.failed
            counts[status.value] = counts.get(status.value, 0) + 1

        ok = counts.get(DeliveryStatus.delivered.value, 0)
        log.info("push %s sent=%d delivered=%d", kind, len(targets), ok)
        return BulkDelivery(total=len(targets), successful=ok, failed=len(targets) - ok, by_status=counts)

    def broadcast(self, title: Optional[str], body: str,
                  data: Optional[Dict[str, Any]] = None) -> BulkDelivery:
        return self.notify_many(self.subscriptions.active_user_ids(), title, body, data, kind="broadcast")


__all__ = [
    "PushDispatcher",
    "SubscriptionStore",
    "MemorySubscriptionStore",
    "SupabaseSubscriptionStore",
]
