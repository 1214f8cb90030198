from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from sparkvibe.schemas.common import CamelModel


class DeliveryStatus(str, Enum):
    delivered = "delivered"
    expired = "expired"
    failed = "failed"
    no_subscription = "no_subscription"
    disabled = "disabled"


class SubscriptionKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscription(BaseModel):
    """Browser PushSubscription.toJSON() shape."""
    endpoint: str = Field(..., min_length=1)
    keys: SubscriptionKeys
    expirationTime: Optional[float] = None

    def as_webpush_info(self) -> dict:
        return {"endpoint": self.endpoint, "keys": self.keys.model_dump()}


class SendNotificationIn(CamelModel):
    """Omitting user_ids sends to every active subscriber."""
    user_ids: Optional[List[str]] = None
    title: Optional[str] = Field("SparkVibe Reminder ✨", max_length=120)
    body: str = Field("Time to create your daily vibe card!", min_length=1, max_length=400)
    data: Optional[Dict[str, Any]] = None


class BulkDelivery(CamelModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
