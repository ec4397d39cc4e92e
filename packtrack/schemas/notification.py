"""Pydantic models for push subscriptions and notification payloads."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class SubscriptionKeys(BaseModel):
    p256dh: str = Field(min_length=1)
    auth: str = Field(min_length=1)


class PushSubscriptionCreate(BaseModel):
    """Subscription object produced by the browser Push API."""

    endpoint: str = Field(min_length=1)
    keys: SubscriptionKeys


class NotificationAction(BaseModel):
    action: str
    title: str


class NotificationPayload(BaseModel):
    """JSON body delivered to the service worker."""

    title: str
    body: str
    icon: str
    badge: str
    data: dict[str, Any] = Field(default_factory=dict)
    actions: list[NotificationAction] = Field(default_factory=list)

    def to_bytes(self) -> bytes:
        return self.model_dump_json(exclude_none=True).encode("utf-8")


class UserNotification(BaseModel):
    """Free-form notification addressed to one user."""

    title: str
    body: str
    icon: Optional[str] = None
    badge: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    actions: list[NotificationAction] = Field(default_factory=list)
