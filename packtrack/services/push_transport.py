"""Web Push delivery for a single subscription."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import requests
from loguru import logger
from pywebpush import WebPushException, webpush

from packtrack.config import settings
from packtrack.utils.exceptions import PushConfigurationError

# Push services answer 404/410 once a subscription is gone for good
GONE_STATUS_CODES = frozenset({404, 410})


@dataclass(frozen=True, slots=True)
class DeliveryTarget:
    """Plain copy of a subscription handed to delivery workers."""

    endpoint: str
    p256dh: str
    auth: str

    @classmethod
    def from_subscription(cls, subscription: Any) -> "DeliveryTarget":
        return cls(
            endpoint=subscription.endpoint,
            p256dh=subscription.p256dh_key,
            auth=subscription.auth_token,
        )

    @property
    def subscription_info(self) -> dict:
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    accepted: bool
    permanently_gone: bool = False
    status_code: int | None = None
    error: str | None = None


class PushTransport(Protocol):
    """Sends one payload to one subscription."""

    def send(self, target: DeliveryTarget, payload: bytes) -> DeliveryResult:  # pragma: no cover - protocol
        ...


class WebPushTransport:
    """PushTransport backed by pywebpush with VAPID signing."""

    def __init__(
        self,
        *,
        vapid_private_key: str,
        vapid_subject: str,
        ttl: int = 3600,
        timeout: float = 10.0,
    ) -> None:
        if not vapid_private_key:
            raise PushConfigurationError("VAPID private key is not configured")
        self.vapid_private_key = vapid_private_key
        self.vapid_claims = {"sub": vapid_subject}
        self.ttl = ttl
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "WebPushTransport":
        if not settings.VAPID_PRIVATE_KEY:
            raise PushConfigurationError(
                "VAPID keys not configured",
                details={"hint": "run scripts/generate_vapid_keys.py"},
            )
        return cls(
            vapid_private_key=settings.VAPID_PRIVATE_KEY,
            vapid_subject=settings.VAPID_SUBJECT,
            ttl=settings.PUSH_TTL_SECONDS,
            timeout=settings.PUSH_TIMEOUT_SECONDS,
        )

    def send(self, target: DeliveryTarget, payload: bytes) -> DeliveryResult:
        try:
            response = webpush(
                subscription_info=target.subscription_info,
                data=payload,
                vapid_private_key=self.vapid_private_key,
                # pywebpush fills in "aud" on the dict it is given
                vapid_claims=dict(self.vapid_claims),
                ttl=self.ttl,
                timeout=self.timeout,
            )
        except WebPushException as exc:
            status_code = _status_code(exc.response)
            return DeliveryResult(
                accepted=False,
                permanently_gone=status_code in GONE_STATUS_CODES,
                status_code=status_code,
                error=str(exc),
            )
        except requests.RequestException as exc:
            # Timeouts and connection errors never mean the endpoint is gone
            logger.warning("Push request failed", endpoint=target.endpoint, error=str(exc))
            return DeliveryResult(accepted=False, error=str(exc))

        return DeliveryResult(accepted=True, status_code=_status_code(response))


def _status_code(response: Any) -> int | None:
    # requests.Response is falsy for 4xx/5xx, so compare against None
    if response is None:
        return None
    return getattr(response, "status_code", None)
