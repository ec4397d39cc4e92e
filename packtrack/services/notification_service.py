"""Service for handling Web Push notifications."""
from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from loguru import logger
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from packtrack.config import settings
from packtrack.db.models.push_subscription import PushSubscription
from packtrack.db.models.reminder import Reminder
from packtrack.repositories.push_subscriptions import PushSubscriptionRepository
from packtrack.schemas.notification import (
    NotificationAction,
    NotificationPayload,
    PushSubscriptionCreate,
    UserNotification,
)
from packtrack.services.push_transport import (
    DeliveryResult,
    DeliveryTarget,
    PushTransport,
    WebPushTransport,
)
from packtrack.utils.exceptions import ValidationError

REMINDER_ACTIONS = [
    NotificationAction(action="complete", title="Mark as done"),
    NotificationAction(action="snooze", title="Remind me in 10 min"),
]


@dataclass(slots=True)
class DeliveryReport:
    """Outcome of one dispatch call."""

    success_count: int = 0
    failure_count: int = 0
    expired_endpoints: list[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.success_count + self.failure_count

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success_count,
            "failed": self.failure_count,
            "expired": list(self.expired_endpoints),
        }


class NotificationService:
    """Subscribe devices and fan out push notifications to them."""

    def __init__(
        self,
        db: Session,
        *,
        transport: PushTransport | None = None,
        subscriptions: PushSubscriptionRepository | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.db = db
        self.subscriptions = subscriptions or PushSubscriptionRepository(db)
        self._transport = transport
        self.max_workers = max_workers or settings.PUSH_MAX_WORKERS

    @property
    def transport(self) -> PushTransport:
        # Built lazily so subscribe/unsubscribe work without VAPID keys
        if self._transport is None:
            self._transport = WebPushTransport.from_settings()
        return self._transport

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(
        self,
        user_id: uuid.UUID,
        subscription_info: Mapping[str, Any],
        user_agent: str | None = None,
    ) -> PushSubscription:
        """Register a push subscription, taking over an existing endpoint."""

        try:
            data = PushSubscriptionCreate.model_validate(subscription_info)
        except SchemaValidationError as exc:
            raise ValidationError(
                "Invalid push subscription",
                details={"error": str(exc)},
            ) from exc

        return self.subscriptions.upsert(
            user_id, data.endpoint, data.keys.model_dump(), user_agent=user_agent
        )

    def unsubscribe(self, endpoint: str) -> bool:
        if not endpoint:
            raise ValidationError("Endpoint required", details={"endpoint": "is required"})
        return self.subscriptions.delete_by_endpoint(endpoint)

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------
    def build_reminder_payload(self, reminder: Reminder) -> NotificationPayload:
        animal = reminder.animal
        task_key = reminder.task_type.key if reminder.task_type is not None else ""
        return NotificationPayload(
            title=reminder.title,
            body=f"{animal.name} - {task_key}",
            icon=settings.NOTIFICATION_ICON,
            badge=settings.NOTIFICATION_BADGE,
            data={
                "type": "reminder",
                "reminder_id": str(reminder.id),
                "animal_id": str(reminder.animal_id),
                "url": f"/dashboard/animals/{reminder.animal_id}",
            },
            actions=REMINDER_ACTIONS,
        )

    def build_user_payload(self, notification: UserNotification) -> NotificationPayload:
        data = {"type": "notification", "url": "/reminders"}
        data.update(notification.data)
        return NotificationPayload(
            title=notification.title,
            body=notification.body,
            icon=notification.icon or settings.NOTIFICATION_ICON,
            badge=notification.badge or settings.NOTIFICATION_BADGE,
            data=data,
            actions=notification.actions,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch_for_reminder(self, reminder: Reminder) -> DeliveryReport:
        """Notify every device of every member of the reminder's pack."""

        subscriptions = self.subscriptions.find_by_pack_members(reminder.animal.pack_id)
        payload = self.build_reminder_payload(reminder)
        report = self._dispatch(subscriptions, payload.to_bytes())
        logger.info(
            "Reminder notification dispatched",
            reminder_id=str(reminder.id),
            **report.as_dict(),
        )
        return report

    def dispatch_to_user(
        self, user_id: uuid.UUID, notification: UserNotification | Mapping[str, Any]
    ) -> DeliveryReport:
        """Notify every device of one user."""

        if not isinstance(notification, UserNotification):
            notification = UserNotification.model_validate(notification)
        subscriptions = self.subscriptions.find_by_user(user_id)
        payload = self.build_user_payload(notification)
        report = self._dispatch(subscriptions, payload.to_bytes())
        logger.info("User notification dispatched", user_id=str(user_id), **report.as_dict())
        return report

    def _dispatch(self, subscriptions: Iterable[PushSubscription], payload: bytes) -> DeliveryReport:
        targets = [DeliveryTarget.from_subscription(sub) for sub in subscriptions]
        report = DeliveryReport()
        if not targets:
            return report

        transport = self.transport
        workers = min(self.max_workers, len(targets))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="push") as pool:
            results = list(pool.map(lambda target: _deliver(transport, target, payload), targets))

        # Merged on the calling thread after every send has finished
        for target, result in zip(targets, results):
            if result.accepted:
                report.success_count += 1
                continue
            report.failure_count += 1
            if result.permanently_gone:
                report.expired_endpoints.append(target.endpoint)
            else:
                logger.warning(
                    "Push delivery failed",
                    endpoint=target.endpoint,
                    status_code=result.status_code,
                    error=result.error,
                )

        for endpoint in report.expired_endpoints:
            self.subscriptions.delete_by_endpoint(endpoint)
            logger.info("Removed expired push subscription", endpoint=endpoint)

        return report


def _deliver(transport: PushTransport, target: DeliveryTarget, payload: bytes) -> DeliveryResult:
    try:
        return transport.send(target, payload)
    except Exception as exc:
        logger.exception("Push transport raised", endpoint=target.endpoint)
        return DeliveryResult(accepted=False, error=str(exc))
