"""Celery tasks for ad-hoc push notifications."""
from __future__ import annotations

from typing import Any
from uuid import UUID

from loguru import logger
from sqlalchemy import select

from packtrack.celery_app import celery_app
from packtrack.db.models.push_subscription import PushSubscription
from packtrack.db.models.user import User
from packtrack.db.session import SessionLocal
from packtrack.schemas.notification import UserNotification
from packtrack.services.notification_service import NotificationService

TEST_NOTIFICATION = UserNotification(
    title="PackTrack - Test",
    body="Notifications are working!",
    data={"url": "/reminders", "test": True},
)


@celery_app.task(name="packtrack.tasks.notifications.send_test_notification")
def send_test_notification(user_id: str | None = None) -> dict[str, Any]:
    """Send a test notification to a user, or to the first subscribed user."""

    db = SessionLocal()
    try:
        if user_id:
            try:
                user = db.get(User, UUID(user_id))
            except (TypeError, ValueError) as exc:
                raise ValueError(f"User {user_id} not found") from exc
        else:
            user = db.scalars(
                select(User).join(PushSubscription, PushSubscription.user_id == User.id).limit(1)
            ).first()

        if user is None:
            raise ValueError("No user found with push subscriptions")

        report = NotificationService(db).dispatch_to_user(user.id, TEST_NOTIFICATION)
        logger.info("Test notification sent", user_id=str(user.id), **report.as_dict())
        return {"user_id": str(user.id), **report.as_dict()}
    finally:
        db.close()
