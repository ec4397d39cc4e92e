"""SQLAlchemy-backed push subscription repository."""
from __future__ import annotations

import uuid
from typing import Mapping

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from packtrack.db.models.pack import pack_members
from packtrack.db.models.push_subscription import PushSubscription
from packtrack.utils.exceptions import RepositoryError


class PushSubscriptionRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_user(self, user_id: uuid.UUID) -> list[PushSubscription]:
        stmt = select(PushSubscription).where(PushSubscription.user_id == user_id)
        return list(self.db.scalars(stmt).all())

    def find_by_pack_members(self, pack_id: uuid.UUID) -> list[PushSubscription]:
        """Subscriptions of every member of a pack."""

        stmt = (
            select(PushSubscription)
            .join(pack_members, pack_members.c.user_id == PushSubscription.user_id)
            .where(pack_members.c.pack_id == pack_id)
            .order_by(PushSubscription.endpoint)
        )
        return list(self.db.scalars(stmt).all())

    def find_by_endpoint(self, endpoint: str) -> PushSubscription | None:
        stmt = select(PushSubscription).where(PushSubscription.endpoint == endpoint)
        return self.db.scalars(stmt).first()

    def upsert(
        self,
        user_id: uuid.UUID,
        endpoint: str,
        keys: Mapping[str, str],
        user_agent: str | None = None,
    ) -> PushSubscription:
        """Create a subscription or take over the row with the same endpoint."""

        try:
            subscription = self.find_by_endpoint(endpoint)
            if subscription is None:
                subscription = PushSubscription(endpoint=endpoint)
                self.db.add(subscription)
            subscription.user_id = user_id
            subscription.p256dh_key = keys["p256dh"]
            subscription.auth_token = keys["auth"]
            subscription.user_agent = user_agent
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError("Failed to save push subscription", details={"error": str(exc)}) from exc
        return subscription

    def delete_by_endpoint(self, endpoint: str) -> bool:
        try:
            result = self.db.execute(delete(PushSubscription).where(PushSubscription.endpoint == endpoint))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError("Failed to delete push subscription", details={"error": str(exc)}) from exc
        return result.rowcount > 0
