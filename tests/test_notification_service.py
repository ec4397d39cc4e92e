"""Tests for push subscription management and notification fan-out."""
from __future__ import annotations

import json
from datetime import datetime, time, timezone

import pytest

from packtrack.db.models import PushSubscription
from packtrack.services.notification_service import NotificationService
from packtrack.services.push_transport import DeliveryResult
from packtrack.services.reminder_lifecycle import create_reminder
from packtrack.utils.exceptions import PushConfigurationError, ValidationError

GONE = DeliveryResult(accepted=False, permanently_gone=True, status_code=410)
SERVER_ERROR = DeliveryResult(accepted=False, status_code=503, error="unavailable")
TIMEOUT = DeliveryResult(accepted=False, error="read timeout")


@pytest.fixture()
def reminder(db_session, reminder_fields):
    reminder = create_reminder(reminder_fields(), datetime(2025, 1, 15, 8, tzinfo=timezone.utc))
    db_session.add(reminder)
    db_session.commit()
    return reminder


def endpoints(db_session) -> set[str]:
    return {sub.endpoint for sub in db_session.query(PushSubscription).all()}


def test_subscribe_upserts_by_endpoint(db_session, owner, make_user):
    service = NotificationService(db_session)
    info = {"endpoint": "https://push.example/abc", "keys": {"p256dh": "k1", "auth": "a1"}}
    service.subscribe(owner.id, info, user_agent="Firefox")

    other = make_user()
    info["keys"] = {"p256dh": "k2", "auth": "a2"}
    service.subscribe(other.id, info)

    rows = db_session.query(PushSubscription).all()
    assert len(rows) == 1
    assert rows[0].user_id == other.id
    assert rows[0].p256dh_key == "k2"
    assert rows[0].auth_token == "a2"


@pytest.mark.parametrize(
    "info",
    [
        {"keys": {"p256dh": "k", "auth": "a"}},
        {"endpoint": "https://push.example/abc", "keys": {"p256dh": "k"}},
        {"endpoint": "", "keys": {"p256dh": "k", "auth": "a"}},
    ],
)
def test_subscribe_rejects_incomplete_subscriptions(db_session, owner, info):
    with pytest.raises(ValidationError):
        NotificationService(db_session).subscribe(owner.id, info)


def test_unsubscribe(db_session, owner, make_subscription):
    make_subscription(owner, "https://push.example/abc")
    service = NotificationService(db_session)

    assert service.unsubscribe("https://push.example/abc") is True
    assert service.unsubscribe("https://push.example/abc") is False
    with pytest.raises(ValidationError):
        service.unsubscribe("")


def test_dispatch_for_reminder_reaches_all_pack_members(
    db_session, make_transport, pack, owner, make_user, make_subscription, reminder
):
    member = make_user()
    pack.members.append(member)
    db_session.commit()
    outsider = make_user()
    make_subscription(owner, "https://push.example/owner-phone")
    make_subscription(owner, "https://push.example/owner-laptop")
    make_subscription(member, "https://push.example/member")
    make_subscription(outsider, "https://push.example/outsider")
    transport = make_transport()

    report = NotificationService(db_session, transport=transport).dispatch_for_reminder(reminder)

    assert report.success_count == 3
    assert report.failure_count == 0
    assert report.expired_endpoints == []
    assert {endpoint for endpoint, _ in transport.sent} == {
        "https://push.example/owner-phone",
        "https://push.example/owner-laptop",
        "https://push.example/member",
    }


def test_reminder_payload_shape(db_session, make_transport, owner, make_subscription, reminder):
    make_subscription(owner, "https://push.example/owner")
    transport = make_transport()

    NotificationService(db_session, transport=transport).dispatch_for_reminder(reminder)

    payload = json.loads(transport.sent[0][1])
    assert payload["title"] == "Feed Rex"
    assert payload["body"] == "Rex - feeding"
    assert payload["icon"] and payload["badge"]
    assert payload["data"] == {
        "type": "reminder",
        "reminder_id": str(reminder.id),
        "animal_id": str(reminder.animal_id),
        "url": f"/dashboard/animals/{reminder.animal_id}",
    }
    assert [action["action"] for action in payload["actions"]] == ["complete", "snooze"]


def test_expired_endpoint_is_reported_and_removed(db_session, make_transport, owner, make_subscription):
    make_subscription(owner, "https://push.example/gone")
    transport = make_transport({"https://push.example/gone": GONE})

    report = NotificationService(db_session, transport=transport).dispatch_to_user(
        owner.id, {"title": "Hi", "body": "There"}
    )

    assert report.success_count == 0
    assert report.failure_count == 1
    assert report.expired_endpoints == ["https://push.example/gone"]
    assert "https://push.example/gone" not in endpoints(db_session)


def test_transient_failures_keep_subscriptions(db_session, make_transport, owner, make_subscription):
    for name in ("ok", "down", "slow", "broken", "gone"):
        make_subscription(owner, f"https://push.example/{name}")
    transport = make_transport(
        {
            "https://push.example/down": SERVER_ERROR,
            "https://push.example/slow": TIMEOUT,
            "https://push.example/broken": RuntimeError("boom"),
            "https://push.example/gone": GONE,
        }
    )

    report = NotificationService(db_session, transport=transport, max_workers=2).dispatch_to_user(
        owner.id, {"title": "Hi", "body": "There"}
    )

    assert report.success_count == 1
    assert report.failure_count == 4
    assert report.success_count + report.failure_count == report.attempted == 5
    assert report.expired_endpoints == ["https://push.example/gone"]
    assert endpoints(db_session) == {
        "https://push.example/ok",
        "https://push.example/down",
        "https://push.example/slow",
        "https://push.example/broken",
    }


def test_user_payload_defaults(db_session, make_transport, owner, make_subscription):
    make_subscription(owner, "https://push.example/owner")
    transport = make_transport()

    NotificationService(db_session, transport=transport).dispatch_to_user(
        owner.id, {"title": "Test", "body": "Works", "data": {"test": True}}
    )

    payload = json.loads(transport.sent[0][1])
    assert payload["data"] == {"type": "notification", "url": "/reminders", "test": True}
    assert payload["actions"] == []


def test_no_subscriptions_skips_transport(db_session, owner):
    # No transport and no VAPID keys: must not be needed for an empty audience
    report = NotificationService(db_session).dispatch_to_user(owner.id, {"title": "a", "body": "b"})

    assert (report.success_count, report.failure_count, report.expired_endpoints) == (0, 0, [])


def test_missing_vapid_keys_raise_when_sending(db_session, owner, make_subscription, monkeypatch):
    from packtrack.config import settings

    monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", None)
    make_subscription(owner, "https://push.example/owner")

    with pytest.raises(PushConfigurationError):
        NotificationService(db_session).dispatch_to_user(owner.id, {"title": "a", "body": "b"})
