"""Tests for the pywebpush-backed transport."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from pywebpush import WebPushException

from packtrack.services.push_transport import DeliveryTarget, WebPushTransport
from packtrack.utils.exceptions import PushConfigurationError

TARGET = DeliveryTarget(endpoint="https://push.example/abc", p256dh="p256dh-key", auth="auth-secret")


def make_transport() -> WebPushTransport:
    return WebPushTransport(
        vapid_private_key="private-key",
        vapid_subject="mailto:ops@example.com",
        ttl=120,
        timeout=3.5,
    )


def response(status_code: int) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    return resp


def test_accepted_delivery_passes_vapid_and_timeout():
    with patch("packtrack.services.push_transport.webpush", return_value=response(201)) as webpush:
        result = make_transport().send(TARGET, b'{"title": "x"}')

    assert result.accepted is True
    assert result.permanently_gone is False
    kwargs = webpush.call_args.kwargs
    assert kwargs["subscription_info"] == {
        "endpoint": "https://push.example/abc",
        "keys": {"p256dh": "p256dh-key", "auth": "auth-secret"},
    }
    assert kwargs["data"] == b'{"title": "x"}'
    assert kwargs["vapid_private_key"] == "private-key"
    assert kwargs["vapid_claims"] == {"sub": "mailto:ops@example.com"}
    assert kwargs["ttl"] == 120
    assert kwargs["timeout"] == 3.5


@pytest.mark.parametrize("status_code", [404, 410])
def test_gone_statuses_mark_endpoint_expired(status_code):
    error = WebPushException("Push failed", response=response(status_code))
    with patch("packtrack.services.push_transport.webpush", side_effect=error):
        result = make_transport().send(TARGET, b"{}")

    assert result.accepted is False
    assert result.permanently_gone is True
    assert result.status_code == status_code


@pytest.mark.parametrize("status_code", [400, 413, 429, 500, 503])
def test_other_statuses_are_transient(status_code):
    error = WebPushException("Push failed", response=response(status_code))
    with patch("packtrack.services.push_transport.webpush", side_effect=error):
        result = make_transport().send(TARGET, b"{}")

    assert result.accepted is False
    assert result.permanently_gone is False


def test_exception_without_response_is_transient():
    with patch("packtrack.services.push_transport.webpush", side_effect=WebPushException("bad key")):
        result = make_transport().send(TARGET, b"{}")

    assert result.accepted is False
    assert result.permanently_gone is False
    assert result.status_code is None


@pytest.mark.parametrize(
    "error", [requests.Timeout("read timed out"), requests.ConnectionError("refused")]
)
def test_network_errors_are_transient(error):
    with patch("packtrack.services.push_transport.webpush", side_effect=error):
        result = make_transport().send(TARGET, b"{}")

    assert result.accepted is False
    assert result.permanently_gone is False
    assert "refused" in result.error or "timed out" in result.error


def test_claims_are_copied_per_send():
    transport = make_transport()

    def mutate_claims(**kwargs):
        kwargs["vapid_claims"]["aud"] = "https://push.example"
        return response(201)

    with patch("packtrack.services.push_transport.webpush", side_effect=mutate_claims):
        transport.send(TARGET, b"{}")

    assert transport.vapid_claims == {"sub": "mailto:ops@example.com"}


def test_missing_private_key_is_a_configuration_error():
    with pytest.raises(PushConfigurationError):
        WebPushTransport(vapid_private_key="", vapid_subject="mailto:ops@example.com")


def test_from_settings_requires_vapid_key(monkeypatch):
    from packtrack.config import settings

    monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", None)
    with pytest.raises(PushConfigurationError):
        WebPushTransport.from_settings()

    monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", "configured")
    assert WebPushTransport.from_settings().vapid_private_key == "configured"


def test_subscription_target_is_built_from_model():
    subscription = MagicMock(endpoint="https://push.example/x", p256dh_key="p", auth_token="a")

    assert DeliveryTarget.from_subscription(subscription) == DeliveryTarget(
        endpoint="https://push.example/x", p256dh="p", auth="a"
    )
