"""Tests for push subscriptions, notification delivery and push tasks."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests
from pywebpush import WebPushException
from sqlalchemy import select

from yappy.models import Message, PushSubscription
from yappy.services.notification_service import NotificationService, message_preview
from yappy.tasks.push import send_app_opened_push, send_message_push


def subscribe(client, user_id, endpoint="https://push.example.com/abc", notify_user_ids=None):
    return client.post(
        "/api/v1/push/subscribe",
        json={
            "user_id": user_id,
            "subscription": {
                "endpoint": endpoint,
                "expirationTime": 1700000000000,
                "keys": {"p256dh": "p256dh-key", "auth": "auth-key"},
            },
            "notify_user_ids": notify_user_ids or [],
        },
    )


def test_vapid_key_unavailable_without_config(client):
    """Test that the public key endpoint is a 503 when push is off."""
    response = client.get("/api/v1/push/vapid-public-key")
    assert response.status_code == 503


def test_vapid_key_returned_when_configured(client, push_enabled):
    response = client.get("/api/v1/push/vapid-public-key")
    assert response.status_code == 200
    assert response.json() == {"public_key": "test-public-key"}


def test_subscribe_stores_subscription(client, db, admin, member):
    """Test saving a new subscription."""
    response = subscribe(client, member["id"], notify_user_ids=[admin["id"], admin["id"]])
    assert response.status_code == 200
    assert response.json() == {"success": True}

    subscription = db.scalar(select(PushSubscription))
    assert subscription.user_id == member["id"]
    assert subscription.p256dh_key == "p256dh-key"
    assert subscription.expiration_time == 1700000000000
    assert subscription.notify_user_ids == [admin["id"]]


def test_subscribe_upserts_by_endpoint(client, db, admin, member):
    """Test that the same endpoint is updated rather than duplicated."""
    subscribe(client, member["id"], notify_user_ids=[admin["id"]])
    subscribe(client, admin["id"], notify_user_ids=[member["id"]])

    subscriptions = db.scalars(select(PushSubscription)).all()
    assert len(subscriptions) == 1
    assert subscriptions[0].user_id == admin["id"]
    assert subscriptions[0].notify_user_ids == [member["id"]]


def test_subscribe_unknown_user(client):
    response = subscribe(client, 99999)
    assert response.status_code == 404


def test_notify_opened_is_noop_without_config(client, member):
    with patch("yappy.api.push.send_app_opened_push.delay") as mock_task:
        response = client.post("/api/v1/push/notify-opened", json={"user_id": member["id"]})
        assert response.status_code == 200
        mock_task.assert_not_called()


def test_notify_opened_enqueues_task(client, member, push_enabled):
    with patch("yappy.api.push.send_app_opened_push.delay") as mock_task:
        response = client.post("/api/v1/push/notify-opened", json={"user_id": member["id"]})
        assert response.status_code == 200
        mock_task.assert_called_once_with(member["id"])


def test_notify_opened_unknown_user(client, push_enabled):
    response = client.post("/api/v1/push/notify-opened", json={"user_id": 99999})
    assert response.status_code == 404


def test_message_preview():
    assert message_preview(Message(text="x" * 150)) == "x" * 100
    assert message_preview(Message(image_base64="AAAA")) == "Sent a photo"
    assert message_preview(Message(audio_base64="BBBB")) == "Sent a voice message"


def test_notify_followers_sends_to_followers_only(client, db, admin, member, push_enabled):
    """Only subscriptions following the sender get the push."""
    subscribe(client, member["id"], "https://push.example.com/bob", [admin["id"]])
    subscribe(client, admin["id"], "https://push.example.com/alice", [member["id"]])

    service = NotificationService(push_enabled)
    with patch("yappy.services.notification_service.webpush") as mock_webpush:
        sent = service.notify_followers(db, admin["id"], "Alice: hi")

    assert sent == 1
    mock_webpush.assert_called_once()
    kwargs = mock_webpush.call_args.kwargs
    assert kwargs["subscription_info"]["endpoint"] == "https://push.example.com/bob"
    assert kwargs["subscription_info"]["keys"] == {"p256dh": "p256dh-key", "auth": "auth-key"}
    assert kwargs["vapid_private_key"] == "test-private-key"
    assert json.loads(kwargs["data"])["body"] == "Alice: hi"


def test_notify_followers_skips_when_not_configured(db, admin):
    service = NotificationService()
    with patch("yappy.services.notification_service.webpush") as mock_webpush:
        assert service.notify_followers(db, admin["id"], "hi") == 0
        mock_webpush.assert_not_called()


@pytest.mark.parametrize("status_code", [404, 410])
def test_gone_subscription_is_removed(client, db, admin, member, push_enabled, status_code):
    """Push services reporting a dead endpoint get the subscription deleted."""
    subscribe(client, member["id"], notify_user_ids=[admin["id"]])

    error = WebPushException("gone", response=MagicMock(status_code=status_code))
    service = NotificationService(push_enabled)
    with patch("yappy.services.notification_service.webpush", side_effect=error):
        assert service.notify_followers(db, admin["id"], "hi") == 0

    assert db.scalars(select(PushSubscription)).all() == []


def test_transient_push_failure_keeps_subscription(client, db, admin, member, push_enabled):
    subscribe(client, member["id"], notify_user_ids=[admin["id"]])

    error = WebPushException("busy", response=MagicMock(status_code=500))
    service = NotificationService(push_enabled)
    with patch("yappy.services.notification_service.webpush", side_effect=error):
        assert service.notify_followers(db, admin["id"], "hi") == 0

    assert len(db.scalars(select(PushSubscription)).all()) == 1


def test_unreachable_push_service_does_not_stop_fan_out(client, db, admin, member, push_enabled):
    """A connection error for one device still lets the others be tried."""
    carol = client.post("/api/v1/users", json={"name": "Carol"}).json()
    subscribe(client, admin["id"], "https://push.example.com/down", [member["id"]])
    subscribe(client, carol["id"], "https://push.example.com/gone", [member["id"]])
    subscribe(client, admin["id"], "https://push.example.com/up", [member["id"]])

    attempted = []

    def fake_webpush(subscription_info, **kwargs):
        endpoint = subscription_info["endpoint"]
        attempted.append(endpoint)
        if endpoint.endswith("/down"):
            raise requests.exceptions.ConnectionError("connection refused")
        if endpoint.endswith("/gone"):
            raise WebPushException("gone", response=MagicMock(status_code=410))

    service = NotificationService(push_enabled)
    with patch("yappy.services.notification_service.webpush", side_effect=fake_webpush):
        sent = service.notify_followers(db, member["id"], "Bob: hi")

    assert sent == 1
    assert sorted(attempted) == [
        "https://push.example.com/down",
        "https://push.example.com/gone",
        "https://push.example.com/up",
    ]
    endpoints = sorted(s.endpoint for s in db.scalars(select(PushSubscription)).all())
    assert endpoints == ["https://push.example.com/down", "https://push.example.com/up"]


def test_send_message_push_task(client, db, admin, member, push_enabled):
    """The task loads the message and pushes a preview to followers."""
    subscribe(client, member["id"], notify_user_ids=[admin["id"]])
    with patch("yappy.api.messages.send_message_push.delay") as mock_delay:
        message = client.post(
            "/api/v1/messages", json={"sender_user_id": admin["id"], "image_base64": "AAAA"}
        ).json()
    mock_delay.assert_called_once_with(message["id"])

    with (
        patch("yappy.tasks.push.SessionLocal", return_value=db),
        patch("yappy.services.notification_service.webpush") as mock_webpush,
    ):
        result = send_message_push(message["id"])

    assert result == {"sent": 1}
    payload = json.loads(mock_webpush.call_args.kwargs["data"])
    assert payload["body"] == "Alice: Sent a photo"


def test_send_message_push_task_missing_message(db):
    with patch("yappy.tasks.push.SessionLocal", return_value=db):
        assert send_message_push(99999) == {"error": "Message not found"}


def test_send_app_opened_push_task(client, db, admin, member, push_enabled):
    subscribe(client, admin["id"], notify_user_ids=[member["id"]])

    with (
        patch("yappy.tasks.push.SessionLocal", return_value=db),
        patch("yappy.services.notification_service.webpush") as mock_webpush,
    ):
        result = send_app_opened_push(member["id"])

    assert result == {"sent": 1}
    payload = json.loads(mock_webpush.call_args.kwargs["data"])
    assert payload["body"] == "Bob opened the app"
