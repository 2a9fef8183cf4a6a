"""Test the newsletter double opt-in flow and subscriber administration."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from landing_api.models import Subscriber, SubscriberPreference
from landing_api.services import subscribers as subscriber_service

CONFIRMATION = "landing_api.services.email.send_newsletter_confirmation_email"
WELCOME = "landing_api.services.email.send_newsletter_welcome_email"


def _subscriber(db: Session, email: str = "reader@example.com") -> Subscriber:
    db.expire_all()
    return db.execute(select(Subscriber).where(Subscriber.email == email)).scalar_one()


@pytest.fixture()
def subscribed(client, db: Session) -> Subscriber:
    """A pending subscriber created through the public endpoint."""
    with patch(CONFIRMATION):
        response = client.post(
            "/subscribers", json={"email": "Reader@Example.com", "first_name": "Rita"}
        )
    assert response.status_code == 200, response.text
    return _subscriber(db)


def test_new_subscription_is_pending(client, db: Session):
    with patch(CONFIRMATION) as send:
        response = client.post(
            "/subscribers", json={"email": "Reader@Example.com", "first_name": "Rita"}
        )

    assert response.status_code == 200
    assert response.json()["message"] == subscriber_service.MSG_CHECK_EMAIL

    subscriber = _subscriber(db)
    assert subscriber.status == "pending"
    assert subscriber.source == "blog"
    assert len(subscriber.confirm_token) == 64

    send.assert_called_once()
    _, to_email, token, first_name = send.call_args.args
    assert to_email == "reader@example.com"
    assert token == subscriber.confirm_token
    assert first_name == "Rita"


def test_pending_subscriber_gets_the_same_token_again(client, db: Session, subscribed):
    token = subscribed.confirm_token
    with patch(CONFIRMATION) as send:
        response = client.post("/subscribers", json={"email": "reader@example.com"})

    assert response.json()["message"] == subscriber_service.MSG_CONFIRMATION_RESENT
    assert send.call_args.args[2] == token
    assert _subscriber(db).confirm_token == token


def test_confirm_activates_once(client, db: Session, subscribed):
    token = subscribed.confirm_token
    with patch(WELCOME) as welcome:
        first = client.get(f"/subscribers/confirm/{token}")
        second = client.get(f"/subscribers/confirm/{token}")

    assert first.status_code == 200
    assert first.json()["message"] == subscriber_service.MSG_CONFIRMED
    assert second.status_code == 404
    assert second.json() == {
        "success": False,
        "message": "Invalid or expired confirmation link",
    }
    welcome.assert_called_once()

    subscriber = _subscriber(db)
    assert subscriber.status == "active"
    assert subscriber.confirmed_at is not None
    assert subscriber.confirm_token is None


def test_active_subscriber_is_told_already_subscribed(client, db: Session, subscribed):
    with patch(WELCOME):
        client.get(f"/subscribers/confirm/{subscribed.confirm_token}")

    with patch(CONFIRMATION) as send:
        response = client.post("/subscribers", json={"email": "reader@example.com"})

    assert response.json()["message"] == subscriber_service.MSG_ALREADY_SUBSCRIBED
    send.assert_not_called()


def test_unsubscribe_then_resubscribe(client, db: Session, subscribed):
    old_token = subscribed.confirm_token

    response = client.post("/subscribers/unsubscribe", json={"email": "READER@example.com"})
    assert response.status_code == 200
    assert response.json()["message"] == subscriber_service.MSG_UNSUBSCRIBED

    subscriber = _subscriber(db)
    assert subscriber.status == "unsubscribed"
    assert subscriber.unsubscribed_at is not None
    assert subscriber.confirm_token is None

    with patch(CONFIRMATION) as send:
        response = client.post("/subscribers", json={"email": "reader@example.com"})

    assert response.json()["message"] == subscriber_service.MSG_CHECK_EMAIL
    send.assert_called_once()

    subscriber = _subscriber(db)
    assert subscriber.status == "pending"
    assert subscriber.unsubscribed_at is None
    assert subscriber.confirm_token not in (None, old_token)


def test_unsubscribe_unknown_email_still_succeeds(client):
    response = client.post("/subscribers/unsubscribe", json={"email": "ghost@example.com"})
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_unsubscribe_link(client, db: Session, subscribed):
    response = client.get("/subscribers/unsubscribe", params={"email": "reader@example.com"})
    assert response.status_code == 200
    assert _subscriber(db).status == "unsubscribed"


def test_subscribe_rejects_invalid_email(client):
    response = client.post("/subscribers", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert "email" in response.json()["errors"]


def test_admin_endpoints_require_admin(client, author_headers):
    assert client.get("/admin/subscribers").status_code == 401
    assert client.get("/admin/subscribers", headers=author_headers).status_code == 403


def test_admin_list_and_filter(client, admin_headers, db: Session, subscribed):
    db.add(Subscriber(email="fan@example.com", first_name="Fanny", status="active"))
    db.commit()

    everyone = client.get("/admin/subscribers", headers=admin_headers).json()
    assert everyone["pagination"]["total"] == 2

    active = client.get(
        "/admin/subscribers", params={"status": "active"}, headers=admin_headers
    ).json()["data"]
    assert [s["email"] for s in active] == ["fan@example.com"]

    search = client.get(
        "/admin/subscribers", params={"search": "rit"}, headers=admin_headers
    ).json()["data"]
    assert [s["email"] for s in search] == ["reader@example.com"]
    assert "confirm_token" not in search[0]


def test_admin_get_includes_preferences(client, admin_headers, db: Session, subscribed):
    db.add(SubscriberPreference(subscriber_id=subscribed.id, preference_key="weekly_digest"))
    db.commit()

    response = client.get(f"/admin/subscribers/{subscribed.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["preferences"] == [
        {"preference_key": "weekly_digest", "enabled": True}
    ]


def test_admin_status_change_applies_side_effects(client, admin_headers, db: Session, subscribed):
    response = client.put(
        f"/admin/subscribers/{subscribed.id}",
        json={"status": "active", "first_name": "Rita M."},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "active"
    assert data["first_name"] == "Rita M."
    assert data["confirmed_at"] is not None

    assert _subscriber(db).confirm_token is None


def test_admin_email_change_conflicts(client, admin_headers, db: Session, subscribed):
    db.add(Subscriber(email="fan@example.com", status="active"))
    db.commit()

    response = client.put(
        f"/admin/subscribers/{subscribed.id}",
        json={"email": "fan@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert "email" in response.json()["errors"]


def test_admin_delete(client, admin_headers, subscribed):
    response = client.delete(f"/admin/subscribers/{subscribed.id}", headers=admin_headers)
    assert response.status_code == 200

    missing = client.delete(f"/admin/subscribers/{subscribed.id}", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Subscriber not found"
