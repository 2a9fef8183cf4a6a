"""Test authentication functionality."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from sqlalchemy.orm import Session

from landing_api.auth import (
    InvalidCredentials,
    authenticate_user,
    create_access_token,
    decode_access_token,
)
from landing_api.settings import get_settings


def test_login_returns_token_with_id_and_role(client, make_user):
    user = make_user("a@b.com", role="author", password="secret")

    response = client.post("/auth/login", json={"email": "a@b.com", "password": "secret"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    token = body["data"]["token"]
    settings = get_settings()
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    assert payload["sub"] == str(user.id)
    assert payload["role"] == "author"
    assert body["data"]["user"]["email"] == "a@b.com"
    assert "password_hash" not in body["data"]["user"]


def test_token_expires_after_seven_days(make_user):
    user = make_user("a@b.com")
    _, expires_at = create_access_token(user, get_settings())
    delta = expires_at - datetime.now(timezone.utc)
    assert timedelta(days=6, hours=23) < delta <= timedelta(days=7)


def test_wrong_password_and_unknown_email_are_indistinguishable(client, make_user):
    make_user("a@b.com", password="secret")

    wrong_password = client.post("/auth/login", json={"email": "a@b.com", "password": "wrong"})
    unknown_email = client.post("/auth/login", json={"email": "nobody@b.com", "password": "secret"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["message"] == "Invalid credentials"


def test_account_without_password_cannot_log_in(db: Session, make_user):
    make_user("nopass@b.com", password=None)
    with pytest.raises(InvalidCredentials):
        authenticate_user(db, "nopass@b.com", "anything")


def test_login_email_is_case_insensitive(client, make_user):
    make_user("mixed@b.com", password="secret")
    response = client.post("/auth/login", json={"email": "Mixed@B.com", "password": "secret"})
    assert response.status_code == 200


def test_register_creates_pending_user(client):
    response = client.post(
        "/auth/register",
        json={"name": "New Person", "email": "New@Example.com", "password": "longenough"},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["role"] == "pending"
    assert data["email"] == "new@example.com"

    login = client.post(
        "/auth/login", json={"email": "new@example.com", "password": "longenough"}
    )
    assert login.status_code == 200


def test_register_duplicate_email_conflicts(client, make_user):
    make_user("taken@example.com")
    response = client.post(
        "/auth/register",
        json={"name": "Someone", "email": "taken@example.com", "password": "longenough"},
    )
    assert response.status_code == 409
    assert "email" in response.json()["errors"]


def test_register_validation_error_is_400_with_field_messages(client):
    response = client.post(
        "/auth/register", json={"name": "X", "email": "not-an-email", "password": "short"}
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "email" in body["errors"]
    assert "password" in body["errors"]


def test_me_requires_token(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_me_returns_current_user(client, author_user, author_headers):
    response = client.get("/auth/me", headers=author_headers)
    assert response.status_code == 200
    assert response.json()["data"]["id"] == str(author_user.id)


def test_expired_token_is_rejected(client, author_user):
    settings = get_settings()
    past = datetime.now(timezone.utc) - timedelta(days=1)
    token = jwt.encode(
        {"sub": str(author_user.id), "role": "author", "iat": past - timedelta(days=7), "exp": past},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"


def test_token_signed_with_other_secret_is_rejected(client, author_user):
    token = jwt.encode(
        {
            "sub": str(author_user.id),
            "role": "admin",
            "exp": datetime.now(timezone.utc) + timedelta(days=1),
        },
        "a-completely-different-secret-of-enough-length",
        algorithm="HS256",
    )
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_decode_access_token_returns_principal(make_user):
    user = make_user("p@b.com", role="admin")
    token, _ = create_access_token(user, get_settings())
    principal = decode_access_token(token, get_settings())
    assert principal.id == user.id
    assert principal.role == "admin"
    assert principal.is_admin


def test_pending_user_is_forbidden_on_dashboard_routes(client, pending_headers):
    assert client.get("/admin/posts", headers=pending_headers).status_code == 403
    assert client.get("/admin/users", headers=pending_headers).status_code == 403


def test_author_cannot_reach_admin_only_routes(client, author_headers):
    assert client.get("/admin/posts", headers=author_headers).status_code == 200
    assert client.get("/admin/users", headers=author_headers).status_code == 403
    assert client.get("/admin/stats", headers=author_headers).status_code == 403
