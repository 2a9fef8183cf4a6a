from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Generator

# Configure the environment before the app (and its engine) is imported
_TMP_DIR = tempfile.mkdtemp(prefix="landing-api-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-at-least-32-characters"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTO_MIGRATE"] = "false"
os.environ["SITE_URL"] = "https://tmng.test"
os.environ["ROOT_ADMIN_EMAIL"] = "admin@tmng.my.id"
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("ROOT_ADMIN_PASSWORD", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from landing_api.auth import create_access_token  # noqa: E402
from landing_api.db import Base, SessionLocal, engine  # noqa: E402
from landing_api.main import app  # noqa: E402
from landing_api.models import User  # noqa: E402
from landing_api.services.passwords import hash_password  # noqa: E402
from landing_api.settings import get_settings  # noqa: E402

DEFAULT_PASSWORD = "password123"


@pytest.fixture(autouse=True)
def reset_database() -> Generator[None, None, None]:
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """Create a database session for testing."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def make_user(db: Session) -> Callable[..., User]:
    def _make_user(
        email: str,
        role: str = "author",
        name: str = "Test User",
        password: str | None = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            name=name,
            email=email,
            role=role,
            password_hash=hash_password(password) if password else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def admin_user(make_user) -> User:
    return make_user("boss@example.com", role="admin", name="Admin User")


@pytest.fixture()
def author_user(make_user) -> User:
    return make_user("writer@example.com", role="author", name="Author User")


@pytest.fixture()
def pending_user(make_user) -> User:
    return make_user("newbie@example.com", role="pending", name="Pending User")


def bearer(user: User) -> dict[str, str]:
    token, _ = create_access_token(user, get_settings())
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_headers(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)


@pytest.fixture()
def author_headers(author_user: User) -> dict[str, str]:
    return bearer(author_user)


@pytest.fixture()
def pending_headers(pending_user: User) -> dict[str, str]:
    return bearer(pending_user)


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    return bearer
