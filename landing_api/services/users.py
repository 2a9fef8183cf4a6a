from __future__ import annotations

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..errors import commit_or_conflict
from ..pagination import Page, paginate
from ..utils.payloads import column_values
from ..utils.search import LIKE_ESCAPE, contains_pattern
from .passwords import hash_password

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def list_users(
    db: Session,
    *,
    page: int,
    limit: int,
    role: str | None = None,
    search: str | None = None,
) -> Page[models.User]:
    stmt = select(models.User)
    if role:
        stmt = stmt.where(models.User.role == role)
    if search:
        pattern = contains_pattern(search)
        stmt = stmt.where(
            or_(
                models.User.name.ilike(pattern, escape=LIKE_ESCAPE),
                models.User.email.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    stmt = stmt.order_by(models.User.created_at.desc(), models.User.id)
    return paginate(db, stmt, page, limit)


def get_user(db: Session, user_id: uuid.UUID) -> models.User | None:
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str) -> models.User | None:
    return db.execute(
        select(models.User).where(models.User.email == normalize_email(email))
    ).scalar_one_or_none()


def create_user(db: Session, payload: schemas.UserCreate) -> models.User:
    """
    Create a dashboard account.

    Without a password the account exists but cannot log in until one is set.
    """
    values = column_values(payload, exclude=("password",))
    values["email"] = normalize_email(values["email"])
    user = models.User(**values)
    if payload.password:
        user.password_hash = hash_password(payload.password)
    db.add(user)
    commit_or_conflict(db, "email")
    logger.info(f"User {user.id} created with role {user.role}")
    return user


def register_user(db: Session, payload: schemas.RegisterRequest) -> models.User:
    """Self-service sign-up. New accounts wait in the pending role for an admin."""
    user = models.User(
        name=payload.name,
        email=normalize_email(payload.email),
        role="pending",
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    commit_or_conflict(db, "email")
    logger.info(f"User {user.id} registered (pending approval)")
    return user


def update_user(db: Session, user: models.User, payload: schemas.UserUpdate) -> models.User:
    values = column_values(payload, exclude=("password",), partial=True, nullable=("image", "bio"))
    if "email" in values:
        values["email"] = normalize_email(values["email"])
    for key, value in values.items():
        setattr(user, key, value)
    if payload.password:
        user.password_hash = hash_password(payload.password)

    user.updated_at = models.utcnow()
    commit_or_conflict(db, "email")
    logger.info(f"User {user.id} updated")
    return user


def delete_user(db: Session, user: models.User) -> None:
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} deleted")


def ensure_root_admin(db: Session, email: str, password: str | None) -> models.User | None:
    """
    Create the root admin account if it does not exist yet.

    Does nothing without a password, so a fresh deployment never gets an
    account with a guessable default.
    """
    existing = get_user_by_email(db, email)
    if existing is not None:
        return existing
    if not password:
        logger.info("ROOT_ADMIN_PASSWORD not set - skipping root admin seeding")
        return None

    user = models.User(
        name="Root Admin",
        email=normalize_email(email),
        role="admin",
        email_verified=True,
        password_hash=hash_password(password),
    )
    db.add(user)
    db.commit()
    logger.info(f"Root admin {user.id} created")
    return user
