"""Newsletter subscriptions (double opt-in).

State machine:

    (new) --subscribe--> pending --confirm--> active
    pending/active --unsubscribe--> unsubscribed --subscribe--> pending

Confirm tokens are single use: they are cleared as soon as they are redeemed.
"""

from __future__ import annotations

import logging
import secrets
import uuid

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..errors import commit_or_conflict
from ..pagination import Page, paginate
from ..settings import Settings
from ..utils.payloads import column_values
from ..utils.search import LIKE_ESCAPE, contains_pattern
from . import email as email_service

logger = logging.getLogger(__name__)

CONFIRM_TOKEN_BYTES = 32

MSG_ALREADY_SUBSCRIBED = "You're already subscribed!"
MSG_CONFIRMATION_RESENT = "Confirmation email resent. Please check your inbox."
MSG_CHECK_EMAIL = "Please check your email to confirm your subscription."
MSG_CONFIRMED = "Your subscription is confirmed. Welcome aboard!"
MSG_UNSUBSCRIBED = "You have been unsubscribed."


def generate_confirm_token() -> str:
    """32 random bytes, hex encoded (64 chars)."""
    return secrets.token_hex(CONFIRM_TOKEN_BYTES)


def get_by_email(db: Session, email: str) -> models.Subscriber | None:
    return db.execute(
        select(models.Subscriber).where(models.Subscriber.email == email.strip().lower())
    ).scalar_one_or_none()


def subscribe(db: Session, settings: Settings, payload: schemas.SubscribeRequest) -> str:
    """
    Start (or restart) a subscription and return the message for the caller.

    Email delivery problems are logged by the email service and never fail
    the subscription itself.
    """
    email = payload.email.strip().lower()
    subscriber = get_by_email(db, email)

    if subscriber is not None and subscriber.status == "active":
        return MSG_ALREADY_SUBSCRIBED

    if subscriber is not None and subscriber.status == "pending":
        if not subscriber.confirm_token:
            subscriber.confirm_token = generate_confirm_token()
            db.commit()
        email_service.send_newsletter_confirmation_email(
            settings, subscriber.email, subscriber.confirm_token, subscriber.first_name
        )
        logger.info(f"Subscriber {subscriber.id} confirmation resent")
        return MSG_CONFIRMATION_RESENT

    token = generate_confirm_token()
    if subscriber is not None:
        # Returning after an unsubscribe
        subscriber.status = "pending"
        subscriber.confirm_token = token
        subscriber.unsubscribed_at = None
        if payload.first_name:
            subscriber.first_name = payload.first_name
        logger.info(f"Subscriber {subscriber.id} reactivated (pending confirmation)")
    else:
        subscriber = models.Subscriber(
            email=email,
            first_name=payload.first_name,
            source=payload.source,
            status="pending",
            confirm_token=token,
        )
        db.add(subscriber)

    commit_or_conflict(db, "email")
    logger.info(f"Subscriber {subscriber.id} pending confirmation")

    email_service.send_newsletter_confirmation_email(
        settings, subscriber.email, token, subscriber.first_name
    )
    return MSG_CHECK_EMAIL


def confirm(db: Session, settings: Settings, token: str) -> models.Subscriber | None:
    """
    Redeem a confirm token. Returns None for unknown (or already used) tokens.
    """
    subscriber = db.execute(
        select(models.Subscriber).where(models.Subscriber.confirm_token == token)
    ).scalar_one_or_none()
    if subscriber is None:
        logger.warning("Confirm attempted with unknown or used token")
        return None

    subscriber.status = "active"
    subscriber.confirmed_at = models.utcnow()
    subscriber.confirm_token = None
    db.commit()
    logger.info(f"Subscriber {subscriber.id} confirmed")

    email_service.send_newsletter_welcome_email(settings, subscriber.email, subscriber.first_name)
    return subscriber


def unsubscribe(db: Session, email: str) -> None:
    """Unsubscribe by email. Unknown addresses are ignored."""
    subscriber = get_by_email(db, email)
    if subscriber is None or subscriber.status == "unsubscribed":
        return

    subscriber.status = "unsubscribed"
    subscriber.unsubscribed_at = models.utcnow()
    subscriber.confirm_token = None
    db.commit()
    logger.info(f"Subscriber {subscriber.id} unsubscribed")


# ============================================================================
# ADMIN
# ============================================================================


def list_subscribers(
    db: Session,
    *,
    page: int,
    limit: int,
    status: str | None = None,
    search: str | None = None,
) -> Page[models.Subscriber]:
    stmt = select(models.Subscriber)
    if status:
        stmt = stmt.where(models.Subscriber.status == status)
    if search:
        pattern = contains_pattern(search)
        stmt = stmt.where(
            or_(
                models.Subscriber.email.ilike(pattern, escape=LIKE_ESCAPE),
                models.Subscriber.first_name.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    stmt = stmt.order_by(models.Subscriber.created_at.desc(), models.Subscriber.id)
    return paginate(db, stmt, page, limit)


def get_subscriber(db: Session, subscriber_id: uuid.UUID) -> models.Subscriber | None:
    return db.execute(
        select(models.Subscriber)
        .where(models.Subscriber.id == subscriber_id)
        .options(selectinload(models.Subscriber.preferences))
    ).scalar_one_or_none()


def update_subscriber(
    db: Session, subscriber_id: uuid.UUID, payload: schemas.SubscriberUpdate
) -> models.Subscriber | None:
    subscriber = get_subscriber(db, subscriber_id)
    if subscriber is None:
        return None

    values = column_values(payload, partial=True, nullable=("first_name", "source"))
    if "email" in values:
        values["email"] = values["email"].strip().lower()
    new_status = values.pop("status", None)
    for key, value in values.items():
        setattr(subscriber, key, value)

    if new_status and new_status != subscriber.status:
        subscriber.status = new_status
        if new_status == "active":
            subscriber.confirmed_at = subscriber.confirmed_at or models.utcnow()
            subscriber.confirm_token = None
            subscriber.unsubscribed_at = None
        elif new_status == "unsubscribed":
            subscriber.unsubscribed_at = models.utcnow()
            subscriber.confirm_token = None
        elif new_status == "pending":
            subscriber.confirm_token = subscriber.confirm_token or generate_confirm_token()
            subscriber.unsubscribed_at = None

    commit_or_conflict(db, "email")
    logger.info(f"Subscriber {subscriber.id} updated by admin")
    return subscriber


def delete_subscriber(db: Session, subscriber_id: uuid.UUID) -> bool:
    subscriber = db.get(models.Subscriber, subscriber_id)
    if subscriber is None:
        return False
    db.delete(subscriber)
    db.commit()
    logger.info(f"Subscriber {subscriber_id} deleted")
    return True
