from __future__ import annotations

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..deps import RequestMeta
from ..pagination import Page, paginate
from ..utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)


def create_contact(
    db: Session, payload: schemas.ContactCreate, meta: RequestMeta
) -> models.ContactSubmission:
    contact = models.ContactSubmission(
        name=payload.name,
        email=payload.email,
        subject=payload.subject,
        message=payload.message,
        status="new",
        ip_address=meta.ip if meta.ip != "unknown" else None,
        user_agent=meta.user_agent,
        extra={
            "source": "website",
            "page": meta.referrer or "/contact",
            "timestamp": models.utcnow().isoformat(),
        },
    )
    db.add(contact)
    db.commit()
    logger.info(f"Contact submission {contact.id} received")
    return contact


def list_contacts(
    db: Session,
    *,
    page: int,
    limit: int,
    status: str | None = None,
    search: str | None = None,
) -> Page[models.ContactSubmission]:
    stmt = select(models.ContactSubmission)
    if status:
        stmt = stmt.where(models.ContactSubmission.status == status)
    if search:
        pattern = contains_pattern(search)
        stmt = stmt.where(
            or_(
                models.ContactSubmission.name.ilike(pattern, escape=LIKE_ESCAPE),
                models.ContactSubmission.email.ilike(pattern, escape=LIKE_ESCAPE),
                models.ContactSubmission.subject.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    stmt = stmt.order_by(models.ContactSubmission.created_at.desc(), models.ContactSubmission.id)
    return paginate(db, stmt, page, limit)


def get_contact(db: Session, contact_id: uuid.UUID) -> models.ContactSubmission | None:
    return db.get(models.ContactSubmission, contact_id)


def update_contact(
    db: Session, contact_id: uuid.UUID, payload: schemas.ContactUpdate
) -> models.ContactSubmission | None:
    """Change the workflow status; the first move to "replied" stamps replied_at."""
    contact = db.get(models.ContactSubmission, contact_id)
    if contact is None:
        return None

    contact.status = payload.status
    if payload.status == "replied" and contact.replied_at is None:
        contact.replied_at = models.utcnow()
    db.commit()
    logger.info(f"Contact submission {contact.id} marked {contact.status}")
    return contact


def delete_contact(db: Session, contact_id: uuid.UUID) -> models.ContactSubmission | None:
    """Delete a submission. Returns None when it was already gone."""
    contact = db.get(models.ContactSubmission, contact_id)
    if contact is None:
        return None
    db.delete(contact)
    db.commit()
    logger.info(f"Contact submission {contact_id} deleted")
    return contact
