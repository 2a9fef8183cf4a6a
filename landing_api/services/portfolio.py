from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..errors import commit_or_conflict
from ..pagination import Page, paginate
from ..utils.payloads import column_values

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = (
    "summary",
    "content",
    "client",
    "category",
    "cover_image",
    "live_url",
    "repo_url",
    "completed_at",
)


def list_published(db: Session) -> list[models.PortfolioItem]:
    """Published items, featured first, then newest."""
    stmt = (
        select(models.PortfolioItem)
        .where(models.PortfolioItem.status == "published")
        .order_by(
            models.PortfolioItem.is_featured.desc(),
            models.PortfolioItem.created_at.desc(),
            models.PortfolioItem.id,
        )
    )
    return list(db.execute(stmt).scalars().all())


def get_published_by_slug(db: Session, slug: str) -> models.PortfolioItem | None:
    return db.execute(
        select(models.PortfolioItem).where(
            models.PortfolioItem.slug == slug,
            models.PortfolioItem.status == "published",
        )
    ).scalar_one_or_none()


def list_items(
    db: Session, *, page: int, limit: int, status: str | None = None
) -> Page[models.PortfolioItem]:
    stmt = select(models.PortfolioItem)
    if status:
        stmt = stmt.where(models.PortfolioItem.status == status)
    stmt = stmt.order_by(models.PortfolioItem.created_at.desc(), models.PortfolioItem.id)
    return paginate(db, stmt, page, limit)


def get_item(db: Session, item_id: uuid.UUID) -> models.PortfolioItem | None:
    return db.get(models.PortfolioItem, item_id)


def create_item(db: Session, payload: schemas.PortfolioItemCreate) -> models.PortfolioItem:
    item = models.PortfolioItem(**column_values(payload))
    db.add(item)
    commit_or_conflict(db, "slug")
    logger.info(f"Portfolio item {item.id} created")
    return item


def update_item(
    db: Session, item_id: uuid.UUID, payload: schemas.PortfolioItemUpdate
) -> models.PortfolioItem | None:
    item = db.get(models.PortfolioItem, item_id)
    if item is None:
        return None

    for key, value in column_values(payload, partial=True, nullable=NULLABLE_FIELDS).items():
        setattr(item, key, value)

    item.updated_at = models.utcnow()
    commit_or_conflict(db, "slug")
    logger.info(f"Portfolio item {item.id} updated")
    return item


def delete_item(db: Session, item_id: uuid.UUID) -> bool:
    item = db.get(models.PortfolioItem, item_id)
    if item is None:
        return False
    db.delete(item)
    db.commit()
    logger.info(f"Portfolio item {item_id} deleted")
    return True
