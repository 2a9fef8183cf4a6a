"""Categories and tags.

Both are flat lookup tables joined to posts; the list views carry a derived
post count rather than a stored one.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..errors import commit_or_conflict
from ..utils.payloads import column_values

logger = logging.getLogger(__name__)


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def _get_by_id_or_slug(db: Session, model, id_or_slug: str):
    row_id = _parse_uuid(id_or_slug)
    if row_id is not None:
        row = db.get(model, row_id)
        if row is not None:
            return row
    return db.execute(select(model).where(model.slug == id_or_slug)).scalar_one_or_none()


def _post_count(db: Session, link_column, row_id: uuid.UUID) -> int:
    return db.execute(
        select(func.count()).select_from(link_column.table).where(link_column == row_id)
    ).scalar_one()


# ============================================================================
# CATEGORIES
# ============================================================================


def list_categories(db: Session) -> list[schemas.Category]:
    stmt = (
        select(models.Category, func.count(models.PostCategory.post_id))
        .outerjoin(models.PostCategory, models.PostCategory.category_id == models.Category.id)
        .group_by(models.Category.id)
        .order_by(models.Category.sort_order.asc(), models.Category.name.asc())
    )
    return [
        schemas.Category.model_validate(category).model_copy(update={"post_count": count})
        for category, count in db.execute(stmt).all()
    ]


def get_category(db: Session, id_or_slug: str) -> models.Category | None:
    return _get_by_id_or_slug(db, models.Category, id_or_slug)


def category_detail(db: Session, category: models.Category) -> schemas.Category:
    count = _post_count(db, models.PostCategory.category_id, category.id)
    return schemas.Category.model_validate(category).model_copy(update={"post_count": count})


def create_category(db: Session, payload: schemas.CategoryCreate) -> models.Category:
    values = column_values(payload)
    if values.get("color") is None:
        values.pop("color", None)
    category = models.Category(**values)
    db.add(category)
    commit_or_conflict(db, "slug")
    logger.info(f"Category {category.id} created")
    return category


def update_category(
    db: Session, category_id: uuid.UUID, payload: schemas.CategoryUpdate
) -> models.Category | None:
    category = db.get(models.Category, category_id)
    if category is None:
        return None

    for key, value in column_values(
        payload, partial=True, nullable=("description", "color")
    ).items():
        setattr(category, key, value)

    commit_or_conflict(db, "slug")
    logger.info(f"Category {category.id} updated")
    return category


def delete_category(db: Session, category_id: uuid.UUID) -> bool:
    category = db.get(models.Category, category_id)
    if category is None:
        return False
    db.delete(category)
    db.commit()
    logger.info(f"Category {category_id} deleted")
    return True


# ============================================================================
# TAGS
# ============================================================================


def list_tags(db: Session) -> list[schemas.Tag]:
    stmt = (
        select(models.Tag, func.count(models.PostTag.post_id))
        .outerjoin(models.PostTag, models.PostTag.tag_id == models.Tag.id)
        .group_by(models.Tag.id)
        .order_by(models.Tag.name.asc())
    )
    return [
        schemas.Tag.model_validate(tag).model_copy(update={"post_count": count})
        for tag, count in db.execute(stmt).all()
    ]


def get_tag(db: Session, id_or_slug: str) -> models.Tag | None:
    return _get_by_id_or_slug(db, models.Tag, id_or_slug)


def tag_detail(db: Session, tag: models.Tag) -> schemas.Tag:
    count = _post_count(db, models.PostTag.tag_id, tag.id)
    return schemas.Tag.model_validate(tag).model_copy(update={"post_count": count})


def create_tag(db: Session, payload: schemas.TagCreate) -> models.Tag:
    tag = models.Tag(**column_values(payload))
    db.add(tag)
    commit_or_conflict(db, "slug")
    logger.info(f"Tag {tag.id} created")
    return tag


def update_tag(db: Session, tag_id: uuid.UUID, payload: schemas.TagUpdate) -> models.Tag | None:
    tag = db.get(models.Tag, tag_id)
    if tag is None:
        return None

    for key, value in column_values(payload, partial=True).items():
        setattr(tag, key, value)

    commit_or_conflict(db, "slug")
    logger.info(f"Tag {tag.id} updated")
    return tag


def delete_tag(db: Session, tag_id: uuid.UUID) -> bool:
    tag = db.get(models.Tag, tag_id)
    if tag is None:
        return False
    db.delete(tag)
    db.commit()
    logger.info(f"Tag {tag_id} deleted")
    return True
