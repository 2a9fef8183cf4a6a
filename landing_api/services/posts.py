"""Blog post queries and mutations."""

from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..deps import RequestMeta
from ..errors import InvalidReferenceError, commit_or_conflict
from ..pagination import Page, paginate
from ..utils.payloads import column_values
from ..utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20

SORT_COLUMNS = {
    "created_at": models.Post.created_at,
    "published_at": models.Post.published_at,
    "title": models.Post.title,
    "updated_at": models.Post.updated_at,
}

# Columns a partial update may explicitly clear
NULLABLE_FIELDS = (
    "excerpt",
    "cover_image",
    "read_time_minutes",
    "seo_title",
    "seo_description",
    "seo_image",
)

_DETAIL_OPTIONS = (
    selectinload(models.Post.author),
    selectinload(models.Post.categories),
    selectinload(models.Post.tags),
)


def _unique(ids: Iterable[uuid.UUID]) -> list[uuid.UUID]:
    return list(dict.fromkeys(ids))


def list_posts(
    db: Session,
    *,
    page: int,
    limit: int,
    published_only: bool = True,
    status: str | None = None,
    is_featured: bool | None = None,
    author_id: uuid.UUID | None = None,
    category_id: uuid.UUID | None = None,
    tag_id: uuid.UUID | None = None,
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> Page[models.Post]:
    """
    List posts with filters, sorting and pagination.

    When `published_only` is set the status filter is ignored and only
    published posts are returned.
    """
    stmt = select(models.Post)

    if published_only:
        stmt = stmt.where(models.Post.status == "published")
    elif status:
        stmt = stmt.where(models.Post.status == status)

    if is_featured is not None:
        stmt = stmt.where(models.Post.is_featured == is_featured)

    if author_id:
        stmt = stmt.where(models.Post.author_id == author_id)

    if category_id:
        in_category = select(models.PostCategory.post_id).where(
            models.PostCategory.category_id == category_id
        )
        stmt = stmt.where(models.Post.id.in_(in_category))

    if tag_id:
        with_tag = select(models.PostTag.post_id).where(models.PostTag.tag_id == tag_id)
        stmt = stmt.where(models.Post.id.in_(with_tag))

    if search:
        pattern = contains_pattern(search)
        stmt = stmt.where(
            or_(
                models.Post.title.ilike(pattern, escape=LIKE_ESCAPE),
                models.Post.excerpt.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    sort_column = SORT_COLUMNS.get(sort_by, models.Post.created_at)
    direction = sort_column.asc() if sort_order == "asc" else sort_column.desc()
    stmt = stmt.order_by(direction, models.Post.id)

    return paginate(db, stmt, page, limit, options=(selectinload(models.Post.author),))


def get_post(db: Session, post_id: uuid.UUID, published_only: bool = False) -> models.Post | None:
    stmt = select(models.Post).where(models.Post.id == post_id).options(*_DETAIL_OPTIONS)
    if published_only:
        stmt = stmt.where(models.Post.status == "published")
    return db.execute(stmt).scalar_one_or_none()


def get_post_by_slug(db: Session, slug: str, published_only: bool = True) -> models.Post | None:
    stmt = select(models.Post).where(models.Post.slug == slug).options(*_DETAIL_OPTIONS)
    if published_only:
        stmt = stmt.where(models.Post.status == "published")
    return db.execute(stmt).scalar_one_or_none()


def search_posts(db: Session, query: str, limit: int = SEARCH_LIMIT) -> list[models.Post]:
    """Case-insensitive substring search over published posts."""
    pattern = contains_pattern(query)
    stmt = (
        select(models.Post)
        .where(
            models.Post.status == "published",
            or_(
                models.Post.title.ilike(pattern, escape=LIKE_ESCAPE),
                models.Post.excerpt.ilike(pattern, escape=LIKE_ESCAPE),
                models.Post.content.ilike(pattern, escape=LIKE_ESCAPE),
            ),
        )
        .order_by(models.Post.published_at.desc(), models.Post.id)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def _check_refs(db: Session, model, ids: list[uuid.UUID], field: str) -> None:
    if not ids:
        return
    # Pending column changes are flushed by commit_or_conflict, not here
    with db.no_autoflush:
        found = set(db.execute(select(model.id).where(model.id.in_(ids))).scalars().all())
    missing = [i for i in ids if i not in found]
    if missing:
        raise InvalidReferenceError(field, missing)


def _set_categories(db: Session, post: models.Post, category_ids: list[uuid.UUID]) -> None:
    wanted = _unique(category_ids)
    _check_refs(db, models.Category, wanted, "category_ids")
    existing = {link.category_id: link for link in post.category_links}
    # Links dropped from the list are removed by the delete-orphan cascade
    post.category_links = [
        existing.get(cid) or models.PostCategory(category_id=cid) for cid in wanted
    ]


def _set_tags(db: Session, post: models.Post, tag_ids: list[uuid.UUID]) -> None:
    wanted = _unique(tag_ids)
    _check_refs(db, models.Tag, wanted, "tag_ids")
    existing = {link.tag_id: link for link in post.tag_links}
    post.tag_links = [existing.get(tid) or models.PostTag(tag_id=tid) for tid in wanted]


def _reload(db: Session, post: models.Post) -> models.Post:
    # Drop stale relationship state so categories/tags reflect the new join rows
    db.expire(post)
    return get_post(db, post.id)


def create_post(
    db: Session, payload: schemas.PostCreate, author_id: uuid.UUID | None
) -> models.Post:
    """
    Insert a post together with its category/tag links in one transaction.

    Raises ConflictError on a duplicate slug and InvalidReferenceError on
    unknown category/tag ids; nothing is written in either case.
    """
    values = column_values(payload, exclude=("category_ids", "tag_ids"))
    if values.get("read_time_minutes") is None:
        values.pop("read_time_minutes", None)

    post = models.Post(id=uuid.uuid4(), author_id=author_id, **values)
    if post.status == "published":
        post.published_at = models.utcnow()

    try:
        if payload.category_ids:
            _set_categories(db, post, payload.category_ids)
        if payload.tag_ids:
            _set_tags(db, post, payload.tag_ids)
    except InvalidReferenceError:
        db.rollback()
        raise

    db.add(post)
    commit_or_conflict(db, "slug")
    logger.info(f"Post {post.id} created (status={post.status})")
    return _reload(db, post)


def update_post(
    db: Session, post_id: uuid.UUID, payload: schemas.PostUpdate
) -> models.Post | None:
    """
    Apply a partial update. Supplied category_ids/tag_ids replace the post's
    existing links; omitted ones leave them untouched.

    Returns None if the post does not exist.
    """
    post = db.get(models.Post, post_id)
    if post is None:
        return None

    previous_status = post.status
    values = column_values(
        payload, exclude=("category_ids", "tag_ids"), partial=True, nullable=NULLABLE_FIELDS
    )
    for key, value in values.items():
        setattr(post, key, value)

    if post.status == "published" and previous_status != "published":
        post.published_at = models.utcnow()

    try:
        if payload.category_ids is not None:
            _set_categories(db, post, payload.category_ids)
        if payload.tag_ids is not None:
            _set_tags(db, post, payload.tag_ids)
    except InvalidReferenceError:
        db.rollback()
        raise

    post.updated_at = models.utcnow()
    commit_or_conflict(db, "slug")
    logger.info(f"Post {post.id} updated")
    return _reload(db, post)


def publish_post(db: Session, post_id: uuid.UUID) -> models.Post | None:
    """Set status to published and stamp published_at. No-op for published posts."""
    post = db.get(models.Post, post_id)
    if post is None:
        return None

    if post.status != "published":
        post.status = "published"
        post.published_at = models.utcnow()
        post.updated_at = models.utcnow()
        db.commit()
        logger.info(f"Post {post.id} published")
    return _reload(db, post)


def unpublish_post(db: Session, post_id: uuid.UUID) -> models.Post | None:
    """Move a post back to draft. published_at is kept as a "previously published" marker."""
    post = db.get(models.Post, post_id)
    if post is None:
        return None

    if post.status != "draft":
        post.status = "draft"
        post.updated_at = models.utcnow()
        db.commit()
        logger.info(f"Post {post.id} unpublished")
    return _reload(db, post)


def delete_post(db: Session, post_id: uuid.UUID) -> bool:
    post = db.get(models.Post, post_id)
    if post is None:
        return False

    db.delete(post)
    db.commit()
    logger.info(f"Post {post_id} deleted")
    return True


# ============================================================================
# VIEWS
# ============================================================================


def hash_ip(ip: str, day: str | None = None) -> str:
    """
    Hash an IP address with the current UTC date.

    The same visitor gets a stable hash for one day only, so raw addresses
    are never stored.
    """
    if day is None:
        day = datetime.now(timezone.utc).date().isoformat()
    return hashlib.sha256(f"{ip}{day}".encode()).hexdigest()


def record_view(db: Session, post: models.Post, meta: RequestMeta) -> models.PostView:
    view = models.PostView(
        post_id=post.id,
        ip_hash=hash_ip(meta.ip),
        user_agent=meta.user_agent,
        referrer=meta.referrer,
    )
    db.add(view)
    db.commit()
    return view


def view_count(db: Session, post_id: uuid.UUID) -> int:
    return db.execute(
        select(func.count()).select_from(models.PostView).where(models.PostView.post_id == post_id)
    ).scalar_one()


def to_detail(db: Session, post: models.Post, include_views: bool = True) -> schemas.Post:
    detail = schemas.Post.model_validate(post)
    if include_views:
        detail.view_count = view_count(db, post.id)
    return detail
