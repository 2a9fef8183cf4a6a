"""Blog post endpoints: public reading and the dashboard editor."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Principal, get_current_principal_optional, require_staff
from ..deps import RequestMeta, get_db, get_request_meta
from ..pagination import PageParams, page_params
from ..services import posts as post_service

router = APIRouter(prefix="/posts", tags=["Posts"])
admin_router = APIRouter(prefix="/admin/posts", tags=["Admin: Posts"])

STAFF_ROLES = ("admin", "author")


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")


@router.get("", response_model=schemas.Envelope[list[schemas.PostSummary]])
def list_posts(
    params: PageParams = Depends(page_params),
    status_filter: schemas.PostStatus | None = Query(None, alias="status"),
    is_featured: bool | None = None,
    author_id: UUID | None = None,
    category_id: UUID | None = None,
    tag_id: UUID | None = None,
    search: str | None = Query(None, max_length=200),
    sort_by: schemas.PostSortField = "created_at",
    sort_order: schemas.SortOrder = "desc",
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_current_principal_optional),
) -> schemas.Envelope[list[schemas.PostSummary]]:
    """
    List posts.

    Anonymous visitors only ever see published posts; the status filter is
    honoured for dashboard users.
    """
    published_only = principal is None or principal.role not in STAFF_ROLES
    page = post_service.list_posts(
        db,
        page=params.page,
        limit=params.limit,
        published_only=published_only,
        status=status_filter,
        is_featured=is_featured,
        author_id=author_id,
        category_id=category_id,
        tag_id=tag_id,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return page.to_envelope(schemas.PostSummary)


@router.get("/featured", response_model=schemas.Envelope[list[schemas.PostSummary]])
def list_featured_posts(
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
) -> schemas.Envelope[list[schemas.PostSummary]]:
    page = post_service.list_posts(
        db,
        page=params.page,
        limit=params.limit,
        is_featured=True,
        sort_by="published_at",
    )
    return page.to_envelope(schemas.PostSummary)


@router.get("/search", response_model=schemas.Envelope[list[schemas.PostSearchResult]])
def search_posts(
    q: str = Query(..., min_length=1, max_length=200),
    limit: int = Query(post_service.SEARCH_LIMIT, ge=1, le=post_service.SEARCH_LIMIT),
    db: Session = Depends(get_db),
) -> schemas.Envelope[list[schemas.PostSearchResult]]:
    results = post_service.search_posts(db, q, limit)
    return schemas.Envelope(data=[schemas.PostSearchResult.model_validate(p) for p in results])


@router.get("/{slug}", response_model=schemas.Envelope[schemas.Post])
def get_post_by_slug(
    slug: str,
    db: Session = Depends(get_db),
) -> schemas.Envelope[schemas.Post]:
    post = post_service.get_post_by_slug(db, slug, published_only=True)
    if post is None:
        raise _not_found()
    return schemas.Envelope(data=post_service.to_detail(db, post))


@router.post(
    "/{slug}/views",
    response_model=schemas.Envelope[None],
    status_code=status.HTTP_201_CREATED,
)
def record_post_view(
    slug: str,
    db: Session = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
) -> schemas.Envelope[None]:
    """Append an analytics row for a published post."""
    post = post_service.get_post_by_slug(db, slug, published_only=True)
    if post is None:
        raise _not_found()
    post_service.record_view(db, post, meta)
    return schemas.Envelope(message="View recorded")


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=schemas.Envelope[list[schemas.PostSummary]])
def admin_list_posts(
    params: PageParams = Depends(page_params),
    status_filter: schemas.PostStatus | None = Query(None, alias="status"),
    is_featured: bool | None = None,
    author_id: UUID | None = None,
    category_id: UUID | None = None,
    tag_id: UUID | None = None,
    search: str | None = Query(None, max_length=200),
    sort_by: schemas.PostSortField = "created_at",
    sort_order: schemas.SortOrder = "desc",
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[list[schemas.PostSummary]]:
    page = post_service.list_posts(
        db,
        page=params.page,
        limit=params.limit,
        published_only=False,
        status=status_filter,
        is_featured=is_featured,
        author_id=author_id,
        category_id=category_id,
        tag_id=tag_id,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return page.to_envelope(schemas.PostSummary)


@admin_router.get("/{post_id}", response_model=schemas.Envelope[schemas.Post])
def admin_get_post(
    post_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Post]:
    post = post_service.get_post(db, post_id)
    if post is None:
        raise _not_found()
    return schemas.Envelope(data=post_service.to_detail(db, post))


@admin_router.post(
    "",
    response_model=schemas.Envelope[schemas.Post],
    status_code=status.HTTP_201_CREATED,
)
def admin_create_post(
    payload: schemas.PostCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Post]:
    """Create a post authored by the caller, with its category and tag links."""
    post = post_service.create_post(db, payload, author_id=principal.id)
    return schemas.Envelope(data=post_service.to_detail(db, post), message="Post created")


@admin_router.patch("/{post_id}", response_model=schemas.Envelope[schemas.Post])
def admin_update_post(
    post_id: UUID,
    payload: schemas.PostUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Post]:
    post = post_service.update_post(db, post_id, payload)
    if post is None:
        raise _not_found()
    return schemas.Envelope(data=post_service.to_detail(db, post), message="Post updated")


@admin_router.delete("/{post_id}", response_model=schemas.Envelope[None])
def admin_delete_post(
    post_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[None]:
    if not post_service.delete_post(db, post_id):
        raise _not_found()
    return schemas.Envelope(message="Post deleted")


@admin_router.post("/{post_id}/publish", response_model=schemas.Envelope[schemas.Post])
def admin_publish_post(
    post_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Post]:
    post = post_service.publish_post(db, post_id)
    if post is None:
        raise _not_found()
    return schemas.Envelope(data=post_service.to_detail(db, post), message="Post published")


@admin_router.post("/{post_id}/unpublish", response_model=schemas.Envelope[schemas.Post])
def admin_unpublish_post(
    post_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Post]:
    post = post_service.unpublish_post(db, post_id)
    if post is None:
        raise _not_found()
    return schemas.Envelope(data=post_service.to_detail(db, post), message="Post moved to draft")
