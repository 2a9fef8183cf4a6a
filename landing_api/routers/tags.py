"""Tag endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Principal, require_staff
from ..deps import get_db
from ..services import taxonomy

router = APIRouter(prefix="/tags", tags=["Tags"])
admin_router = APIRouter(prefix="/admin/tags", tags=["Admin: Tags"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")


@router.get("", response_model=schemas.Envelope[list[schemas.Tag]])
def list_tags(db: Session = Depends(get_db)) -> schemas.Envelope[list[schemas.Tag]]:
    """All tags ordered by name, each with its post count."""
    return schemas.Envelope(data=taxonomy.list_tags(db))


@router.get("/{id_or_slug}", response_model=schemas.Envelope[schemas.Tag])
def get_tag(
    id_or_slug: str,
    db: Session = Depends(get_db),
) -> schemas.Envelope[schemas.Tag]:
    tag = taxonomy.get_tag(db, id_or_slug)
    if tag is None:
        raise _not_found()
    return schemas.Envelope(data=taxonomy.tag_detail(db, tag))


@admin_router.get("", response_model=schemas.Envelope[list[schemas.Tag]])
def admin_list_tags(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[list[schemas.Tag]]:
    return schemas.Envelope(data=taxonomy.list_tags(db))


@admin_router.get("/{tag_id}", response_model=schemas.Envelope[schemas.Tag])
def admin_get_tag(
    tag_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Tag]:
    tag = taxonomy.get_tag(db, str(tag_id))
    if tag is None:
        raise _not_found()
    return schemas.Envelope(data=taxonomy.tag_detail(db, tag))


@admin_router.post(
    "",
    response_model=schemas.Envelope[schemas.Tag],
    status_code=status.HTTP_201_CREATED,
)
def admin_create_tag(
    payload: schemas.TagCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Tag]:
    tag = taxonomy.create_tag(db, payload)
    return schemas.Envelope(data=taxonomy.tag_detail(db, tag), message="Tag created")


@admin_router.put("/{tag_id}", response_model=schemas.Envelope[schemas.Tag])
def admin_update_tag(
    tag_id: UUID,
    payload: schemas.TagUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Tag]:
    tag = taxonomy.update_tag(db, tag_id, payload)
    if tag is None:
        raise _not_found()
    return schemas.Envelope(data=taxonomy.tag_detail(db, tag), message="Tag updated")


@admin_router.delete("/{tag_id}", response_model=schemas.Envelope[None])
def admin_delete_tag(
    tag_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[None]:
    """Delete a tag and its post links."""
    if not taxonomy.delete_tag(db, tag_id):
        raise _not_found()
    return schemas.Envelope(message="Tag deleted")
