"""Category endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Principal, require_staff
from ..deps import get_db
from ..services import taxonomy

router = APIRouter(prefix="/categories", tags=["Categories"])
admin_router = APIRouter(prefix="/admin/categories", tags=["Admin: Categories"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")


@router.get("", response_model=schemas.Envelope[list[schemas.Category]])
def list_categories(db: Session = Depends(get_db)) -> schemas.Envelope[list[schemas.Category]]:
    """All categories ordered by sort_order, each with its post count."""
    return schemas.Envelope(data=taxonomy.list_categories(db))


@router.get("/{id_or_slug}", response_model=schemas.Envelope[schemas.Category])
def get_category(
    id_or_slug: str,
    db: Session = Depends(get_db),
) -> schemas.Envelope[schemas.Category]:
    category = taxonomy.get_category(db, id_or_slug)
    if category is None:
        raise _not_found()
    return schemas.Envelope(data=taxonomy.category_detail(db, category))


@admin_router.get("", response_model=schemas.Envelope[list[schemas.Category]])
def admin_list_categories(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[list[schemas.Category]]:
    return schemas.Envelope(data=taxonomy.list_categories(db))


@admin_router.get("/{category_id}", response_model=schemas.Envelope[schemas.Category])
def admin_get_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Category]:
    category = taxonomy.get_category(db, str(category_id))
    if category is None:
        raise _not_found()
    return schemas.Envelope(data=taxonomy.category_detail(db, category))


@admin_router.post(
    "",
    response_model=schemas.Envelope[schemas.Category],
    status_code=status.HTTP_201_CREATED,
)
def admin_create_category(
    payload: schemas.CategoryCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Category]:
    category = taxonomy.create_category(db, payload)
    return schemas.Envelope(data=taxonomy.category_detail(db, category), message="Category created")


@admin_router.put("/{category_id}", response_model=schemas.Envelope[schemas.Category])
def admin_update_category(
    category_id: UUID,
    payload: schemas.CategoryUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.Category]:
    category = taxonomy.update_category(db, category_id, payload)
    if category is None:
        raise _not_found()
    return schemas.Envelope(data=taxonomy.category_detail(db, category), message="Category updated")


@admin_router.delete("/{category_id}", response_model=schemas.Envelope[None])
def admin_delete_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[None]:
    """Delete a category. Posts stay; only their links to it are removed."""
    if not taxonomy.delete_category(db, category_id):
        raise _not_found()
    return schemas.Envelope(message="Category deleted")
