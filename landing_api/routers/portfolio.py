"""Portfolio endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Principal, require_staff
from ..deps import get_db
from ..pagination import PageParams, page_params
from ..services import portfolio as portfolio_service

router = APIRouter(prefix="/portfolio", tags=["Portfolio"])
admin_router = APIRouter(prefix="/admin/portfolio", tags=["Admin: Portfolio"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Portfolio item not found")


@router.get("", response_model=schemas.Envelope[list[schemas.PortfolioItem]])
def list_portfolio(db: Session = Depends(get_db)) -> schemas.Envelope[list[schemas.PortfolioItem]]:
    """Published items, featured first."""
    items = portfolio_service.list_published(db)
    return schemas.Envelope(data=[schemas.PortfolioItem.model_validate(i) for i in items])


@router.get("/{slug}", response_model=schemas.Envelope[schemas.PortfolioItem])
def get_portfolio_item(
    slug: str,
    db: Session = Depends(get_db),
) -> schemas.Envelope[schemas.PortfolioItem]:
    item = portfolio_service.get_published_by_slug(db, slug)
    if item is None:
        raise _not_found()
    return schemas.Envelope(data=schemas.PortfolioItem.model_validate(item))


@admin_router.get("", response_model=schemas.Envelope[list[schemas.PortfolioItem]])
def admin_list_portfolio(
    params: PageParams = Depends(page_params),
    status_filter: schemas.PortfolioStatus | None = Query(None, alias="status"),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[list[schemas.PortfolioItem]]:
    page = portfolio_service.list_items(
        db, page=params.page, limit=params.limit, status=status_filter
    )
    return page.to_envelope(schemas.PortfolioItem)


@admin_router.get("/{item_id}", response_model=schemas.Envelope[schemas.PortfolioItem])
def admin_get_portfolio_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.PortfolioItem]:
    item = portfolio_service.get_item(db, item_id)
    if item is None:
        raise _not_found()
    return schemas.Envelope(data=schemas.PortfolioItem.model_validate(item))


@admin_router.post(
    "",
    response_model=schemas.Envelope[schemas.PortfolioItem],
    status_code=status.HTTP_201_CREATED,
)
def admin_create_portfolio_item(
    payload: schemas.PortfolioItemCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.PortfolioItem]:
    item = portfolio_service.create_item(db, payload)
    return schemas.Envelope(
        data=schemas.PortfolioItem.model_validate(item), message="Portfolio item created"
    )


@admin_router.put("/{item_id}", response_model=schemas.Envelope[schemas.PortfolioItem])
def admin_update_portfolio_item(
    item_id: UUID,
    payload: schemas.PortfolioItemUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[schemas.PortfolioItem]:
    item = portfolio_service.update_item(db, item_id, payload)
    if item is None:
        raise _not_found()
    return schemas.Envelope(
        data=schemas.PortfolioItem.model_validate(item), message="Portfolio item updated"
    )


@admin_router.delete("/{item_id}", response_model=schemas.Envelope[None])
def admin_delete_portfolio_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_staff),
) -> schemas.Envelope[None]:
    if not portfolio_service.delete_item(db, item_id):
        raise _not_found()
    return schemas.Envelope(message="Portfolio item deleted")
