"""Newsletter endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import EmailStr
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Principal, require_admin
from ..deps import get_db
from ..pagination import PageParams, page_params
from ..services import subscribers as subscriber_service
from ..settings import Settings, get_settings

router = APIRouter(prefix="/subscribers", tags=["Newsletter"])
admin_router = APIRouter(prefix="/admin/subscribers", tags=["Admin: Subscribers"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscriber not found")


@router.post("", response_model=schemas.Envelope[None])
def subscribe(
    payload: schemas.SubscribeRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> schemas.Envelope[None]:
    """
    Subscribe to the newsletter (double opt-in).

    New and returning subscribers get a confirmation email; active ones are
    told they are already subscribed.
    """
    message = subscriber_service.subscribe(db, settings, payload)
    return schemas.Envelope(message=message)


@router.get("/confirm/{token}", response_model=schemas.Envelope[None])
def confirm_subscription(
    token: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> schemas.Envelope[None]:
    subscriber = subscriber_service.confirm(db, settings, token)
    if subscriber is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid or expired confirmation link",
        )
    return schemas.Envelope(message=subscriber_service.MSG_CONFIRMED)


@router.post("/unsubscribe", response_model=schemas.Envelope[None])
def unsubscribe(
    payload: schemas.UnsubscribeRequest,
    db: Session = Depends(get_db),
) -> schemas.Envelope[None]:
    subscriber_service.unsubscribe(db, payload.email)
    return schemas.Envelope(message=subscriber_service.MSG_UNSUBSCRIBED)


@router.get("/unsubscribe", response_model=schemas.Envelope[None])
def unsubscribe_from_link(
    email: EmailStr = Query(...),
    db: Session = Depends(get_db),
) -> schemas.Envelope[None]:
    """Target of the unsubscribe link in newsletter emails."""
    subscriber_service.unsubscribe(db, email)
    return schemas.Envelope(message=subscriber_service.MSG_UNSUBSCRIBED)


@admin_router.get("", response_model=schemas.Envelope[list[schemas.Subscriber]])
def admin_list_subscribers(
    params: PageParams = Depends(page_params),
    status_filter: schemas.SubscriberStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=200),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[list[schemas.Subscriber]]:
    page = subscriber_service.list_subscribers(
        db, page=params.page, limit=params.limit, status=status_filter, search=search
    )
    return page.to_envelope(schemas.Subscriber)


@admin_router.get("/{subscriber_id}", response_model=schemas.Envelope[schemas.SubscriberDetail])
def admin_get_subscriber(
    subscriber_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[schemas.SubscriberDetail]:
    subscriber = subscriber_service.get_subscriber(db, subscriber_id)
    if subscriber is None:
        raise _not_found()
    return schemas.Envelope(data=schemas.SubscriberDetail.model_validate(subscriber))


@admin_router.put("/{subscriber_id}", response_model=schemas.Envelope[schemas.SubscriberDetail])
def admin_update_subscriber(
    subscriber_id: UUID,
    payload: schemas.SubscriberUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[schemas.SubscriberDetail]:
    subscriber = subscriber_service.update_subscriber(db, subscriber_id, payload)
    if subscriber is None:
        raise _not_found()
    return schemas.Envelope(
        data=schemas.SubscriberDetail.model_validate(subscriber), message="Subscriber updated"
    )


@admin_router.delete("/{subscriber_id}", response_model=schemas.Envelope[None])
def admin_delete_subscriber(
    subscriber_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[None]:
    if not subscriber_service.delete_subscriber(db, subscriber_id):
        raise _not_found()
    return schemas.Envelope(message="Subscriber deleted")
