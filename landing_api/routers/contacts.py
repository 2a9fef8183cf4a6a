"""Contact form endpoints."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Principal, require_admin
from ..deps import RequestMeta, get_db, get_request_meta
from ..pagination import PageParams, page_params
from ..services import contacts as contact_service
from ..services import email as email_service
from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contacts", tags=["Contacts"])
admin_router = APIRouter(prefix="/admin/contacts", tags=["Admin: Contacts"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact submission not found")


@router.post(
    "",
    response_model=schemas.Envelope[schemas.ContactCreated],
    status_code=status.HTTP_201_CREATED,
)
def submit_contact(
    payload: schemas.ContactCreate,
    db: Session = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
    settings: Settings = Depends(get_settings),
) -> schemas.Envelope[schemas.ContactCreated]:
    """
    Store a contact form submission and notify the site owner.

    The notification is best effort; the submission is saved either way.
    """
    contact = contact_service.create_contact(db, payload, meta)

    result = email_service.send_contact_notification_email(
        settings,
        name=payload.name,
        email=payload.email,
        subject=payload.subject,
        message=payload.message,
    )
    if result is None:
        logger.warning(f"Contact submission {contact.id} saved without email notification")

    return schemas.Envelope(
        data=schemas.ContactCreated(id=contact.id),
        message="Thank you for your message. We'll get back to you soon!",
    )


@admin_router.get("", response_model=schemas.Envelope[list[schemas.Contact]])
def admin_list_contacts(
    params: PageParams = Depends(page_params),
    status_filter: schemas.ContactStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=200),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[list[schemas.Contact]]:
    page = contact_service.list_contacts(
        db, page=params.page, limit=params.limit, status=status_filter, search=search
    )
    return page.to_envelope(schemas.Contact)


@admin_router.get("/{contact_id}", response_model=schemas.Envelope[schemas.Contact])
def admin_get_contact(
    contact_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[schemas.Contact]:
    contact = contact_service.get_contact(db, contact_id)
    if contact is None:
        raise _not_found()
    return schemas.Envelope(data=schemas.Contact.model_validate(contact))


@admin_router.put("/{contact_id}", response_model=schemas.Envelope[schemas.Contact])
def admin_update_contact(
    contact_id: UUID,
    payload: schemas.ContactUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[schemas.Contact]:
    contact = contact_service.update_contact(db, contact_id, payload)
    if contact is None:
        raise _not_found()
    return schemas.Envelope(data=schemas.Contact.model_validate(contact), message="Contact updated")


@admin_router.delete("/{contact_id}", response_model=schemas.Envelope[None])
def admin_delete_contact(
    contact_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[None]:
    """Delete a submission. Deleting one that is already gone still succeeds."""
    deleted = contact_service.delete_contact(db, contact_id)
    if deleted is None:
        return schemas.Envelope(message="Contact already deleted")
    return schemas.Envelope(message="Contact deleted")
