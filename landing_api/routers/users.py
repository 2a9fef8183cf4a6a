"""Dashboard user management (admin only)."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import Principal, require_admin
from ..deps import get_db
from ..pagination import PageParams, page_params
from ..services import users as user_service
from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["Admin: Users"])


def _get_user_or_404(db: Session, user_id: UUID) -> models.User:
    user = user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _is_root_admin(user: models.User, settings: Settings) -> bool:
    return user.email.lower() == settings.root_admin_email


@router.get("", response_model=schemas.Envelope[list[schemas.UserPublic]])
def list_users(
    params: PageParams = Depends(page_params),
    role: schemas.UserRole | None = None,
    search: str | None = Query(None, max_length=200),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[list[schemas.UserPublic]]:
    page = user_service.list_users(
        db, page=params.page, limit=params.limit, role=role, search=search
    )
    return page.to_envelope(schemas.UserPublic)


@router.get("/{user_id}", response_model=schemas.Envelope[schemas.UserPublic])
def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[schemas.UserPublic]:
    user = _get_user_or_404(db, user_id)
    return schemas.Envelope(data=schemas.UserPublic.model_validate(user))


@router.post(
    "",
    response_model=schemas.Envelope[schemas.UserPublic],
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[schemas.UserPublic]:
    user = user_service.create_user(db, payload)
    return schemas.Envelope(data=schemas.UserPublic.model_validate(user), message="User created")


@router.put("/{user_id}", response_model=schemas.Envelope[schemas.UserPublic])
def update_user(
    user_id: UUID,
    payload: schemas.UserUpdate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_admin),
) -> schemas.Envelope[schemas.UserPublic]:
    """
    Update a user. The root admin can never be demoted or moved to another email.
    """
    user = _get_user_or_404(db, user_id)

    if _is_root_admin(user, settings) and payload.role is not None and payload.role != "admin":
        logger.warning(f"Admin {principal.id} tried to demote the root admin")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot demote Root Admin")
    if (
        _is_root_admin(user, settings)
        and payload.email is not None
        and payload.email.strip().lower() != settings.root_admin_email
    ):
        logger.warning(f"Admin {principal.id} tried to change the root admin email")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Cannot change Root Admin email"
        )

    user = user_service.update_user(db, user, payload)
    return schemas.Envelope(data=schemas.UserPublic.model_validate(user), message="User updated")


@router.delete("/{user_id}", response_model=schemas.Envelope[None])
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(require_admin),
) -> schemas.Envelope[None]:
    """
    Delete a user. Their posts are kept with no author.

    The root admin and the caller's own account cannot be deleted.
    """
    user = _get_user_or_404(db, user_id)

    if _is_root_admin(user, settings):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot delete Root Admin")
    if user.id == principal.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    user_service.delete_user(db, user)
    return schemas.Envelope(message="User deleted")
