"""Authentication endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import INVALID_CREDENTIALS, InvalidCredentials, Principal, get_current_principal, login
from ..deps import get_db
from ..services import users as user_service
from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=schemas.Envelope[schemas.LoginResponse])
def login_with_password(
    payload: schemas.LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> schemas.Envelope[schemas.LoginResponse]:
    """
    Exchange email + password for a bearer token.

    Unknown email and wrong password produce the same 401 response.
    """
    try:
        token, expires_at, user = login(db, settings, payload.email, payload.password)
    except InvalidCredentials:
        logger.warning("Failed login attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    return schemas.Envelope(
        data=schemas.LoginResponse(
            token=token,
            expires_at=expires_at,
            user=schemas.UserPublic.model_validate(user),
        ),
        message="Login successful",
    )


@router.post(
    "/register",
    response_model=schemas.Envelope[schemas.UserPublic],
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: schemas.RegisterRequest,
    db: Session = Depends(get_db),
) -> schemas.Envelope[schemas.UserPublic]:
    """
    Create an account in the pending role.

    An admin has to promote it before any dashboard route accepts its token.
    """
    user = user_service.register_user(db, payload)
    return schemas.Envelope(
        data=schemas.UserPublic.model_validate(user),
        message="Registration received. An administrator will review your account.",
    )


@router.get("/me", response_model=schemas.Envelope[schemas.UserPublic])
def get_me(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> schemas.Envelope[schemas.UserPublic]:
    user = user_service.get_user(db, principal.id)
    if user is None:
        # Token outlived the account
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User no longer exists")
    return schemas.Envelope(data=schemas.UserPublic.model_validate(user))
