from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import models
from .services.passwords import verify_password
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Security scheme for Bearer token
oauth2_scheme = HTTPBearer(auto_error=False)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True)
class Principal:
    """The authenticated identity attached to a request."""

    id: uuid.UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class InvalidCredentials(Exception):
    """Login failed. Deliberately carries no detail about which check failed."""


def create_access_token(user: models.User, settings: Settings) -> tuple[str, datetime]:
    """
    Create a signed JWT for a user.

    Returns the token and its expiry.
    """
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(days=settings.jwt_expire_days)
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "name": user.name,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_access_token(token: str, settings: Settings) -> Principal:
    """
    Verify signature and expiry and reduce the claims to a Principal.

    Raises jwt.InvalidTokenError (ExpiredSignatureError included) on any problem.
    """
    payload = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    role = payload.get("role")
    if not isinstance(role, str):
        raise jwt.InvalidTokenError("Token is missing a role claim")
    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError as e:
        raise jwt.InvalidTokenError("Token subject is not a user id") from e
    return Principal(id=user_id, role=role)


def authenticate_user(db: Session, email: str, password: str) -> models.User:
    """
    Check an email/password pair.

    Unknown email, password-less account and wrong password all raise the same
    InvalidCredentials so callers cannot tell them apart.
    """
    user = db.query(models.User).filter(models.User.email == email.lower().strip()).first()
    if user is None or not user.password_hash:
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user


def login(db: Session, settings: Settings, email: str, password: str) -> tuple[str, datetime, models.User]:
    user = authenticate_user(db, email, password)
    token, expires_at = create_access_token(user, settings)
    logger.info(f"User {user.id} logged in")
    return token, expires_at, user


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> Principal:
    """
    Get the principal from the Bearer token.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_access_token(credentials.credentials, settings)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_principal_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> Principal | None:
    """
    Get the principal if a valid token was sent, None otherwise.

    Used for public endpoints that show more to signed-in staff.
    """
    if credentials is None:
        return None

    try:
        return await get_current_principal(credentials, settings)
    except HTTPException:
        return None


def require_role(*roles: str) -> Callable[..., Principal]:
    """
    Build a dependency that only lets the given roles through (403 otherwise).
    """
    allowed = set(roles)

    def _require(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Forbidden: {' or '.join(sorted(allowed))} role required",
            )
        return principal

    return _require


require_admin = require_role("admin")
require_staff = require_role("admin", "author")
