"""Persistence error translation shared by the service layer."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class ConflictError(Exception):
    """A unique constraint (slug, email, name) rejected the write."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        self.message = message or f"{field.replace('_', ' ').capitalize()} already exists"
        super().__init__(self.message)


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


def violated_column(exc: IntegrityError) -> str | None:
    """Best-effort name of the column behind a unique violation."""
    text = str(exc.orig)
    diag = getattr(exc.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        text = constraint
    for column in ("slug", "email", "name", "confirm_token"):
        if column in text:
            return column
    return None


def commit_or_conflict(db: Session, default_field: str) -> None:
    """
    Commit the session, translating unique violations into ConflictError.

    The session is rolled back on any IntegrityError so it stays usable.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            field = violated_column(e) or default_field
            logger.info(f"Unique constraint rejected write on '{field}'")
            raise ConflictError(field) from e
        raise


class InvalidReferenceError(Exception):
    """A payload pointed at rows that do not exist (e.g. unknown category ids)."""

    def __init__(self, field: str, missing: list):
        self.field = field
        self.missing = missing
        self.message = f"Unknown {field.replace('_ids', '').replace('_', ' ')} id(s): " + ", ".join(
            str(m) for m in missing
        )
        super().__init__(self.message)
