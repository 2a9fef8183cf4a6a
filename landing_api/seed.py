from __future__ import annotations

import logging

from .db import SessionLocal
from .services.users import ensure_root_admin
from .settings import Settings

logger = logging.getLogger(__name__)


def ensure_seed_data(settings: Settings) -> None:
    """
    Create the root admin account on first start.

    Only runs when ROOT_ADMIN_PASSWORD is configured.
    """
    with SessionLocal() as db:
        user = ensure_root_admin(db, settings.root_admin_email, settings.root_admin_password)
    if user is None:
        logger.info("ensure_seed_data: No seed data to create.")
