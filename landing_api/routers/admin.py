"""Admin dashboard overview."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Principal, require_admin
from ..deps import get_db
from ..services.stats import get_dashboard_stats

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=schemas.Envelope[schemas.DashboardStats])
def get_stats(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> schemas.Envelope[schemas.DashboardStats]:
    return schemas.Envelope(data=get_dashboard_stats(db))
