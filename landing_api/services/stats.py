"""Dashboard counters for the admin overview."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .. import models, schemas


def _count(db: Session, model, *criteria) -> int:
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return db.execute(stmt).scalar_one()


def get_dashboard_stats(db: Session) -> schemas.DashboardStats:
    return schemas.DashboardStats(
        posts=schemas.PostStats(
            total=_count(db, models.Post),
            published=_count(db, models.Post, models.Post.status == "published"),
            draft=_count(db, models.Post, models.Post.status == "draft"),
        ),
        views=schemas.TotalStats(total=_count(db, models.PostView)),
        subscribers=schemas.SubscriberStats(
            total=_count(db, models.Subscriber),
            active=_count(db, models.Subscriber, models.Subscriber.status == "active"),
        ),
        contacts=schemas.ContactStats(
            total=_count(db, models.ContactSubmission),
            new=_count(db, models.ContactSubmission, models.ContactSubmission.status == "new"),
        ),
        users=schemas.TotalStats(total=_count(db, models.User)),
    )
