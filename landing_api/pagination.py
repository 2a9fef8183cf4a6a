from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from . import schemas

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Keeps OFFSET inside the database integer range
MAX_PAGE = 10_000


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int


def page_params(
    page: int = Query(1, ge=1, le=MAX_PAGE, description="1-based page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


@dataclass
class Page(Generic[T]):
    """One page of rows plus the total number of matching rows."""

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_schema(self) -> schemas.Pagination:
        return schemas.Pagination(
            page=self.page,
            limit=self.limit,
            total=self.total,
            total_pages=self.total_pages,
        )

    def to_envelope(self, item_schema: type[BaseModel]) -> schemas.Envelope[Any]:
        return schemas.Envelope(
            data=[item_schema.model_validate(item) for item in self.items],
            pagination=self.to_schema(),
        )


def paginate(
    db: Session,
    stmt: Select,
    page: int,
    limit: int,
    options: Sequence = (),
) -> Page:
    """
    Run a count query and an offset/limit query for the same statement.

    The statement must already carry its WHERE and ORDER BY clauses; loader
    `options` are applied to the row query only. A page past the end yields an
    empty item list while `total` still reports every matching row.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = db.execute(count_stmt).scalar_one()

    offset = (page - 1) * limit
    rows = db.execute(stmt.options(*options).limit(limit).offset(offset))
    items = list(rows.scalars().all())

    return Page(items=items, total=total, page=page, limit=limit)
