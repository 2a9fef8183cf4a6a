from __future__ import annotations

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .settings import get_database_url, get_log_level


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


def _build_engine(url: str, echo: bool) -> Engine:
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

        # SQLite only honours ON DELETE CASCADE with foreign keys switched on
        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    return create_engine(url, echo=echo, pool_pre_ping=True)


# Migrations import this module too, so only the database URL is required here
engine = _build_engine(get_database_url(), echo=get_log_level() == "DEBUG")

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def get_session() -> Generator[Session, None, None]:
    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
