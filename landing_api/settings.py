"""Centralized environment-driven settings.

Keep this module lightweight: no app imports, to avoid circular deps. A .env
file in the working directory is loaded on import.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()

MIN_JWT_SECRET_LENGTH = 32


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _list_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_database_url() -> str:
    """Get the database URL, either explicit or built from DB_* components."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    db_user = os.getenv("DB_USER")
    db_pass = os.getenv("DB_PASSWORD")
    db_name = os.getenv("DB_DATABASE")
    db_host = os.getenv("DB_HOST", "db")
    db_port = os.getenv("DB_PORT", "5432")

    if db_user and db_pass and db_name:
        # URL-encode the password in case it contains special characters
        encoded_pass = quote_plus(db_pass)
        return f"postgresql+psycopg://{db_user}:{encoded_pass}@{db_host}:{db_port}/{db_name}"

    raise RuntimeError(
        "DATABASE_URL must be set, or DB_USER, DB_PASSWORD, and DB_DATABASE must all be set."
    )


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7
    environment: str = "development"
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:4321"])
    site_url: str = "http://localhost:4321"
    resend_api_key: str | None = None
    mail_from: str = "noreply@tmng.my.id"
    mail_to: str = "hello@tmng.my.id"
    root_admin_email: str = "admin@tmng.my.id"
    root_admin_password: str | None = None
    auto_migrate: bool = True
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    """Build settings from the process environment."""
    jwt_secret_key = os.getenv("JWT_SECRET_KEY")
    if not jwt_secret_key:
        raise RuntimeError(
            "JWT_SECRET_KEY environment variable is required but not set. "
            "Generate a secure key with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )
    if len(jwt_secret_key) < MIN_JWT_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET_KEY is too short. Must be at least {MIN_JWT_SECRET_LENGTH} characters long."
        )

    return Settings(
        database_url=get_database_url(),
        jwt_secret_key=jwt_secret_key,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expire_days=_int_env("JWT_EXPIRE_DAYS", 7),
        environment=os.getenv("ENVIRONMENT", "development"),
        cors_origins=_list_env("CORS_ORIGINS", "http://localhost:4321"),
        site_url=os.getenv("SITE_URL", "http://localhost:4321").rstrip("/"),
        resend_api_key=os.getenv("RESEND_API_KEY") or None,
        mail_from=os.getenv("MAIL_FROM", "noreply@tmng.my.id"),
        mail_to=os.getenv("MAIL_TO", "hello@tmng.my.id"),
        root_admin_email=os.getenv("ROOT_ADMIN_EMAIL", "admin@tmng.my.id").lower(),
        root_admin_password=os.getenv("ROOT_ADMIN_PASSWORD") or None,
        auto_migrate=_bool_env("AUTO_MIGRATE", True),
        log_level=get_log_level(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
