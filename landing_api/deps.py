from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from .db import get_session


def get_db() -> Generator[Session, None, None]:
    yield from get_session()


@dataclass(frozen=True)
class RequestMeta:
    """Who is calling, as far as the headers tell."""

    ip: str
    user_agent: str | None
    referrer: str | None


def _parse_ip(value: str | None) -> str | None:
    """Return the normalised address, or None if the value is not an IP."""
    if not value:
        return None
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request, handling proxies.

    Checks CF-Connecting-IP (Cloudflare), then X-Forwarded-For,
    then falls back to direct client IP. Header values that do not parse
    as an IP address are ignored.
    """
    cf_ip = _parse_ip(request.headers.get("CF-Connecting-IP"))
    if cf_ip:
        return cf_ip

    # X-Forwarded-For can contain multiple IPs; take the first one
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first = _parse_ip(forwarded_for.split(",")[0])
        if first:
            return first

    if request.client:
        return _parse_ip(request.client.host) or "unknown"

    return "unknown"


def get_request_meta(request: Request) -> RequestMeta:
    return RequestMeta(
        ip=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        referrer=request.headers.get("Referer"),
    )
