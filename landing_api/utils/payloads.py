"""Helpers for turning validated request models into column values."""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import AnyUrl, BaseModel


def _plain(value: Any) -> Any:
    if isinstance(value, AnyUrl):
        return str(value)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def column_values(
    payload: BaseModel,
    exclude: Iterable[str] = (),
    partial: bool = False,
    nullable: Iterable[str] = (),
) -> dict[str, Any]:
    """
    Dump a request model to a dict of column values.

    With partial=True only the fields the client actually sent are returned,
    so an empty PATCH body yields an empty dict. An explicit null is kept only
    for columns listed in `nullable`; for the rest it means "leave unchanged".
    """
    raw = payload.model_dump(exclude_unset=partial, exclude=set(exclude))
    values = {key: _plain(value) for key, value in raw.items()}
    if partial:
        keep_null = set(nullable)
        values = {
            key: value
            for key, value in values.items()
            if value is not None or key in keep_null
        }
    return values
