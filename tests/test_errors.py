"""Test the catch-all error handler."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from landing_api import main
from landing_api.settings import get_settings


@pytest.fixture()
def unsafe_client():
    """Client that returns 500 responses instead of re-raising."""
    with TestClient(main.app, raise_server_exceptions=False) as test_client:
        yield test_client


def _failing_list(*args, **kwargs):
    raise RuntimeError("database exploded")


def test_unhandled_error_shows_detail_outside_production(unsafe_client):
    with patch("landing_api.services.posts.list_posts", side_effect=_failing_list):
        response = unsafe_client.get("/posts")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "database exploded"}


def test_unhandled_error_is_generic_in_production(unsafe_client):
    production = replace(get_settings(), environment="production")
    with patch.object(main, "settings", production), patch(
        "landing_api.services.posts.list_posts", side_effect=_failing_list
    ):
        response = unsafe_client.get("/posts")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
