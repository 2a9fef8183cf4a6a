"""Test portfolio endpoints."""

from __future__ import annotations

from typing import Any


def _create_item(client, headers, **overrides: Any) -> dict:
    payload = {
        "title": "Coffee Shop Website",
        "slug": "coffee-shop-website",
        "summary": "Online ordering for a local roastery",
        "client": "Kopi Kita",
        "category": "Web",
        "tags": ["nextjs", "stripe"],
    }
    payload.update(overrides)
    response = client.post("/admin/portfolio", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_public_list_shows_published_featured_first(client, author_headers):
    _create_item(client, author_headers, slug="draft-item", title="Draft item")
    _create_item(client, author_headers, slug="older-item", title="Older item", status="published")
    _create_item(
        client,
        author_headers,
        slug="featured-item",
        title="Featured item",
        status="published",
        is_featured=True,
    )
    _create_item(client, author_headers, slug="newer-item", title="Newer item", status="published")

    body = client.get("/portfolio").json()
    assert body["success"] is True
    assert body.get("pagination") is None
    assert [i["slug"] for i in body["data"]] == ["featured-item", "newer-item", "older-item"]


def test_public_get_hides_drafts(client, author_headers):
    _create_item(client, author_headers)

    response = client.get("/portfolio/coffee-shop-website")
    assert response.status_code == 404
    assert response.json()["message"] == "Portfolio item not found"

    _create_item(client, author_headers, slug="live-site", status="published")
    item = client.get("/portfolio/live-site").json()["data"]
    assert item["tags"] == ["nextjs", "stripe"]
    assert item["client"] == "Kopi Kita"


def test_urls_are_validated_and_stored_as_text(client, author_headers):
    item = _create_item(
        client,
        author_headers,
        cover_image="https://cdn.tmng.test/cover.png",
        gallery=["https://cdn.tmng.test/1.png", "https://cdn.tmng.test/2.png"],
        live_url="",
    )
    assert item["cover_image"] == "https://cdn.tmng.test/cover.png"
    assert item["gallery"] == ["https://cdn.tmng.test/1.png", "https://cdn.tmng.test/2.png"]
    assert item["live_url"] is None

    response = client.post(
        "/admin/portfolio",
        json={"title": "Broken", "slug": "broken", "gallery": ["not a url"]},
        headers=author_headers,
    )
    assert response.status_code == 400
    assert any(key.startswith("gallery") for key in response.json()["errors"])


def test_admin_requires_staff(client, pending_headers):
    assert client.get("/admin/portfolio").status_code == 401
    assert client.get("/admin/portfolio", headers=pending_headers).status_code == 403


def test_admin_list_is_paginated(client, admin_headers):
    for n in range(3):
        _create_item(client, admin_headers, slug=f"item-{n}", title=f"Item {n}")

    body = client.get("/admin/portfolio", params={"limit": 2}, headers=admin_headers).json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}

    drafts = client.get(
        "/admin/portfolio", params={"status": "published"}, headers=admin_headers
    ).json()
    assert drafts["data"] == []


def test_slug_conflict(client, author_headers):
    _create_item(client, author_headers)
    response = client.post(
        "/admin/portfolio",
        json={"title": "Another one", "slug": "coffee-shop-website"},
        headers=author_headers,
    )
    assert response.status_code == 409
    assert response.json()["errors"] == {"slug": ["Slug already exists"]}


def test_update_and_delete(client, author_headers):
    item = _create_item(client, author_headers)

    response = client.put(
        f"/admin/portfolio/{item['id']}",
        json={"status": "published", "client": None, "tags": ["django"]},
        headers=author_headers,
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["status"] == "published"
    assert updated["client"] is None
    assert updated["tags"] == ["django"]
    assert updated["title"] == "Coffee Shop Website"

    fetched = client.get(f"/admin/portfolio/{item['id']}", headers=author_headers)
    assert fetched.json()["data"]["tags"] == ["django"]

    assert client.delete(f"/admin/portfolio/{item['id']}", headers=author_headers).status_code == 200
    assert client.get(f"/admin/portfolio/{item['id']}", headers=author_headers).status_code == 404
