"""Test category and tag endpoints."""

from __future__ import annotations


def _post(client, headers, slug, **extra):
    payload = {"title": slug.title(), "slug": slug, "content": "body", "status": "published"}
    payload.update(extra)
    response = client.post("/admin/posts", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_category_crud(client, author_headers):
    created = client.post(
        "/admin/categories",
        headers=author_headers,
        json={"name": "Engineering", "slug": "engineering", "description": "Code", "sort_order": 2},
    )
    assert created.status_code == 201
    category = created.json()["data"]
    assert category["color"] == "#8B5CF6"
    assert category["post_count"] == 0

    updated = client.put(
        f"/admin/categories/{category['id']}",
        headers=author_headers,
        json={"color": "#112233"},
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["color"] == "#112233"
    assert updated.json()["data"]["name"] == "Engineering"

    deleted = client.delete(f"/admin/categories/{category['id']}", headers=author_headers)
    assert deleted.status_code == 200
    assert client.get(f"/categories/{category['id']}").status_code == 404


def test_category_list_is_ordered_and_counts_posts(client, author_headers):
    second = client.post(
        "/admin/categories", headers=author_headers, json={"name": "Zeta", "slug": "zeta", "sort_order": 1}
    ).json()["data"]
    first = client.post(
        "/admin/categories", headers=author_headers, json={"name": "Alpha", "slug": "alpha", "sort_order": 1}
    ).json()["data"]
    top = client.post(
        "/admin/categories", headers=author_headers, json={"name": "Top", "slug": "top", "sort_order": 0}
    ).json()["data"]

    _post(client, author_headers, "one", category_ids=[first["id"]])
    _post(client, author_headers, "two", category_ids=[first["id"], second["id"]])

    data = client.get("/categories").json()["data"]
    assert [c["slug"] for c in data] == ["top", "alpha", "zeta"]
    counts = {c["slug"]: c["post_count"] for c in data}
    assert counts == {"top": 0, "alpha": 2, "zeta": 1}
    assert top["post_count"] == 0


def test_category_lookup_by_id_or_slug(client, author_headers):
    category = client.post(
        "/admin/categories", headers=author_headers, json={"name": "Design", "slug": "design"}
    ).json()["data"]

    by_id = client.get(f"/categories/{category['id']}")
    by_slug = client.get("/categories/design")
    assert by_id.status_code == by_slug.status_code == 200
    assert by_id.json()["data"]["id"] == by_slug.json()["data"]["id"]
    assert client.get("/categories/missing").status_code == 404


def test_duplicate_category_name_conflicts(client, author_headers):
    client.post("/admin/categories", headers=author_headers, json={"name": "Dup", "slug": "dup-1"})
    response = client.post(
        "/admin/categories", headers=author_headers, json={"name": "Dup", "slug": "dup-2"}
    )
    assert response.status_code == 409
    assert "name" in response.json()["errors"]


def test_invalid_color_is_rejected(client, author_headers):
    response = client.post(
        "/admin/categories",
        headers=author_headers,
        json={"name": "Bad", "slug": "bad", "color": "purple"},
    )
    assert response.status_code == 400
    assert "color" in response.json()["errors"]


def test_deleting_category_keeps_posts(client, author_headers):
    category = client.post(
        "/admin/categories", headers=author_headers, json={"name": "Temp", "slug": "temp"}
    ).json()["data"]
    _post(client, author_headers, "kept", category_ids=[category["id"]])

    client.delete(f"/admin/categories/{category['id']}", headers=author_headers)

    post = client.get("/posts/kept").json()["data"]
    assert post["categories"] == []


def test_category_admin_routes_need_staff(client, pending_headers):
    assert client.get("/admin/categories").status_code == 401
    assert client.get("/admin/categories", headers=pending_headers).status_code == 403


def test_tag_crud_and_counts(client, author_headers):
    created = client.post(
        "/admin/tags", headers=author_headers, json={"name": "Python", "slug": "python"}
    )
    assert created.status_code == 201
    tag = created.json()["data"]

    _post(client, author_headers, "tagged", tag_ids=[tag["id"]])

    listed = client.get("/tags").json()["data"]
    assert [(t["slug"], t["post_count"]) for t in listed] == [("python", 1)]

    detail = client.get("/tags/python").json()["data"]
    assert detail["post_count"] == 1

    renamed = client.put(
        f"/admin/tags/{tag['id']}", headers=author_headers, json={"name": "Python 3"}
    )
    assert renamed.json()["data"]["name"] == "Python 3"
    assert renamed.json()["data"]["slug"] == "python"

    assert client.delete(f"/admin/tags/{tag['id']}", headers=author_headers).status_code == 200
    assert client.delete(f"/admin/tags/{tag['id']}", headers=author_headers).status_code == 404


def test_duplicate_tag_slug_conflicts(client, author_headers):
    client.post("/admin/tags", headers=author_headers, json={"name": "One", "slug": "same"})
    response = client.post("/admin/tags", headers=author_headers, json={"name": "Two", "slug": "same"})
    assert response.status_code == 409
    assert response.json()["errors"] == {"slug": ["Slug already exists"]}
