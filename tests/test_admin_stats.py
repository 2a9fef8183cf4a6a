from __future__ import annotations

from sqlalchemy.orm import Session

from landing_api.models import ContactSubmission, Post, PostView, Subscriber


def test_stats_require_admin(client, author_headers):
    assert client.get("/admin/stats").status_code == 401
    assert client.get("/admin/stats", headers=author_headers).status_code == 403


def test_stats_on_empty_site(client, admin_headers):
    body = client.get("/admin/stats", headers=admin_headers).json()
    assert body["success"] is True
    assert body["data"] == {
        "posts": {"total": 0, "published": 0, "draft": 0},
        "views": {"total": 0},
        "subscribers": {"total": 0, "active": 0},
        "contacts": {"total": 0, "new": 0},
        "users": {"total": 1},
    }


def test_stats_count_by_status(client, admin_user, admin_headers, db: Session):
    published = Post(title="Live", slug="live", content="x", status="published", author_id=admin_user.id)
    db.add_all(
        [
            published,
            Post(title="Draft", slug="draft", content="x", status="draft", author_id=admin_user.id),
            Subscriber(email="a@example.com", status="active"),
            Subscriber(email="b@example.com", status="pending"),
            ContactSubmission(name="Ann", email="ann@example.com", subject="Hello", message="Hi there you"),
            ContactSubmission(
                name="Bob", email="bob@example.com", subject="Hello", message="Hi there you", status="read"
            ),
        ]
    )
    db.flush()
    db.add_all([PostView(post_id=published.id), PostView(post_id=published.id)])
    db.commit()

    stats = client.get("/admin/stats", headers=admin_headers).json()["data"]
    assert stats["posts"] == {"total": 2, "published": 1, "draft": 1}
    assert stats["views"] == {"total": 2}
    assert stats["subscribers"] == {"total": 2, "active": 1}
    assert stats["contacts"] == {"total": 2, "new": 1}
