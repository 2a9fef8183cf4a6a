from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# USERS
# ============================================================================


class User(Base):
    """Dashboard account (admin, author, or awaiting approval)."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # NULL = cannot log in with a password
    role = Column(String(20), nullable=False, default="pending", index=True)  # pending, author, admin
    email_verified = Column(Boolean, nullable=False, default=False)
    image = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    posts = relationship("Post", back_populates="author", passive_deletes=True)


# ============================================================================
# BLOG CONTENT
# ============================================================================


class Category(Base):
    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=True, default="#8B5CF6")
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )


class Post(Base):
    """Markdown blog post."""

    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Content
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    cover_image = Column(String(500), nullable=True)

    # Publishing
    status = Column(String(20), nullable=False, default="draft", index=True)  # draft, published, archived
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    read_time_minutes = Column(Integer, nullable=True, default=5)

    # SEO
    seo_title = Column(String(70), nullable=True)
    seo_description = Column(String(160), nullable=True)
    seo_image = Column(String(500), nullable=True)

    # Timestamps
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    # Relationships
    author = relationship("User", back_populates="posts")
    category_links = relationship(
        "PostCategory", back_populates="post", cascade="all, delete-orphan", passive_deletes=True
    )
    tag_links = relationship(
        "PostTag", back_populates="post", cascade="all, delete-orphan", passive_deletes=True
    )
    # Read-only views over the join rows; writes go through *_links
    categories = relationship(
        "Category", secondary="post_categories", viewonly=True, order_by="Category.name"
    )
    tags = relationship("Tag", secondary="post_tags", viewonly=True, order_by="Tag.name")

    __table_args__ = (
        Index("ix_posts_status_created", status, created_at.desc()),
        Index("ix_posts_status_published", status, published_at.desc()),
    )


class PostCategory(Base):
    """Join row: post <-> category."""

    __tablename__ = "post_categories"

    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    category_id = Column(
        Uuid, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    post = relationship("Post", back_populates="category_links")
    category = relationship("Category")


class PostTag(Base):
    """Join row: post <-> tag."""

    __tablename__ = "post_tags"

    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True)

    post = relationship("Post", back_populates="tag_links")
    tag = relationship("Tag")


class PostView(Base):
    """Append-only page view record."""

    __tablename__ = "post_views"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    ip_hash = Column(String(64), nullable=True)  # SHA256 of IP + day
    user_agent = Column(Text, nullable=True)
    referrer = Column(Text, nullable=True)
    viewed_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )


# ============================================================================
# PORTFOLIO
# ============================================================================


class PortfolioItem(Base):
    """Case study shown in the portfolio section."""

    __tablename__ = "portfolio_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    summary = Column(Text, nullable=True)
    content = Column(Text, nullable=True)  # Markdown
    client = Column(String(255), nullable=True)
    category = Column(String(100), nullable=True)  # Free text, e.g. "Web", "Mobile"
    tags = Column(JSON, nullable=False, default=list)
    cover_image = Column(String(500), nullable=True)
    gallery = Column(JSON, nullable=False, default=list)  # Image URLs
    live_url = Column(String(500), nullable=True)
    repo_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="draft", index=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


# ============================================================================
# ENGAGEMENT
# ============================================================================


class ContactSubmission(Base):
    __tablename__ = "contact_submissions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="new", index=True)  # new, read, replied, archived
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    extra = Column("metadata", JSON, nullable=True)
    replied_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )


class Subscriber(Base):
    """Newsletter subscriber (double opt-in)."""

    __tablename__ = "subscribers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, active, unsubscribed
    source = Column(String(50), nullable=True, default="blog")
    confirm_token = Column(String(64), nullable=True, unique=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    unsubscribed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )

    preferences = relationship(
        "SubscriberPreference", cascade="all, delete-orphan", passive_deletes=True
    )


class SubscriberPreference(Base):
    __tablename__ = "subscriber_preferences"

    subscriber_id = Column(
        Uuid, ForeignKey("subscribers.id", ondelete="CASCADE"), primary_key=True
    )
    preference_key = Column(String(50), primary_key=True)
    enabled = Column(Boolean, nullable=False, default=True)
