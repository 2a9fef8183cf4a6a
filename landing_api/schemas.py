from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Literal, TypeVar
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

PostStatus = Literal["draft", "published", "archived"]
PortfolioStatus = Literal["draft", "published"]
ContactStatus = Literal["new", "read", "replied", "archived"]
SubscriberStatus = Literal["pending", "active", "unsubscribed"]
UserRole = Literal["pending", "author", "admin"]
PostSortField = Literal["created_at", "published_at", "title", "updated_at"]
SortOrder = Literal["asc", "desc"]

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def _blank_to_none(value: Any) -> Any:
    """Empty strings from HTML forms mean "no value"."""
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


# ============================================================================
# ENVELOPE
# ============================================================================


T = TypeVar("T")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class Envelope(BaseModel, Generic[T]):
    """Uniform response body for every endpoint."""

    success: bool = True
    data: T | None = None
    message: str | None = None
    pagination: Pagination | None = None


class ErrorEnvelope(BaseModel):
    success: Literal[False] = False
    message: str
    errors: dict[str, list[str]] | None = None


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    uptime_s: float | None = None


# ============================================================================
# AUTH & USERS
# ============================================================================


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=200)


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=200)


class UserPublic(BaseModel):
    """User as shown to admins; never carries the password hash."""

    id: UUID
    name: str
    email: str
    role: UserRole
    email_verified: bool
    image: str | None = None
    bio: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    token: str
    expires_at: datetime
    user: UserPublic


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: UserRole = "pending"
    password: str | None = Field(None, min_length=6, max_length=200)
    image: str | None = Field(None, max_length=500)
    bio: str | None = Field(None, max_length=2000)


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    role: UserRole | None = None
    password: str | None = Field(None, min_length=6, max_length=200)
    email_verified: bool | None = None
    image: str | None = Field(None, max_length=500)
    bio: str | None = Field(None, max_length=2000)


# ============================================================================
# CATEGORIES & TAGS
# ============================================================================


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: str | None = None
    color: str | None = Field(None, pattern=COLOR_PATTERN)
    sort_order: int = 0


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: str | None = None
    color: str | None = Field(None, pattern=COLOR_PATTERN)
    sort_order: int | None = None


class CategorySummary(BaseModel):
    id: UUID
    name: str
    slug: str
    color: str | None = None

    model_config = ConfigDict(from_attributes=True)


class Category(CategorySummary):
    description: str | None = None
    sort_order: int
    created_at: datetime
    post_count: int = 0


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)


class TagUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)


class TagSummary(BaseModel):
    id: UUID
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class Tag(TagSummary):
    created_at: datetime
    post_count: int = 0


# ============================================================================
# POSTS
# ============================================================================


class PostAuthor(BaseModel):
    id: UUID
    name: str
    image: str | None = None
    bio: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    excerpt: str | None = None
    content: str = Field(..., min_length=1)
    cover_image: HttpUrl | None = None
    status: PostStatus = "draft"
    is_featured: bool = False
    read_time_minutes: int | None = Field(None, gt=0)
    seo_title: str | None = Field(None, max_length=70)
    seo_description: str | None = Field(None, max_length=160)
    seo_image: HttpUrl | None = None
    category_ids: list[UUID] | None = None
    tag_ids: list[UUID] | None = None

    _blank_urls = field_validator("cover_image", "seo_image", mode="before")(_blank_to_none)


class PostUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    excerpt: str | None = None
    content: str | None = Field(None, min_length=1)
    cover_image: HttpUrl | None = None
    status: PostStatus | None = None
    is_featured: bool | None = None
    read_time_minutes: int | None = Field(None, gt=0)
    seo_title: str | None = Field(None, max_length=70)
    seo_description: str | None = Field(None, max_length=160)
    seo_image: HttpUrl | None = None
    category_ids: list[UUID] | None = None
    tag_ids: list[UUID] | None = None

    _blank_urls = field_validator("cover_image", "seo_image", mode="before")(_blank_to_none)


class PostSummary(BaseModel):
    id: UUID
    author_id: UUID | None = None
    title: str
    slug: str
    excerpt: str | None = None
    cover_image: str | None = None
    status: PostStatus
    is_featured: bool
    read_time_minutes: int | None = None
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    author: PostAuthor | None = None

    model_config = ConfigDict(from_attributes=True)


class Post(PostSummary):
    content: str
    seo_title: str | None = None
    seo_description: str | None = None
    seo_image: str | None = None
    categories: list[CategorySummary] = []
    tags: list[TagSummary] = []
    view_count: int | None = None


class PostSearchResult(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    cover_image: str | None = None
    published_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# PORTFOLIO
# ============================================================================


class PortfolioItemCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    slug: str = Field(..., min_length=3, max_length=255, pattern=SLUG_PATTERN)
    summary: str | None = None
    content: str | None = None
    client: str | None = Field(None, max_length=255)
    category: str | None = Field(None, max_length=100)
    tags: list[str] = []
    cover_image: HttpUrl | None = None
    gallery: list[HttpUrl] = []
    live_url: HttpUrl | None = None
    repo_url: HttpUrl | None = None
    status: PortfolioStatus = "draft"
    is_featured: bool = False
    completed_at: datetime | None = None

    _blank_urls = field_validator("cover_image", "live_url", "repo_url", mode="before")(_blank_to_none)


class PortfolioItemUpdate(BaseModel):
    title: str | None = Field(None, min_length=3, max_length=255)
    slug: str | None = Field(None, min_length=3, max_length=255, pattern=SLUG_PATTERN)
    summary: str | None = None
    content: str | None = None
    client: str | None = Field(None, max_length=255)
    category: str | None = Field(None, max_length=100)
    tags: list[str] | None = None
    cover_image: HttpUrl | None = None
    gallery: list[HttpUrl] | None = None
    live_url: HttpUrl | None = None
    repo_url: HttpUrl | None = None
    status: PortfolioStatus | None = None
    is_featured: bool | None = None
    completed_at: datetime | None = None

    _blank_urls = field_validator("cover_image", "live_url", "repo_url", mode="before")(_blank_to_none)


class PortfolioItem(BaseModel):
    id: UUID
    title: str
    slug: str
    summary: str | None = None
    content: str | None = None
    client: str | None = None
    category: str | None = None
    tags: list[str] = []
    cover_image: str | None = None
    gallery: list[str] = []
    live_url: str | None = None
    repo_url: str | None = None
    status: PortfolioStatus
    is_featured: bool
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# CONTACTS
# ============================================================================


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    subject: str = Field(..., min_length=5, max_length=255)
    message: str = Field(..., min_length=10, max_length=10000)


class ContactUpdate(BaseModel):
    status: ContactStatus


class ContactCreated(BaseModel):
    id: UUID


class Contact(BaseModel):
    id: UUID
    name: str
    email: str
    subject: str
    message: str
    status: ContactStatus
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict[str, Any] | None = Field(
        None, validation_alias=AliasChoices("extra", "metadata")
    )
    replied_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# SUBSCRIBERS
# ============================================================================


class SubscribeRequest(BaseModel):
    email: EmailStr
    first_name: str | None = Field(None, max_length=100)
    source: str = Field("blog", max_length=50)


class UnsubscribeRequest(BaseModel):
    email: EmailStr


class SubscriberUpdate(BaseModel):
    email: EmailStr | None = None
    first_name: str | None = Field(None, max_length=100)
    source: str | None = Field(None, max_length=50)
    status: SubscriberStatus | None = None


class SubscriberPreference(BaseModel):
    preference_key: str
    enabled: bool

    model_config = ConfigDict(from_attributes=True)


class Subscriber(BaseModel):
    id: UUID
    email: str
    first_name: str | None = None
    status: SubscriberStatus
    source: str | None = None
    confirmed_at: datetime | None = None
    unsubscribed_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubscriberDetail(Subscriber):
    preferences: list[SubscriberPreference] = []


# ============================================================================
# ADMIN
# ============================================================================


class PostStats(BaseModel):
    total: int
    published: int
    draft: int


class TotalStats(BaseModel):
    total: int


class SubscriberStats(BaseModel):
    total: int
    active: int


class ContactStats(BaseModel):
    total: int
    new: int


class DashboardStats(BaseModel):
    posts: PostStats
    views: TotalStats
    subscribers: SubscriberStats
    contacts: ContactStats
    users: TotalStats
