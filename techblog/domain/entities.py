from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
Role = Literal["USER", "ADMIN"]
PostStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]

ROLES: tuple[Role, ...] = ("USER", "ADMIN")
POST_STATUSES: tuple[PostStatus, ...] = ("DRAFT", "PUBLISHED", "ARCHIVED")


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Users & Auth ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str | None = None
    email: str
    password_hash: str | None = None  # None for accounts without credentials
    role: Role = "USER"
    created_at: datetime = Field(default_factory=utcnow)


class Subject(BaseModel):
    """Authenticated identity resolved from a session."""

    user_id: UUID
    role: Role
    email: str | None = None
    name: str | None = None


# --- Posts ---

class Post(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str
    excerpt: str | None = None
    content: Any
    status: PostStatus = "DRAFT"
    published_at: datetime | None = None
    author_id: UUID
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Comments ---

class Comment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    content: str
    post_id: UUID
    author_id: UUID
    parent_id: UUID | None = None
    is_visible: bool = True
    created_at: datetime = Field(default_factory=utcnow)


# --- Read projections ---

class AuthorView(BaseModel):
    name: str | None = None
    email: str


class PostListing(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    status: PostStatus
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    author: AuthorView | None = None


class PostDetail(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    content: Any
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    author: AuthorView


class CommentView(BaseModel):
    id: UUID
    content: str
    parent_id: UUID | None = None
    created_at: datetime
    author: AuthorView
