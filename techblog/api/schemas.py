from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from techblog.domain.entities import AuthorView


# --- Auth ---
class RegisterRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str | None = None
    role: str
    created_at: datetime | None = None


class RegisterResponse(BaseModel):
    user: UserResponse


class Token(BaseModel):
    access_token: str
    token_type: str


# --- Posts ---
class PostCreateRequest(BaseModel):
    title: str | None = None
    content: Any = None
    excerpt: str | None = None
    status: str | None = None


class PostSummaryResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    status: str
    published_at: datetime | None = None


class PostUpdateResponse(PostSummaryResponse):
    updated_at: datetime


class PostResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    content: Any
    status: str
    published_at: datetime | None = None
    author_id: UUID
    created_at: datetime
    updated_at: datetime


class PostListItemResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    status: str
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    author: AuthorView | None = None


class PostDetailResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    content: Any
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    author: AuthorView


class PaginationResponse(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class PostListResponse(BaseModel):
    posts: list[PostListItemResponse]
    pagination: PaginationResponse


# --- Comments ---
class CommentCreateRequest(BaseModel):
    content: str | None = None
    parent_id: UUID | None = None


class CommentResponse(BaseModel):
    id: UUID
    content: str
    parent_id: UUID | None = None
    created_at: datetime
    author: AuthorView


# --- Stats ---
class StatsResponse(BaseModel):
    users: int = Field(ge=0)
    posts: int = Field(ge=0)
    comments: int = Field(ge=0)
