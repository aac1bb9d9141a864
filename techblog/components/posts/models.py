"""
Posts component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from techblog.domain.entities import Post, PostDetail, PostListing
from techblog.domain.errors import OperationError

# Keys of an update payload that carry meaning
UPDATABLE_FIELDS: tuple[str, ...] = ("title", "excerpt", "content", "status")


# --- Input Models ---


@dataclass(frozen=True)
class CreatePostInput:
    title: str | None
    content: Any
    author_id: UUID
    excerpt: str | None = None
    status: str | None = "DRAFT"


@dataclass(frozen=True)
class UpdatePostInput:
    """
    Partial update. Key presence matters: an "excerpt" key set to None clears
    the excerpt, while an absent key leaves it untouched.
    """

    post_id: UUID
    updates: dict[str, Any]


@dataclass(frozen=True)
class DeletePostInput:
    post_id: UUID


@dataclass(frozen=True)
class GetPostInput:
    post_id: UUID


@dataclass(frozen=True)
class GetPostBySlugInput:
    slug: str | None
    require_published: bool = True


@dataclass(frozen=True)
class ListPostsInput:
    page: int | str | None = 1
    page_size: int = 10
    published_only: bool = True


# --- Output Models ---


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int
    total: int
    total_pages: int


@dataclass
class PostOutput:
    post: Post | None = None
    errors: list[OperationError] = field(default_factory=list)
    success: bool = False


@dataclass
class PostDetailOutput:
    post: PostDetail | None = None
    errors: list[OperationError] = field(default_factory=list)
    success: bool = False


@dataclass
class PostListOutput:
    items: list[PostListing]
    pagination: Pagination
    errors: list[OperationError] = field(default_factory=list)
    success: bool = True


@dataclass
class DeleteOutput:
    errors: list[OperationError] = field(default_factory=list)
    success: bool = False
