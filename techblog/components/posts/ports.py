"""
Posts component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from techblog.domain.entities import Post, PostDetail, PostListing


class PostRepoPort(Protocol):
    """Repository interface for post persistence."""

    def get_by_id(self, post_id: UUID) -> Post | None:
        ...

    def get_by_slug(self, slug: str, status: str | None = None) -> Post | None:
        ...

    def get_view_by_slug(self, slug: str, published_only: bool = True) -> PostDetail | None:
        """Post by slug joined with its author's display fields."""
        ...

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        ...

    def save(self, post: Post) -> Post:
        """Insert or update. Raises UniqueViolation("slug") on a taken slug."""
        ...

    def delete(self, post_id: UUID) -> int:
        """Delete a post and its comments; returns posts removed."""
        ...

    def list_page(
        self,
        *,
        published_only: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[PostListing], int]:
        """Returns (items, total_count)."""
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
