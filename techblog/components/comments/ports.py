"""
Comments component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from techblog.domain.entities import Comment, CommentView, Post


class PostLookupPort(Protocol):
    def get_by_slug(self, slug: str, status: str | None = None) -> Post | None:
        ...


class CommentRepoPort(Protocol):
    """Repository interface for comment persistence."""

    def save(self, comment: Comment) -> Comment:
        ...

    def get_by_id(self, comment_id: UUID) -> Comment | None:
        ...

    def get_view(self, comment_id: UUID) -> CommentView | None:
        ...

    def latest_created_at_by_author(self, author_id: UUID) -> datetime | None:
        """Creation time of the author's most recent comment on any post."""
        ...

    def list_visible_top_level(self, post_id: UUID) -> list[CommentView]:
        """Visible comments without a parent, newest first."""
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
