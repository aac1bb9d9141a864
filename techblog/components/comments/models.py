"""
Comments component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from techblog.domain.entities import CommentView, Subject
from techblog.domain.errors import OperationError

# --- Input Models ---


@dataclass(frozen=True)
class ListCommentsInput:
    post_slug: str | None


@dataclass(frozen=True)
class CreateCommentInput:
    post_slug: str | None
    subject: Subject | None
    raw_content: str | None
    parent_id: UUID | None = None


# --- Output Models ---


@dataclass
class CommentListOutput:
    items: list[CommentView] = field(default_factory=list)
    errors: list[OperationError] = field(default_factory=list)
    success: bool = False


@dataclass
class CommentOutput:
    comment: CommentView | None = None
    errors: list[OperationError] = field(default_factory=list)
    success: bool = False
