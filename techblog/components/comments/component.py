"""
Comments component - Comment creation, visibility and per-author cooldown.

Checks run in a fixed order so that cheap input validation never reaches
storage:

1. authenticated subject
2. content trimmed, non-empty, within the length limit
3. markup stripped; plain text must remain
4. target post exists and is PUBLISHED
5. optional parent is a comment on the same post
6. author cooldown since their latest comment on any post

The cooldown check and the insert are separate statements. Two concurrent
requests from one author can both pass the check; the limit is best-effort.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from uuid import uuid4

from techblog.domain.entities import Comment
from techblog.domain.errors import OperationError, not_found, validation_error
from techblog.domain.sanitize import strip_markup
from techblog.rules.models import CommentRules

from .models import (
    CommentListOutput,
    CommentOutput,
    CreateCommentInput,
    ListCommentsInput,
)
from .ports import CommentRepoPort, PostLookupPort, TimePort

logger = logging.getLogger(__name__)


# --- Pure helpers ---


def cooldown_remaining_seconds(
    last_created_at: datetime | None,
    now: datetime,
    cooldown_seconds: int,
) -> int:
    """Whole seconds (rounded up) until the author may comment again; 0 when free."""
    if last_created_at is None:
        return 0
    elapsed_ms = (now - last_created_at).total_seconds() * 1000
    remaining_ms = cooldown_seconds * 1000 - elapsed_ms
    if remaining_ms <= 0:
        return 0
    return math.ceil(remaining_ms / 1000)


def validate_content(raw: str | None, max_length: int) -> tuple[str, list[OperationError]]:
    """Trim and length-check raw content. Returns (trimmed, errors)."""
    content = (raw or "").strip()
    if not content:
        return content, [validation_error("Comment content is required.", "content")]
    if len(content) > max_length:
        return content, [
            validation_error(
                f"Comment must be {max_length} characters or fewer.", "content"
            )
        ]
    return content, []


def _missing_slug(slug: str | None) -> bool:
    return not slug or not slug.strip()


# --- Component Entry Points ---


def run_list(
    inp: ListCommentsInput,
    *,
    post_repo: PostLookupPort,
    comment_repo: CommentRepoPort,
) -> CommentListOutput:
    if _missing_slug(inp.post_slug):
        return CommentListOutput(errors=[validation_error("Missing post slug", "slug")])

    post = post_repo.get_by_slug(inp.post_slug.strip(), status="PUBLISHED")
    if post is None:
        return CommentListOutput(errors=[not_found("Post not found")])

    return CommentListOutput(items=comment_repo.list_visible_top_level(post.id), success=True)


def run_create(
    inp: CreateCommentInput,
    *,
    post_repo: PostLookupPort,
    comment_repo: CommentRepoPort,
    time: TimePort,
    rules: CommentRules | None = None,
) -> CommentOutput:
    rules = rules or CommentRules()

    if inp.subject is None:
        return CommentOutput(
            errors=[OperationError(kind="unauthorized", message="Unauthorized")]
        )

    if _missing_slug(inp.post_slug):
        return CommentOutput(errors=[validation_error("Missing post slug", "slug")])

    trimmed, errors = validate_content(inp.raw_content, rules.max_length)
    if errors:
        return CommentOutput(errors=errors)

    content = strip_markup(trimmed)
    if not content:
        return CommentOutput(
            errors=[validation_error("Comment content is required.", "content")]
        )

    post = post_repo.get_by_slug(inp.post_slug.strip(), status="PUBLISHED")
    if post is None:
        return CommentOutput(errors=[not_found("Post not found")])

    if inp.parent_id is not None:
        parent = comment_repo.get_by_id(inp.parent_id)
        if parent is None or parent.post_id != post.id:
            return CommentOutput(errors=[not_found("Parent comment not found")])

    author_id = inp.subject.user_id
    now = time.now_utc()
    remaining = cooldown_remaining_seconds(
        comment_repo.latest_created_at_by_author(author_id),
        now,
        rules.cooldown_seconds,
    )
    if remaining > 0:
        logger.warning("Comment cooldown active for %s (%ds)", author_id, remaining)
        return CommentOutput(
            errors=[
                OperationError(
                    kind="rate_limited",
                    message=f"Please wait {remaining} seconds before commenting again.",
                    retry_after_seconds=remaining,
                )
            ]
        )

    comment = Comment(
        id=uuid4(),
        content=content,
        post_id=post.id,
        author_id=author_id,
        parent_id=inp.parent_id,
        is_visible=True,
        created_at=now,
    )
    comment_repo.save(comment)
    logger.info("Comment %s created on post %s", comment.id, post.id)

    view = comment_repo.get_view(comment.id)
    if view is None:
        return CommentOutput(
            errors=[OperationError(kind="storage_failure", message="Failed to create comment")]
        )
    return CommentOutput(comment=view, success=True)
