"""
Posts component - Post lifecycle, publication state and slug uniqueness.

Manages create, update, delete, lookup and paginated listing of posts.

State machine:
- DRAFT, PUBLISHED and ARCHIVED may move to one another in any direction.
- Entering PUBLISHED stamps published_at once; it is kept on re-publish.
- Any other target status clears published_at.

Invariants:
- slug is non-empty and unique across all posts
- status == PUBLISHED  <=>  published_at is not None, after every write

Slug uniqueness is probed before the write; the storage unique constraint is
the final arbiter and a lost race triggers a bounded re-probe.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any
from uuid import UUID, uuid4

from techblog.domain.entities import Post, PostStatus
from techblog.domain.errors import OperationError, UniqueViolation, not_found, validation_error
from techblog.domain.slugs import fallback_slug_base, slugify
from techblog.domain.state import is_known_status, published_at_for, transition
from techblog.rules.models import PostRules

from .models import (
    UPDATABLE_FIELDS,
    CreatePostInput,
    DeleteOutput,
    DeletePostInput,
    GetPostBySlugInput,
    GetPostInput,
    ListPostsInput,
    Pagination,
    PostDetailOutput,
    PostListOutput,
    PostOutput,
    UpdatePostInput,
)
from .ports import PostRepoPort, TimePort

logger = logging.getLogger(__name__)

DEFAULT_SLUG_MAX_LENGTH = PostRules().slug_max_length

# Largest value SQLite accepts for LIMIT/OFFSET
MAX_SQL_OFFSET = 2**63 - 1


# --- Pure helpers ---


def coerce_page(value: Any) -> int:
    """1-based page number; anything non-numeric or below 1 becomes 1."""
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        page = value
    else:
        try:
            page = int(str(value).strip())
        except (TypeError, ValueError):
            return 1
    return page if page > 0 else 1


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size > 0 else 0


def resolve_unique_slug(
    title: str,
    *,
    repo: PostRepoPort,
    time: TimePort,
    exclude_id: UUID | None = None,
    max_length: int = DEFAULT_SLUG_MAX_LENGTH,
) -> str:
    """
    Slug for title that no other post uses: the slugified title, then
    "-2", "-3", ... appended until free.

    The result never exceeds max_length; the base is cut short to leave room
    for the suffix.
    """
    base = slugify(title) or fallback_slug_base(time.now_utc())

    slug = _fit(base, "", max_length)
    suffix = 1
    while repo.slug_exists(slug, exclude_id=exclude_id):
        suffix += 1
        slug = _fit(base, f"-{suffix}", max_length)
    return slug


def _fit(base: str, tail: str, max_length: int) -> str:
    head = base[: max(max_length - len(tail), 1)].rstrip("-")
    return f"{head}{tail}"


def _save_with_slug_retry(
    build: Callable[[str], Post],
    title: str,
    *,
    repo: PostRepoPort,
    time: TimePort,
    attempts: int,
    exclude_id: UUID | None = None,
    max_length: int = DEFAULT_SLUG_MAX_LENGTH,
) -> Post | None:
    """Probe a slug, build and save; re-probe when the unique constraint fires."""
    for attempt in range(1, attempts + 1):
        slug = resolve_unique_slug(
            title, repo=repo, time=time, exclude_id=exclude_id, max_length=max_length
        )
        post = build(slug)
        try:
            repo.save(post)
            return post
        except UniqueViolation as e:
            if e.field != "slug":
                raise
            logger.warning("Slug %r taken concurrently (attempt %d/%d)", slug, attempt, attempts)
    return None


def _slug_exhausted() -> OperationError:
    return OperationError(
        kind="storage_failure",
        message="Could not allocate a unique slug, please retry.",
        field="slug",
    )


# --- Component Entry Points ---


def run_create(
    inp: CreatePostInput,
    *,
    repo: PostRepoPort,
    time: TimePort,
    rules: PostRules | None = None,
) -> PostOutput:
    rules = rules or PostRules()

    if not inp.title or not inp.title.strip() or not inp.content:
        return PostOutput(errors=[validation_error("Title and content are required.")])

    status = inp.status or "DRAFT"
    if not is_known_status(status):
        return PostOutput(errors=[validation_error(f"Unknown status: {status}", "status")])

    now = time.now_utc()
    post_id = uuid4()
    title = inp.title

    def build(slug: str) -> Post:
        return Post(
            id=post_id,
            title=title,
            slug=slug,
            excerpt=inp.excerpt,
            content=inp.content,
            status=status,
            published_at=published_at_for(status, None, now),
            author_id=inp.author_id,
            created_at=now,
            updated_at=now,
        )

    post = _save_with_slug_retry(
        build,
        title,
        repo=repo,
        time=time,
        attempts=rules.slug_conflict_retries,
        max_length=rules.slug_max_length,
    )
    if post is None:
        return PostOutput(errors=[_slug_exhausted()])

    logger.info("Created post %s (%s, slug=%s)", post.id, post.status, post.slug)
    return PostOutput(post=post, success=True)


def _validate_updates(updates: dict[str, Any]) -> list[OperationError]:
    errors: list[OperationError] = []

    if not any(key in updates for key in UPDATABLE_FIELDS):
        errors.append(validation_error("No updates provided."))
        return errors

    title = updates.get("title")
    if "title" in updates and title is not None:
        if not isinstance(title, str) or not title.strip():
            errors.append(validation_error("Title must be a non-empty string.", "title"))

    excerpt = updates.get("excerpt")
    if excerpt is not None and not isinstance(excerpt, str):
        errors.append(validation_error("Excerpt must be a string or null.", "excerpt"))

    status = updates.get("status")
    if status and not is_known_status(status):
        errors.append(validation_error(f"Unknown status: {status}", "status"))

    return errors


def run_update(
    inp: UpdatePostInput,
    *,
    repo: PostRepoPort,
    time: TimePort,
    rules: PostRules | None = None,
) -> PostOutput:
    rules = rules or PostRules()
    updates = inp.updates

    errors = _validate_updates(updates)
    if errors:
        return PostOutput(errors=errors)

    existing = repo.get_by_id(inp.post_id)
    if existing is None:
        return PostOutput(errors=[not_found("Post not found")])

    now = time.now_utc()
    changes: dict[str, Any] = {}

    new_title = updates.get("title")
    if isinstance(new_title, str):
        changes["title"] = new_title

    if "excerpt" in updates:
        changes["excerpt"] = updates["excerpt"]

    if updates.get("content"):
        changes["content"] = updates["content"]

    new_status: PostStatus | None = updates.get("status") or None

    if not changes and new_status is None:
        return PostOutput(errors=[validation_error("No updates provided.")])

    def build(slug: str | None = None) -> Post:
        post = existing
        if new_status is not None:
            post = transition(post, new_status, now)
        fields = dict(changes, updated_at=now)
        if slug is not None:
            fields["slug"] = slug
        return post.model_copy(update=fields)

    if "title" in changes:
        updated = _save_with_slug_retry(
            build,
            changes["title"],
            repo=repo,
            time=time,
            attempts=rules.slug_conflict_retries,
            exclude_id=existing.id,
            max_length=rules.slug_max_length,
        )
        if updated is None:
            return PostOutput(errors=[_slug_exhausted()])
    else:
        updated = build()
        repo.save(updated)

    logger.info("Updated post %s (%s)", updated.id, ", ".join(sorted(updates)))
    return PostOutput(post=updated, success=True)


def run_delete(
    inp: DeletePostInput,
    *,
    repo: PostRepoPort,
) -> DeleteOutput:
    removed = repo.delete(inp.post_id)
    if not removed:
        return DeleteOutput(
            errors=[
                OperationError(kind="storage_failure", message="Failed to delete post")
            ]
        )

    logger.info("Deleted post %s", inp.post_id)
    return DeleteOutput(success=True)


def run_get(
    inp: GetPostInput,
    *,
    repo: PostRepoPort,
) -> PostOutput:
    post = repo.get_by_id(inp.post_id)
    if post is None:
        return PostOutput(errors=[not_found("Post not found")])
    return PostOutput(post=post, success=True)


def run_get_by_slug(
    inp: GetPostBySlugInput,
    *,
    repo: PostRepoPort,
    rules: PostRules | None = None,
) -> PostDetailOutput:
    rules = rules or PostRules()

    slug = (inp.slug or "").strip()
    if not slug or len(slug) > rules.slug_max_length:
        return PostDetailOutput(errors=[validation_error("Missing post slug", "slug")])

    post = repo.get_view_by_slug(slug, published_only=inp.require_published)
    if post is None:
        return PostDetailOutput(errors=[not_found("Post not found")])
    return PostDetailOutput(post=post, success=True)


def run_list(
    inp: ListPostsInput,
    *,
    repo: PostRepoPort,
) -> PostListOutput:
    page = coerce_page(inp.page)
    page_size = max(inp.page_size, 1)

    items, total = repo.list_page(
        published_only=inp.published_only,
        limit=page_size,
        offset=min((page - 1) * page_size, MAX_SQL_OFFSET),
    )

    return PostListOutput(
        items=items,
        pagination=Pagination(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages(total, page_size),
        ),
    )
