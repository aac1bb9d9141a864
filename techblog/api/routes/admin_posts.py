"""
Admin post management routes.

Every route on this router is gated by the ADMIN role; handlers receive the
subject only where they need the author id.
"""

from dataclasses import asdict
from typing import Any
from uuid import UUID

from fastapi import Body, Depends, Query

from techblog.adapters.clock import SystemClock
from techblog.adapters.sqlite.repos import SQLitePostRepo
from techblog.api.deps import admin_router, get_clock, get_post_repo, get_rules, require_admin
from techblog.api.errors import raise_for_errors
from techblog.api.schemas import (
    PaginationResponse,
    PostCreateRequest,
    PostListItemResponse,
    PostListResponse,
    PostResponse,
    PostSummaryResponse,
    PostUpdateResponse,
)
from techblog.components import posts
from techblog.domain.entities import Post, Subject
from techblog.rules.models import Rules

router = admin_router()


def to_summary(post: Post) -> PostSummaryResponse:
    return PostSummaryResponse(
        id=post.id,
        title=post.title,
        slug=post.slug,
        status=post.status,
        published_at=post.published_at,
    )


@router.get("", response_model=PostListResponse)
def list_all_posts(
    page: str | None = Query(None),
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
) -> PostListResponse:
    result = posts.run_list(
        posts.ListPostsInput(
            page=page, page_size=rules.posts.admin_page_size, published_only=False
        ),
        repo=repo,
    )
    return PostListResponse(
        posts=[PostListItemResponse.model_validate(item.model_dump()) for item in result.items],
        pagination=PaginationResponse(**asdict(result.pagination)),
    )


@router.post("", response_model=PostSummaryResponse)
def create_post(
    body: PostCreateRequest,
    subject: Subject = Depends(require_admin),
    repo: SQLitePostRepo = Depends(get_post_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> PostSummaryResponse:
    result = posts.run_create(
        posts.CreatePostInput(
            title=body.title,
            content=body.content,
            author_id=subject.user_id,
            excerpt=body.excerpt,
            status=body.status,
        ),
        repo=repo,
        time=clock,
        rules=rules.posts,
    )
    raise_for_errors(result.errors)
    assert result.post is not None
    return to_summary(result.post)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: UUID,
    repo: SQLitePostRepo = Depends(get_post_repo),
) -> PostResponse:
    result = posts.run_get(posts.GetPostInput(post_id=post_id), repo=repo)
    raise_for_errors(result.errors)
    assert result.post is not None
    return PostResponse.model_validate(result.post.model_dump())


@router.put("/{post_id}", response_model=PostUpdateResponse)
def update_post(
    post_id: UUID,
    body: dict[str, Any] = Body(...),
    repo: SQLitePostRepo = Depends(get_post_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> PostUpdateResponse:
    """Partial update; an explicit "excerpt": null clears the excerpt."""
    result = posts.run_update(
        posts.UpdatePostInput(post_id=post_id, updates=body),
        repo=repo,
        time=clock,
        rules=rules.posts,
    )
    raise_for_errors(result.errors)
    assert result.post is not None
    post = result.post
    return PostUpdateResponse(
        id=post.id,
        title=post.title,
        slug=post.slug,
        status=post.status,
        published_at=post.published_at,
        updated_at=post.updated_at,
    )


@router.delete("/{post_id}")
def delete_post(
    post_id: UUID,
    repo: SQLitePostRepo = Depends(get_post_repo),
) -> dict[str, bool]:
    result = posts.run_delete(posts.DeletePostInput(post_id=post_id), repo=repo)
    raise_for_errors(result.errors)
    return {"success": True}
