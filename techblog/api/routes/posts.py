"""
Public post and comment routes.

Listing and detail are filtered to PUBLISHED posts. Creating a comment
requires an authenticated subject.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from techblog.adapters.clock import SystemClock
from techblog.adapters.sqlite.repos import SQLiteCommentRepo, SQLitePostRepo
from techblog.api.deps import (
    get_clock,
    get_comment_repo,
    get_post_repo,
    get_rules,
    require_authenticated,
)
from techblog.api.errors import raise_for_errors
from techblog.api.schemas import (
    CommentCreateRequest,
    CommentResponse,
    PaginationResponse,
    PostDetailResponse,
    PostListItemResponse,
    PostListResponse,
)
from techblog.components import comments, posts
from techblog.domain.entities import CommentView, Subject
from techblog.rules.models import Rules

router = APIRouter()


def to_comment_response(view: CommentView) -> CommentResponse:
    return CommentResponse(
        id=view.id,
        content=view.content,
        parent_id=view.parent_id,
        created_at=view.created_at,
        author=view.author,
    )


@router.get("", response_model=PostListResponse)
def list_published_posts(
    page: str | None = Query(None),
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
) -> PostListResponse:
    result = posts.run_list(
        posts.ListPostsInput(
            page=page, page_size=rules.posts.public_page_size, published_only=True
        ),
        repo=repo,
    )
    return PostListResponse(
        posts=[PostListItemResponse.model_validate(item.model_dump()) for item in result.items],
        pagination=PaginationResponse(**asdict(result.pagination)),
    )


@router.get("/{slug}", response_model=PostDetailResponse)
def get_published_post(
    slug: str,
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
) -> PostDetailResponse:
    result = posts.run_get_by_slug(
        posts.GetPostBySlugInput(slug=slug, require_published=True),
        repo=repo,
        rules=rules.posts,
    )
    raise_for_errors(result.errors)
    assert result.post is not None
    return PostDetailResponse.model_validate(result.post.model_dump())


@router.get("/{slug}/comments", response_model=list[CommentResponse])
def list_comments(
    slug: str,
    post_repo: SQLitePostRepo = Depends(get_post_repo),
    comment_repo: SQLiteCommentRepo = Depends(get_comment_repo),
) -> list[CommentResponse]:
    result = comments.run_list(
        comments.ListCommentsInput(post_slug=slug),
        post_repo=post_repo,
        comment_repo=comment_repo,
    )
    raise_for_errors(result.errors)
    return [to_comment_response(view) for view in result.items]


@router.post("/{slug}/comments", response_model=CommentResponse)
def create_comment(
    slug: str,
    body: CommentCreateRequest,
    subject: Subject = Depends(require_authenticated),
    post_repo: SQLitePostRepo = Depends(get_post_repo),
    comment_repo: SQLiteCommentRepo = Depends(get_comment_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> CommentResponse:
    result = comments.run_create(
        comments.CreateCommentInput(
            post_slug=slug,
            subject=subject,
            raw_content=body.content,
            parent_id=body.parent_id,
        ),
        post_repo=post_repo,
        comment_repo=comment_repo,
        time=clock,
        rules=rules.comments,
    )
    raise_for_errors(result.errors)
    assert result.comment is not None
    return to_comment_response(result.comment)
