"""
Posts component - Post lifecycle and publication state.
"""

from .component import (
    coerce_page,
    resolve_unique_slug,
    run_create,
    run_delete,
    run_get,
    run_get_by_slug,
    run_list,
    run_update,
)
from .models import (
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
from .ports import PostRepoPort

__all__ = [
    # Entry points
    "run_create",
    "run_delete",
    "run_get",
    "run_get_by_slug",
    "run_list",
    "run_update",
    # Helpers
    "coerce_page",
    "resolve_unique_slug",
    # Models
    "CreatePostInput",
    "DeleteOutput",
    "DeletePostInput",
    "GetPostBySlugInput",
    "GetPostInput",
    "ListPostsInput",
    "Pagination",
    "PostDetailOutput",
    "PostListOutput",
    "PostOutput",
    "UpdatePostInput",
    # Ports
    "PostRepoPort",
]
