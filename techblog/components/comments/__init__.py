"""
Comments component - Comment creation and per-author cooldown.
"""

from .component import (
    cooldown_remaining_seconds,
    run_create,
    run_list,
    validate_content,
)
from .models import (
    CommentListOutput,
    CommentOutput,
    CreateCommentInput,
    ListCommentsInput,
)
from .ports import CommentRepoPort, PostLookupPort

__all__ = [
    # Entry points
    "run_create",
    "run_list",
    # Helpers
    "cooldown_remaining_seconds",
    "validate_content",
    # Models
    "CommentListOutput",
    "CommentOutput",
    "CreateCommentInput",
    "ListCommentsInput",
    # Ports
    "CommentRepoPort",
    "PostLookupPort",
]
