from fastapi import Depends

from techblog.adapters.sqlite.repos import SQLiteCommentRepo, SQLitePostRepo, SQLiteUserRepo
from techblog.api.deps import admin_router, get_comment_repo, get_post_repo, get_user_repo
from techblog.api.schemas import StatsResponse
from techblog.components.stats import run_get_stats

router = admin_router()


@router.get("", response_model=StatsResponse)
def get_stats(
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    post_repo: SQLitePostRepo = Depends(get_post_repo),
    comment_repo: SQLiteCommentRepo = Depends(get_comment_repo),
) -> StatsResponse:
    """Overview counts for the admin dashboard."""
    result = run_get_stats(user_repo=user_repo, post_repo=post_repo, comment_repo=comment_repo)
    return StatsResponse(users=result.users, posts=result.posts, comments=result.comments)
