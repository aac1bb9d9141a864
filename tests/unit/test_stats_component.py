from unittest.mock import Mock

from techblog.adapters.sqlite.repos import SQLiteCommentRepo, SQLitePostRepo, SQLiteUserRepo
from techblog.components.stats import run_get_stats
from techblog.domain.entities import Post, User


def test_counts_come_from_each_repo() -> None:
    users, posts, comments = Mock(), Mock(), Mock()
    users.count.return_value = 3
    posts.count.return_value = 7
    comments.count.return_value = 0

    result = run_get_stats(user_repo=users, post_repo=posts, comment_repo=comments)

    assert result.success
    assert (result.users, result.posts, result.comments) == (3, 7, 0)


def test_counts_reflect_storage(
    user_repo: SQLiteUserRepo,
    post_repo: SQLitePostRepo,
    comment_repo: SQLiteCommentRepo,
    admin_user: User,
    reader_user: User,
) -> None:
    post_repo.save(Post(title="A", slug="a", content="x", author_id=admin_user.id))
    post_repo.save(Post(title="B", slug="b", content="x", author_id=admin_user.id))

    result = run_get_stats(user_repo=user_repo, post_repo=post_repo, comment_repo=comment_repo)

    assert (result.users, result.posts, result.comments) == (2, 2, 0)
