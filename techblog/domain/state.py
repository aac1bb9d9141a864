from datetime import datetime

from techblog.domain.entities import POST_STATUSES, Post, PostStatus


def is_known_status(value: object) -> bool:
    return value in POST_STATUSES


def can_transition(current: PostStatus, new: PostStatus) -> bool:
    """
    DRAFT, PUBLISHED and ARCHIVED may move to each other freely; only the
    publication timestamp depends on the target.
    """
    return is_known_status(current) and is_known_status(new)


def published_at_for(
    new_status: PostStatus, previous: datetime | None, now: datetime
) -> datetime | None:
    if new_status == "PUBLISHED":
        # Re-publishing keeps the original publication time
        return previous or now
    return None


def transition(post: Post, new_status: PostStatus, now: datetime) -> Post:
    """
    Return a NEW Post with the status applied and published_at kept in step.
    Raises ValueError for unknown statuses.
    """
    if not can_transition(post.status, new_status):
        raise ValueError(f"Invalid transition from {post.status} to {new_status}")

    return post.model_copy(
        update={
            "status": new_status,
            "published_at": published_at_for(new_status, post.published_at, now),
            "updated_at": now,
        }
    )


def holds_publication_invariant(post: Post) -> bool:
    return (post.status == "PUBLISHED") == (post.published_at is not None)
