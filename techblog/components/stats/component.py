"""
Stats component - Aggregate entity counts for the admin dashboard.

Read-only. The three counts are independent reads and reflect storage at
the moment each runs; they are not taken from a single snapshot.
"""

from __future__ import annotations

from .models import StatsOutput
from .ports import CountablePort


def run_get_stats(
    *,
    user_repo: CountablePort,
    post_repo: CountablePort,
    comment_repo: CountablePort,
) -> StatsOutput:
    return StatsOutput(
        users=user_repo.count(),
        posts=post_repo.count(),
        comments=comment_repo.count(),
        success=True,
    )
