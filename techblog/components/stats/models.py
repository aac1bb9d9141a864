"""
Stats component output model.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from techblog.domain.errors import OperationError


@dataclass
class StatsOutput:
    users: int = 0
    posts: int = 0
    comments: int = 0
    errors: list[OperationError] = field(default_factory=list)
    success: bool = False
