"""
Identity component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from techblog.domain.entities import Role, Subject
from techblog.domain.errors import OperationError

SessionStatus = Literal["loading", "authenticated", "unauthenticated"]


# --- Input Models ---


@dataclass(frozen=True)
class GateInput:
    """Raw session token as carried by the request (may be absent)."""

    token: str | None


@dataclass(frozen=True)
class RoleGateInput:
    token: str | None
    role: Role


@dataclass(frozen=True)
class NavigationInput:
    """A client-side navigation about to happen."""

    path: str


# --- Output Models ---


@dataclass
class GateOutput:
    subject: Subject | None = None
    errors: list[OperationError] = field(default_factory=list)
    success: bool = False


@dataclass(frozen=True)
class NavigationDecision:
    """
    Outcome of the admin navigation guard.

    action is "proceed" or "redirect"; location is set for redirects.
    """

    action: Literal["proceed", "redirect"]
    location: str | None = None
    reason: str | None = None

    @property
    def allowed(self) -> bool:
        return self.action == "proceed"
