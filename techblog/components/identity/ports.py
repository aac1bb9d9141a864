"""
Identity component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from techblog.domain.entities import Subject

from .models import SessionStatus


class IdentityProviderPort(Protocol):
    """Resolves a request's session token to a verified subject."""

    def resolve(self, token: str | None) -> Subject | None:
        """Return the subject, or None when the token is absent or invalid."""
        ...


class ClientSessionPort(Protocol):
    """
    Client-side view of the session used by the navigation guard.

    Clients may additionally expose fetch_session() or get_session(), either
    async or blocking, to force a refresh; the guard looks for them.
    """

    @property
    def status(self) -> SessionStatus:
        ...

    @property
    def subject(self) -> Subject | None:
        ...
