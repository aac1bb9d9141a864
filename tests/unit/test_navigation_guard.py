"""
Admin navigation guard tests.

The guard is async; each test drives it with asyncio.run.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any
from uuid import uuid4

from techblog.components.identity import NavigationDecision, NavigationInput, run_guard_navigation
from techblog.domain.entities import Subject
from techblog.rules.models import NavigationRules

ADMIN = Subject(user_id=uuid4(), role="ADMIN")
READER = Subject(user_id=uuid4(), role="USER")


class StaticSession:
    """Session without any refresh capability."""

    def __init__(self, status: str, subject: Subject | None = None) -> None:
        self.status = status
        self.subject = subject


class RefreshingSession:
    """Loading session that resolves when fetch_session() is awaited."""

    def __init__(self, resolves_to: Subject | None, delay: float = 0.0) -> None:
        self.status = "loading"
        self.subject: Subject | None = None
        self._resolves_to = resolves_to
        self._delay = delay
        self.fetch_calls = 0

    async def fetch_session(self) -> None:
        self.fetch_calls += 1
        await asyncio.sleep(self._delay)
        self.subject = self._resolves_to
        self.status = "authenticated" if self._resolves_to else "unauthenticated"


class SyncGetSession:
    """Loading session exposing only a synchronous get_session()."""

    def __init__(self, resolves_to: Subject) -> None:
        self.status = "loading"
        self.subject: Subject | None = None
        self._resolves_to = resolves_to

    def get_session(self) -> None:
        self.subject = self._resolves_to
        self.status = "authenticated"


class BlockingFetchSession:
    """Loading session whose synchronous fetch_session() blocks."""

    def __init__(self, block_seconds: float) -> None:
        self.status = "loading"
        self.subject: Subject | None = None
        self._block_seconds = block_seconds

    def fetch_session(self) -> None:
        time.sleep(self._block_seconds)
        self.subject = ADMIN
        self.status = "authenticated"


def guard(path: str, session: Any, rules: NavigationRules | None = None) -> NavigationDecision:
    return asyncio.run(
        run_guard_navigation(NavigationInput(path=path), session=session, rules=rules)
    )


class TestNonAdminPaths:
    def test_public_paths_always_proceed(self) -> None:
        for path in ("/", "/posts/hello", "/login", "/about"):
            assert guard(path, StaticSession("unauthenticated")).allowed

    def test_loading_session_not_refreshed_outside_admin(self) -> None:
        session = RefreshingSession(ADMIN)
        assert guard("/posts", session).allowed
        assert session.fetch_calls == 0


class TestAdminPaths:
    def test_admin_proceeds(self) -> None:
        decision = guard("/admin/posts", StaticSession("authenticated", ADMIN))
        assert decision.allowed
        assert decision.location is None

    def test_unauthenticated_redirects_to_login(self) -> None:
        decision = guard("/admin", StaticSession("unauthenticated"))
        assert not decision.allowed
        assert decision.location == "/login"
        assert decision.reason == "unauthenticated"

    def test_non_admin_redirects_home(self) -> None:
        decision = guard("/admin/stats", StaticSession("authenticated", READER))
        assert decision.action == "redirect"
        assert decision.location == "/"
        assert decision.reason == "forbidden"

    def test_loading_session_is_refreshed_first(self) -> None:
        session = RefreshingSession(ADMIN)
        assert guard("/admin", session).allowed
        assert session.fetch_calls == 1

    def test_loading_session_resolving_to_anonymous(self) -> None:
        decision = guard("/admin", RefreshingSession(None))
        assert decision.location == "/login"

    def test_sync_get_session_fallback(self) -> None:
        assert guard("/admin", SyncGetSession(ADMIN)).allowed

    def test_no_refresh_capability_treats_loading_as_unauthenticated(self) -> None:
        decision = guard("/admin", StaticSession("loading"))
        assert decision.location == "/login"

    def test_wait_is_bounded(self) -> None:
        rules = NavigationRules(session_wait_seconds=0.05)
        session = RefreshingSession(ADMIN, delay=5)
        decision = guard("/admin", session, rules)
        assert decision.location == "/login"
        assert session.status == "loading"

    def test_wait_is_bounded_for_blocking_sync_refresh(self) -> None:
        rules = NavigationRules(session_wait_seconds=0.05)
        session = BlockingFetchSession(block_seconds=0.5)

        async def timed() -> tuple[NavigationDecision, float]:
            started = time.monotonic()
            decision = await run_guard_navigation(
                NavigationInput(path="/admin"), session=session, rules=rules
            )
            return decision, time.monotonic() - started

        decision, elapsed = asyncio.run(timed())
        assert decision.location == "/login"
        assert elapsed < 0.4
