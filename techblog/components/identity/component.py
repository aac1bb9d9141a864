"""
Identity component - request authentication and role gating.

Two server-side gates and one client-side navigation guard:

- run_require_authenticated: session token -> Subject, or "unauthorized".
- run_require_role: authentication first, then role comparison ("forbidden").
- run_guard_navigation: before entering an admin-scoped view, wait (bounded)
  for a loading session to settle, then proceed or redirect.

Gates only consult the identity provider; they never touch storage.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any

from techblog.domain.errors import OperationError
from techblog.rules.models import NavigationRules

from .models import GateInput, GateOutput, NavigationDecision, NavigationInput, RoleGateInput
from .ports import ClientSessionPort, IdentityProviderPort

logger = logging.getLogger(__name__)

REFRESH_METHODS = ("fetch_session", "get_session")


def run_require_authenticated(
    inp: GateInput,
    *,
    identity: IdentityProviderPort,
) -> GateOutput:
    subject = identity.resolve(inp.token)
    if subject is None:
        return GateOutput(
            errors=[OperationError(kind="unauthorized", message="Unauthorized")],
            success=False,
        )
    return GateOutput(subject=subject, success=True)


def run_require_role(
    inp: RoleGateInput,
    *,
    identity: IdentityProviderPort,
) -> GateOutput:
    auth = run_require_authenticated(GateInput(token=inp.token), identity=identity)
    if not auth.success or auth.subject is None:
        return auth

    if auth.subject.role != inp.role:
        logger.warning(
            "Subject %s with role %s denied %s access",
            auth.subject.user_id,
            auth.subject.role,
            inp.role,
        )
        return GateOutput(
            errors=[OperationError(kind="forbidden", message="Forbidden")],
            success=False,
        )

    return auth


# --- Navigation guard ---


def _find_refresh(session: Any) -> Any:
    for name in REFRESH_METHODS:
        method = getattr(session, name, None)
        if callable(method):
            return method
    return None


async def _settle_session(session: ClientSessionPort, timeout_seconds: float) -> None:
    """Wait, at most timeout_seconds, for a loading session to resolve."""
    if session.status != "loading":
        return

    refresh = _find_refresh(session)
    if refresh is None:
        # Nothing to wait on; the session is evaluated as it stands
        return

    async def _refresh() -> None:
        if inspect.iscoroutinefunction(refresh):
            await refresh()
            return
        # Sync refreshes run in a worker thread
        result = await asyncio.to_thread(refresh)
        if inspect.isawaitable(result):
            await result

    try:
        await asyncio.wait_for(_refresh(), timeout=timeout_seconds)
    except TimeoutError:
        logger.warning("Session refresh timed out after %.1fs", timeout_seconds)


async def run_guard_navigation(
    inp: NavigationInput,
    *,
    session: ClientSessionPort,
    rules: NavigationRules | None = None,
) -> NavigationDecision:
    """
    Decide whether a navigation into an admin-scoped path may proceed.

    Must be awaited before every admin navigation so the decision is never
    made on a stale or still-loading session.
    """
    rules = rules or NavigationRules()

    if not inp.path.startswith(rules.admin_prefix):
        return NavigationDecision(action="proceed")

    await _settle_session(session, rules.session_wait_seconds)

    if session.status != "authenticated":
        return NavigationDecision(
            action="redirect", location=rules.login_path, reason="unauthenticated"
        )

    subject = session.subject
    if subject is None or subject.role != "ADMIN":
        return NavigationDecision(action="redirect", location=rules.home_path, reason="forbidden")

    return NavigationDecision(action="proceed")
