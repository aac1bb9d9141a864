import os
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from techblog.adapters.auth.crypto import Argon2PasswordHasher, JWTIdentityProvider
from techblog.adapters.clock import SystemClock
from techblog.adapters.sqlite.database import SQLiteDatabase
from techblog.adapters.sqlite.repos import SQLiteCommentRepo, SQLitePostRepo, SQLiteUserRepo
from techblog.api.errors import raise_for_errors
from techblog.components.identity import (
    GateInput,
    RoleGateInput,
    run_require_authenticated,
    run_require_role,
)
from techblog.domain.entities import Role, Subject
from techblog.rules.models import Rules

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("BLOG_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "blog.db")
        self.rules_path = Path(
            os.environ.get("BLOG_RULES_PATH", str(self.base_dir / "blog_rules.yaml"))
        )
        self.secret_key = os.environ.get("BLOG_SECRET_KEY", "dev-secret-unsafe")
        self.cors_origins = [
            origin.strip()
            for origin in os.environ.get("BLOG_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
            if origin.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- App state ---
# The lifespan stores the process-scoped handles on app.state.


def get_database(request: Request) -> SQLiteDatabase:
    database: SQLiteDatabase = request.app.state.database
    return database


def get_rules(request: Request) -> Rules:
    rules: Rules = request.app.state.rules
    return rules


def get_identity_provider(request: Request) -> JWTIdentityProvider:
    provider: JWTIdentityProvider = request.app.state.identity
    return provider


# --- Repos ---
def get_user_repo(database: SQLiteDatabase = Depends(get_database)) -> SQLiteUserRepo:
    return SQLiteUserRepo(database)


def get_post_repo(database: SQLiteDatabase = Depends(get_database)) -> SQLitePostRepo:
    return SQLitePostRepo(database)


def get_comment_repo(database: SQLiteDatabase = Depends(get_database)) -> SQLiteCommentRepo:
    return SQLiteCommentRepo(database)


# --- Adapters ---
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_password_hasher() -> Argon2PasswordHasher:
    return Argon2PasswordHasher()


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_session_token(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    rules: Rules = Depends(get_rules),
) -> str | None:
    """Token from the HttpOnly cookie first, then the Authorization header."""
    cookie_token = request.cookies.get(rules.auth.cookie_name)
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token.split(" ", 1)[1]
    return token


def require_authenticated(
    token: Annotated[str | None, Depends(get_session_token)],
    identity: JWTIdentityProvider = Depends(get_identity_provider),
) -> Subject:
    result = run_require_authenticated(GateInput(token=token), identity=identity)
    raise_for_errors(result.errors)
    if result.subject is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return result.subject


def require_role(role: Role) -> Callable[..., Subject]:
    """Dependency factory: authentication, then the role comparison."""

    def dependency(
        token: Annotated[str | None, Depends(get_session_token)],
        identity: JWTIdentityProvider = Depends(get_identity_provider),
    ) -> Subject:
        result = run_require_role(RoleGateInput(token=token, role=role), identity=identity)
        raise_for_errors(result.errors)
        if result.subject is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return result.subject

    return dependency


require_admin = require_role("ADMIN")


def admin_router(**kwargs: Any) -> APIRouter:
    """APIRouter whose every route is gated by the admin role."""
    dependencies = list(kwargs.pop("dependencies", []))
    return APIRouter(dependencies=[Depends(require_admin), *dependencies], **kwargs)
