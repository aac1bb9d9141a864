from typing import Annotated

from fastapi import APIRouter, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm

from techblog.adapters.auth.crypto import Argon2PasswordHasher, JWTIdentityProvider
from techblog.adapters.clock import SystemClock
from techblog.adapters.sqlite.repos import SQLiteUserRepo
from techblog.api.deps import (
    get_clock,
    get_identity_provider,
    get_password_hasher,
    get_rules,
    get_user_repo,
    require_authenticated,
)
from techblog.api.errors import raise_for_errors
from techblog.api.schemas import RegisterRequest, RegisterResponse, Token, UserResponse
from techblog.components.accounts import LoginInput, RegisterInput, run_login, run_register
from techblog.domain.entities import Subject
from techblog.rules.models import Rules

router = APIRouter()


@router.post("/register", response_model=RegisterResponse)
def register(
    body: RegisterRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    hasher: Argon2PasswordHasher = Depends(get_password_hasher),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> RegisterResponse:
    """Create a USER account from email, password and an optional name."""
    result = run_register(
        RegisterInput(email=body.email, password=body.password, name=body.name),
        user_repo=user_repo,
        hasher=hasher,
        time=clock,
        rules=rules.registration,
    )
    raise_for_errors(result.errors)
    assert result.user is not None
    user = result.user
    return RegisterResponse(
        user=UserResponse(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            created_at=user.created_at,
        )
    )


@router.post("/login", response_model=Token)
def login_for_access_token(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    hasher: Argon2PasswordHasher = Depends(get_password_hasher),
    identity: JWTIdentityProvider = Depends(get_identity_provider),
    rules: Rules = Depends(get_rules),
) -> Token:
    """Authenticate with email (form username) and password."""
    result = run_login(
        LoginInput(email=form_data.username, password=form_data.password),
        user_repo=user_repo,
        hasher=hasher,
    )
    raise_for_errors(result.errors)
    assert result.user is not None

    access_token = identity.create_token(result.user)
    max_age = rules.auth.token_ttl_minutes * 60

    # Set HttpOnly Cookie
    response.set_cookie(
        key=rules.auth.cookie_name,
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=max_age,
        expires=max_age,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )

    return Token(access_token=access_token, token_type="bearer")


@router.post("/logout")
def logout(response: Response, rules: Rules = Depends(get_rules)) -> dict[str, str]:
    """Log out user by clearing cookie."""
    response.delete_cookie(key=rules.auth.cookie_name)
    return {"status": "success"}


@router.get("/me")
def read_current_subject(
    subject: Subject = Depends(require_authenticated),
) -> dict[str, str | None]:
    return {
        "id": str(subject.user_id),
        "email": subject.email,
        "name": subject.name,
        "role": subject.role,
    }
