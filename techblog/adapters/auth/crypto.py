import logging
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from techblog.domain.entities import ROLES, Subject, User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class Argon2PasswordHasher:
    """Slow salted password hashing backed by passlib's argon2 scheme."""

    def hash_password(self, password: str) -> str:
        result: str = pwd_context.hash(password)
        return result

    def verify_password(self, plain: str, hashed: str) -> bool:
        try:
            result: bool = pwd_context.verify(plain, hashed)
        except ValueError:
            # Malformed or unknown hash format
            return False
        return result


class JWTIdentityProvider:
    """
    Issues and verifies signed session tokens.

    A token carries the subject id, role claim and display claims. resolve()
    returns None for anything that is not a valid, unexpired token.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", ttl_minutes: int = 60 * 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.ttl_minutes = ttl_minutes

    def create_token(self, user: User, now_utc: datetime | None = None) -> str:
        current_time = now_utc if now_utc is not None else datetime.now(UTC)
        claims: dict[str, Any] = {
            "sub": str(user.id),
            "role": user.role,
            "email": user.email,
            "name": user.name,
            "exp": current_time + timedelta(minutes=self.ttl_minutes),
        }
        encoded: str = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return encoded

    def decode(self, token: str) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return cast(dict[str, Any], payload)
        except JWTError:
            return None

    def resolve(self, token: str | None) -> Subject | None:
        if not token:
            return None

        payload = self.decode(token)
        if not payload:
            logger.debug("Rejected undecodable session token")
            return None

        user_id = payload.get("sub")
        role = payload.get("role")
        if not isinstance(user_id, str) or role not in ROLES:
            return None

        try:
            uid = UUID(user_id)
        except ValueError:
            return None

        return Subject(
            user_id=uid,
            role=role,
            email=payload.get("email"),
            name=payload.get("name"),
        )
