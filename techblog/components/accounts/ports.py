from datetime import datetime
from typing import Protocol
from uuid import UUID

from techblog.domain.entities import User


class UserRepoPort(Protocol):
    def get_by_email(self, email: str) -> User | None: ...
    def get_by_id(self, user_id: UUID) -> User | None: ...
    def save(self, user: User) -> User: ...


class PasswordHasherPort(Protocol):
    def hash_password(self, password: str) -> str: ...
    def verify_password(self, plain: str, hashed: str) -> bool: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
