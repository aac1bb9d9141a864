from dataclasses import dataclass, field

from techblog.domain.entities import User
from techblog.domain.errors import OperationError


@dataclass(frozen=True)
class RegisterInput:
    email: str | None
    password: str | None
    name: str | None = None


@dataclass(frozen=True)
class LoginInput:
    email: str | None
    password: str | None


@dataclass
class AccountOutput:
    user: User | None = None
    errors: list[OperationError] = field(default_factory=list)
    success: bool = False
