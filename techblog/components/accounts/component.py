import logging
import re
from uuid import uuid4

from techblog.domain.entities import User
from techblog.domain.errors import OperationError, UniqueViolation, validation_error
from techblog.rules.models import RegistrationRules

from .models import AccountOutput, LoginInput, RegisterInput
from .ports import PasswordHasherPort, TimePort, UserRepoPort

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

INVALID_CREDENTIALS = "Invalid email or password."


def _validate_registration(
    email: str, password: str, name: str | None, rules: RegistrationRules
) -> list[OperationError]:
    errors: list[OperationError] = []

    if not email or not password:
        errors.append(validation_error("Email and password are required."))
        return errors

    if len(email) > rules.email_max_length:
        errors.append(
            validation_error(
                f"Email must be at most {rules.email_max_length} characters.", "email"
            )
        )
    elif not EMAIL_PATTERN.match(email):
        errors.append(validation_error("Email address is invalid.", "email"))

    if not rules.password.min <= len(password) <= rules.password.max:
        errors.append(
            validation_error(
                f"Password must be between {rules.password.min} and "
                f"{rules.password.max} characters.",
                "password",
            )
        )

    if name is not None and len(name) > rules.name_max_length:
        errors.append(
            validation_error(f"Name must be at most {rules.name_max_length} characters.", "name")
        )

    return errors


def run_register(
    inp: RegisterInput,
    *,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    time: TimePort,
    rules: RegistrationRules | None = None,
) -> AccountOutput:
    rules = rules or RegistrationRules()

    email = (inp.email or "").strip().lower()
    password = inp.password or ""
    name = (inp.name or "").strip() or None

    errors = _validate_registration(email, password, name, rules)
    if errors:
        return AccountOutput(errors=errors, success=False)

    conflict = OperationError(kind="conflict", message="Email already registered.", field="email")
    if user_repo.get_by_email(email):
        return AccountOutput(errors=[conflict], success=False)

    user = User(
        id=uuid4(),
        name=name,
        email=email,
        password_hash=hasher.hash_password(password),
        role="USER",
        created_at=time.now_utc(),
    )
    try:
        user_repo.save(user)
    except UniqueViolation:
        # Lost a race with a concurrent registration of the same email
        return AccountOutput(errors=[conflict], success=False)

    logger.info("Registered user %s", user.id)
    return AccountOutput(user=user, success=True)


def run_login(
    inp: LoginInput,
    *,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
) -> AccountOutput:
    email = (inp.email or "").strip().lower()
    if not email or not inp.password:
        return AccountOutput(
            errors=[validation_error("Missing email or password.")], success=False
        )

    rejected = AccountOutput(
        errors=[OperationError(kind="unauthorized", message=INVALID_CREDENTIALS)],
        success=False,
    )

    user = user_repo.get_by_email(email)
    if not user or not user.password_hash:
        return rejected

    if not hasher.verify_password(inp.password, user.password_hash):
        return rejected

    return AccountOutput(user=user, success=True)
