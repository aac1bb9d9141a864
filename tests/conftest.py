from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from techblog.adapters.auth.crypto import Argon2PasswordHasher, JWTIdentityProvider
from techblog.adapters.clock import FrozenClock
from techblog.adapters.sqlite.database import SQLiteDatabase
from techblog.adapters.sqlite.migrator import SQLiteMigrator
from techblog.adapters.sqlite.repos import SQLiteCommentRepo, SQLitePostRepo, SQLiteUserRepo
from techblog.api.deps import Settings
from techblog.api.main import create_app
from techblog.domain.entities import Subject, User
from techblog.rules.loader import load_rules
from techblog.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent
RULES_PATH = PROJECT_ROOT / "blog_rules.yaml"

TEST_SECRET = "test-secret-key"


@pytest.fixture
def rules() -> Rules:
    """Load the REAL rules file shipped at the project root."""
    return load_rules(RULES_PATH)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def database(tmp_path: Path) -> Iterator[SQLiteDatabase]:
    """Migrated SQLite database on a temp path."""
    db = SQLiteDatabase(str(tmp_path / "blog.db"))
    SQLiteMigrator(db).run_migrations()
    yield db
    db.close()


@pytest.fixture
def user_repo(database: SQLiteDatabase) -> SQLiteUserRepo:
    return SQLiteUserRepo(database)


@pytest.fixture
def post_repo(database: SQLiteDatabase) -> SQLitePostRepo:
    return SQLitePostRepo(database)


@pytest.fixture
def comment_repo(database: SQLiteDatabase) -> SQLiteCommentRepo:
    return SQLiteCommentRepo(database)


@pytest.fixture
def admin_user(user_repo: SQLiteUserRepo) -> User:
    return user_repo.save(
        User(name="Admin", email="admin@example.com", password_hash="hash", role="ADMIN")
    )


@pytest.fixture
def reader_user(user_repo: SQLiteUserRepo) -> User:
    return user_repo.save(
        User(name="Reader", email="reader@example.com", password_hash="hash", role="USER")
    )


@pytest.fixture
def admin_subject(admin_user: User) -> Subject:
    return Subject(user_id=admin_user.id, role="ADMIN", email=admin_user.email, name="Admin")


@pytest.fixture
def reader_subject(reader_user: User) -> Subject:
    return Subject(user_id=reader_user.id, role="USER", email=reader_user.email, name="Reader")


# --- API ---


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    s = Settings()
    s.data_dir = tmp_path / "data"
    s.db_path = str(s.data_dir / "blog.db")
    s.rules_path = RULES_PATH
    s.secret_key = TEST_SECRET
    return s


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    # Context manager runs the lifespan: rules, database, migrations
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api_users(client: TestClient, app: FastAPI) -> dict[str, User]:
    """An admin and a regular user persisted in the app's database."""
    repo = SQLiteUserRepo(app.state.database)
    hasher = Argon2PasswordHasher()
    admin = repo.save(
        User(
            name="Admin",
            email="admin@example.com",
            password_hash=hasher.hash_password("admin-password"),
            role="ADMIN",
        )
    )
    reader = repo.save(
        User(
            name="Reader",
            email="reader@example.com",
            password_hash=hasher.hash_password("reader-password"),
            role="USER",
        )
    )
    return {"admin": admin, "reader": reader}


def _bearer(user: User) -> dict[str, str]:
    token = JWTIdentityProvider(TEST_SECRET).create_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(api_users: dict[str, User]) -> dict[str, str]:
    return _bearer(api_users["admin"])


@pytest.fixture
def reader_headers(api_users: dict[str, User]) -> dict[str, str]:
    return _bearer(api_users["reader"])
