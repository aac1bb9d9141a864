import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from techblog.adapters.auth.crypto import Argon2PasswordHasher
from techblog.adapters.clock import SystemClock
from techblog.adapters.sqlite.database import SQLiteDatabase
from techblog.adapters.sqlite.migrator import SQLiteMigrator
from techblog.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo
from techblog.api.deps import Settings
from techblog.domain.entities import Post, User
from techblog.domain.errors import StorageError
from techblog.rules.loader import load_rules

logger = logging.getLogger("cli")

DEFAULT_ADMIN_EMAIL = "admin@techblog.local"
DEFAULT_ADMIN_PASSWORD = "ChangeMe123!"
DEFAULT_ADMIN_NAME = "Admin"

SAMPLE_POSTS: tuple[dict[str, str], ...] = (
    {
        "title": "Welcome to the Tech Blog",
        "slug": "welcome-to-tech-blog",
        "excerpt": "The first post on the blog. Welcome aboard.",
        "content": "The first full post. This is where we share engineering notes.",
    },
    {
        "title": "FastAPI Development Guide",
        "slug": "fastapi-development-guide",
        "excerpt": "Building modern full-stack services with FastAPI.",
        "content": "FastAPI is a Python web framework built on type hints and pydantic.",
    },
    {
        "title": "Working with SQLite",
        "slug": "working-with-sqlite",
        "excerpt": "Everyday SQLite usage and a few advanced features.",
        "content": "SQLite is an embedded relational database with transactional writes.",
    },
)


@dataclass
class SeedResult:
    admin: User
    posts_written: int


def seed(
    database: SQLiteDatabase,
    *,
    email: str,
    password: str,
    name: str,
    hasher: Any,
    time: Any,
) -> SeedResult:
    """
    Upsert the admin account and the sample posts.

    Running it again refreshes the admin's name, role and password and
    rewrites the sample posts in place.
    """
    users = SQLiteUserRepo(database)
    posts = SQLitePostRepo(database)
    now = time.now_utc()
    password_hash = hasher.hash_password(password)

    existing = users.get_by_email(email)
    if existing:
        admin = existing.model_copy(
            update={"name": name, "role": "ADMIN", "password_hash": password_hash}
        )
    else:
        admin = User(
            name=name,
            email=email.strip().lower(),
            password_hash=password_hash,
            role="ADMIN",
            created_at=now,
        )
    users.save(admin)

    written = 0
    for data in SAMPLE_POSTS:
        current = posts.get_by_slug(data["slug"])
        post = Post(
            title=data["title"],
            slug=data["slug"],
            excerpt=data["excerpt"],
            content=data["content"],
            status="PUBLISHED",
            published_at=now,
            author_id=admin.id,
            created_at=now,
            updated_at=now,
        )
        if current:
            post = post.model_copy(update={"id": current.id, "created_at": current.created_at})
        posts.save(post)
        written += 1

    return SeedResult(admin=admin, posts_written=written)


def handle_migrate(database: SQLiteDatabase) -> None:
    applied = SQLiteMigrator(database).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_seed(database: SQLiteDatabase) -> None:
    SQLiteMigrator(database).run_migrations()
    password = os.environ.get("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)
    result = seed(
        database,
        email=os.environ.get("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL),
        password=password,
        name=os.environ.get("ADMIN_NAME", DEFAULT_ADMIN_NAME),
        hasher=Argon2PasswordHasher(),
        time=SystemClock(),
    )
    print(f"Seeded admin user:\n  Email: {result.admin.email}\n  Temporary Password: {password}")
    print(f"Seeded {result.posts_written} test posts")


def handle_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run(
        "techblog.api.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Techblog CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # seed
    subparsers.add_parser("seed", help="Create the admin account and sample posts")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    args = parser.parse_args(argv)

    if args.command == "serve":
        handle_serve(args)
        return

    settings = Settings()
    if not Path(settings.rules_path).exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    load_rules(settings.rules_path)

    database = SQLiteDatabase(settings.db_path)
    try:
        if args.command == "migrate":
            handle_migrate(database)
        elif args.command == "seed":
            handle_seed(database)
    except StorageError as e:
        logger.error("%s failed: %s", args.command, e)
        sys.exit(1)
    finally:
        database.close()


if __name__ == "__main__":
    main()
