import json
from datetime import datetime
from typing import Any
from uuid import UUID

from techblog.adapters.sqlite.database import SQLiteDatabase
from techblog.domain.entities import (
    AuthorView,
    Comment,
    CommentView,
    Post,
    PostDetail,
    PostListing,
    User,
)


def to_db_dt(dt: datetime | None) -> str | None:
    # Fixed-width timestamps keep lexical order equal to time order
    return dt.isoformat(timespec="microseconds") if dt else None


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def _author(row: dict[str, Any]) -> AuthorView:
    return AuthorView(name=row["author_name"], email=row["author_email"])


class SQLiteUserRepo:
    def __init__(self, database: SQLiteDatabase):
        self.database = database

    def _row_to_user(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=row["role"],
            created_at=parse_dt(row["created_at"]) or datetime.min,
        )

    def save(self, user: User) -> User:
        with self.database.transaction() as conn:
            conn.execute(
                """
                INSERT INTO users (id, name, email, password_hash, role, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    email=excluded.email,
                    password_hash=excluded.password_hash,
                    role=excluded.role
            """,
                (
                    str(user.id),
                    user.name,
                    user.email.lower(),
                    user.password_hash,
                    user.role,
                    to_db_dt(user.created_at),
                ),
            )
        return user

    def get_by_id(self, user_id: UUID) -> User | None:
        with self.database.transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
        return self._row_to_user(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        with self.database.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email.strip(),)
            ).fetchone()
        return self._row_to_user(row) if row else None

    def count(self) -> int:
        with self.database.transaction() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()
        return int(row["n"])


class SQLitePostRepo:
    def __init__(self, database: SQLiteDatabase):
        self.database = database

    def _row_to_post(self, row: dict[str, Any]) -> Post:
        return Post(
            id=UUID(row["id"]),
            title=row["title"],
            slug=row["slug"],
            excerpt=row["excerpt"],
            content=json.loads(row["content_json"]),
            status=row["status"],
            published_at=parse_dt(row["published_at"]),
            author_id=UUID(row["author_id"]),
            created_at=parse_dt(row["created_at"]) or datetime.min,
            updated_at=parse_dt(row["updated_at"]) or datetime.min,
        )

    def save(self, post: Post) -> Post:
        with self.database.transaction() as conn:
            conn.execute(
                """
                INSERT INTO posts (
                    id, title, slug, excerpt, content_json, status,
                    published_at, author_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    slug=excluded.slug,
                    excerpt=excluded.excerpt,
                    content_json=excluded.content_json,
                    status=excluded.status,
                    published_at=excluded.published_at,
                    updated_at=excluded.updated_at
            """,
                (
                    str(post.id),
                    post.title,
                    post.slug,
                    post.excerpt,
                    json.dumps(post.content),
                    post.status,
                    to_db_dt(post.published_at),
                    str(post.author_id),
                    to_db_dt(post.created_at),
                    to_db_dt(post.updated_at),
                ),
            )
        return post

    def get_by_id(self, post_id: UUID) -> Post | None:
        with self.database.transaction() as conn:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
        return self._row_to_post(row) if row else None

    def get_by_slug(self, slug: str, status: str | None = None) -> Post | None:
        query = "SELECT * FROM posts WHERE slug = ?"
        params: list[str] = [slug]
        if status:
            query += " AND status = ?"
            params.append(status)
        with self.database.transaction() as conn:
            row = conn.execute(query, params).fetchone()
        return self._row_to_post(row) if row else None

    def get_view_by_slug(self, slug: str, published_only: bool = True) -> PostDetail | None:
        query = """
            SELECT p.*, u.name AS author_name, u.email AS author_email
            FROM posts p JOIN users u ON u.id = p.author_id
            WHERE p.slug = ?
        """
        if published_only:
            query += " AND p.status = 'PUBLISHED'"
        with self.database.transaction() as conn:
            row = conn.execute(query, (slug,)).fetchone()
        if not row:
            return None
        post = self._row_to_post(row)
        return PostDetail(
            id=post.id,
            title=post.title,
            slug=post.slug,
            excerpt=post.excerpt,
            content=post.content,
            published_at=post.published_at,
            created_at=post.created_at,
            updated_at=post.updated_at,
            author=_author(row),
        )

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        query = "SELECT 1 FROM posts WHERE slug = ?"
        params: list[str] = [slug]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(str(exclude_id))
        with self.database.transaction() as conn:
            row = conn.execute(query, params).fetchone()
        return row is not None

    def list_page(
        self,
        *,
        published_only: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[PostListing], int]:
        """Return one page of listings and the total matching count."""
        where = "WHERE p.status = 'PUBLISHED'" if published_only else ""
        order = "p.published_at DESC" if published_only else "p.created_at DESC"

        with self.database.transaction() as conn:
            total_row = conn.execute(f"SELECT COUNT(*) AS n FROM posts p {where}").fetchone()
            rows = conn.execute(
                f"""
                SELECT p.*, u.name AS author_name, u.email AS author_email
                FROM posts p JOIN users u ON u.id = p.author_id
                {where}
                ORDER BY {order}
                LIMIT ? OFFSET ?
            """,
                (limit, offset),
            ).fetchall()

        items = [
            PostListing(
                id=UUID(row["id"]),
                title=row["title"],
                slug=row["slug"],
                excerpt=row["excerpt"],
                status=row["status"],
                published_at=parse_dt(row["published_at"]),
                created_at=parse_dt(row["created_at"]) or datetime.min,
                updated_at=parse_dt(row["updated_at"]) or datetime.min,
                author=_author(row) if published_only else None,
            )
            for row in rows
        ]
        return items, int(total_row["n"])

    def delete(self, post_id: UUID) -> int:
        """Delete a post and its comments. Returns the number of posts removed."""
        with self.database.transaction() as conn:
            # Dependent rows first, for databases opened without foreign keys
            conn.execute("DELETE FROM comments WHERE post_id = ?", (str(post_id),))
            cursor = conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))
            return cursor.rowcount

    def count(self) -> int:
        with self.database.transaction() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM posts").fetchone()
        return int(row["n"])


class SQLiteCommentRepo:
    def __init__(self, database: SQLiteDatabase):
        self.database = database

    _VIEW_QUERY = """
        SELECT c.*, u.name AS author_name, u.email AS author_email
        FROM comments c JOIN users u ON u.id = c.author_id
    """

    def _row_to_view(self, row: dict[str, Any]) -> CommentView:
        return CommentView(
            id=UUID(row["id"]),
            content=row["content"],
            parent_id=UUID(row["parent_id"]) if row["parent_id"] else None,
            created_at=parse_dt(row["created_at"]) or datetime.min,
            author=_author(row),
        )

    def save(self, comment: Comment) -> Comment:
        with self.database.transaction() as conn:
            conn.execute(
                """
                INSERT INTO comments (
                    id, content, post_id, author_id, parent_id, is_visible, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    str(comment.id),
                    comment.content,
                    str(comment.post_id),
                    str(comment.author_id),
                    str(comment.parent_id) if comment.parent_id else None,
                    1 if comment.is_visible else 0,
                    to_db_dt(comment.created_at),
                ),
            )
        return comment

    def get_by_id(self, comment_id: UUID) -> Comment | None:
        with self.database.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM comments WHERE id = ?", (str(comment_id),)
            ).fetchone()
        if not row:
            return None
        return Comment(
            id=UUID(row["id"]),
            content=row["content"],
            post_id=UUID(row["post_id"]),
            author_id=UUID(row["author_id"]),
            parent_id=UUID(row["parent_id"]) if row["parent_id"] else None,
            is_visible=bool(row["is_visible"]),
            created_at=parse_dt(row["created_at"]) or datetime.min,
        )

    def get_view(self, comment_id: UUID) -> CommentView | None:
        with self.database.transaction() as conn:
            row = conn.execute(self._VIEW_QUERY + " WHERE c.id = ?", (str(comment_id),)).fetchone()
        return self._row_to_view(row) if row else None

    def latest_created_at_by_author(self, author_id: UUID) -> datetime | None:
        with self.database.transaction() as conn:
            row = conn.execute(
                "SELECT MAX(created_at) AS latest FROM comments WHERE author_id = ?",
                (str(author_id),),
            ).fetchone()
        return parse_dt(row["latest"]) if row else None

    def list_visible_top_level(self, post_id: UUID) -> list[CommentView]:
        with self.database.transaction() as conn:
            rows = conn.execute(
                self._VIEW_QUERY
                + """
                WHERE c.post_id = ? AND c.is_visible = 1 AND c.parent_id IS NULL
                ORDER BY c.created_at DESC
            """,
                (str(post_id),),
            ).fetchall()
        return [self._row_to_view(row) for row in rows]

    def count(self) -> int:
        with self.database.transaction() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM comments").fetchone()
        return int(row["n"])
