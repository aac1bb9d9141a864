import logging
import os
import sqlite3
from pathlib import Path

from techblog.adapters.sqlite.database import SQLiteDatabase

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


class SQLiteMigrator:
    def __init__(self, database: SQLiteDatabase, migrations_dir: str | Path = MIGRATIONS_DIR):
        self.database = database
        self.migrations_dir = str(migrations_dir)

    def _ensure_migration_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)
        conn.commit()

    def _get_applied_migrations(self, conn: sqlite3.Connection) -> set[str]:
        cursor = conn.execute("SELECT filename FROM _migrations")
        return {row["filename"] for row in cursor.fetchall()}

    def pending(self) -> list[str]:
        conn = self.database.connection()
        self._ensure_migration_table(conn)
        applied = self._get_applied_migrations(conn)
        files = sorted(f for f in os.listdir(self.migrations_dir) if f.endswith(".sql"))
        return [f for f in files if f not in applied]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        applied_now = []
        for filename in self.pending():
            logger.info("Applying migration: %s", filename)
            self._apply_migration(filename)
            applied_now.append(filename)

        logger.info("All migrations applied.")
        return applied_now

    def _read_up_script(self, filename: str) -> str:
        path = os.path.join(self.migrations_dir, filename)
        with open(path) as f:
            content = f.read()

        # Files start with the Up part; anything after "-- Down" is ignored
        if "-- Down" in content:
            return content.split("-- Down")[0]
        return content

    def _apply_migration(self, filename: str) -> None:
        script = self._read_up_script(filename)
        conn = self.database.connection()
        try:
            conn.executescript(script)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (filename,))
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise RuntimeError(f"Migration {filename} failed: {e}") from e
