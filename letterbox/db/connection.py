"""
Letterbox Database Connection Manager

SQLite database with WAL mode so web request threads can read while one writes.
"""

import sqlite3
import logging
import time
from pathlib import Path
from typing import Optional, Iterable

logger = logging.getLogger(__name__)


class Database:
    """
    SQLite database manager for Letterbox.

    Uses WAL mode for concurrent reads. Pass ":memory:" for a throwaway database.
    """

    def __init__(self, path: str):
        """
        Initialize database connection.

        Args:
            path: Path to SQLite database file
        """
        self.path = path
        self._conn: Optional[sqlite3.Connection] = None
        self._initialized = False

    @property
    def in_memory(self) -> bool:
        return self.path == ":memory:"

    def initialize(self, recipients: Iterable[str] = ()):
        """
        Initialize database connection and schema.

        Args:
            recipients: Roster names to seed if not already present
        """
        if not self.in_memory:
            Path(self.path).expanduser().parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(
            self.path if self.in_memory else str(Path(self.path).expanduser()),
            check_same_thread=False,
            isolation_level=None  # Autocommit mode
        )

        # Enable WAL mode for concurrent reads
        self._conn.execute("PRAGMA journal_mode=WAL")

        # Enable foreign keys
        self._conn.execute("PRAGMA foreign_keys=ON")

        # Use Row factory for dict-like access
        self._conn.row_factory = sqlite3.Row

        self._run_migrations()
        self.seed_recipients(recipients)

        self._initialized = True
        logger.info(
            f"Database initialized: {self.path} "
            f"({self.count_letters()} letters, {self.count_replies()} replies)"
        )

    def _run_migrations(self):
        """Run database migrations."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY,
                name TEXT UNIQUE NOT NULL,
                applied_at INTEGER NOT NULL
            )
        """)

        applied = {
            row[0] for row in
            self._conn.execute("SELECT name FROM _migrations").fetchall()
        }

        migrations = [
            ("001_initial", self._migration_001_initial),
        ]

        for name, func in migrations:
            if name not in applied:
                logger.info(f"Running migration: {name}")
                func()
                self._conn.execute(
                    "INSERT INTO _migrations (name, applied_at) VALUES (?, ?)",
                    (name, int(time.time() * 1_000_000))
                )

    def _migration_001_initial(self):
        """Initial database schema."""
        self._conn.executescript("""
            -- Roster
            CREATE TABLE IF NOT EXISTS recipients (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                name            TEXT UNIQUE NOT NULL
            );

            -- Letters addressed to a recipient
            CREATE TABLE IF NOT EXISTS letters (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                friend_id       INTEGER NOT NULL REFERENCES recipients(id) ON DELETE CASCADE,
                content         TEXT NOT NULL,
                created_at_us   INTEGER NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_letters_friend ON letters(friend_id, created_at_us);

            -- Likes on letters
            CREATE TABLE IF NOT EXISTS likes (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                letter_id       INTEGER NOT NULL REFERENCES letters(id) ON DELETE CASCADE,
                friend_id       INTEGER REFERENCES recipients(id) ON DELETE SET NULL
            );
            CREATE INDEX IF NOT EXISTS idx_likes_letter ON likes(letter_id);

            -- Replies threaded under a letter
            CREATE TABLE IF NOT EXISTS replies (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                letter_id       INTEGER NOT NULL REFERENCES letters(id) ON DELETE CASCADE,
                content         TEXT NOT NULL,
                created_at_us   INTEGER NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_replies_letter ON replies(letter_id, created_at_us);

            -- Likes on replies
            CREATE TABLE IF NOT EXISTS reply_likes (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                reply_id        INTEGER NOT NULL REFERENCES replies(id) ON DELETE CASCADE
            );
            CREATE INDEX IF NOT EXISTS idx_reply_likes_reply ON reply_likes(reply_id);
        """)

    def seed_recipients(self, names: Iterable[str]):
        """Add roster names that are not present yet."""
        names = [n.strip() for n in names if n and n.strip()]
        if not names:
            return
        self._conn.executemany(
            "INSERT OR IGNORE INTO recipients (name) VALUES (?)",
            [(n,) for n in names]
        )
        logger.debug(f"Seeded roster with {len(names)} names")

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Database is not open")
        return self._conn

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL query."""
        return self._connection().execute(sql, params)

    def fetchone(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute query and fetch one result."""
        return self._connection().execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Execute query and fetch all results."""
        return self._connection().execute(sql, params).fetchall()

    def close(self):
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("Database connection closed")

    # === Utility Methods ===

    def count_letters(self) -> int:
        """Count total letters."""
        row = self.fetchone("SELECT COUNT(*) FROM letters")
        return row[0] if row else 0

    def count_replies(self) -> int:
        """Count total replies."""
        row = self.fetchone("SELECT COUNT(*) FROM replies")
        return row[0] if row else 0
