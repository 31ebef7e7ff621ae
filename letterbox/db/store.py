"""
Letterbox Store Interface

The narrow repository the board talks to, plus the SQLite implementation.
"""

import sqlite3
import time
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager

from ..errors import RemoteUnavailable
from .connection import Database
from .models import Recipient, Letter, Reply, Like, ReplyLike

logger = logging.getLogger(__name__)


class Store(ABC):
    """
    Repository interface over the letter store.

    Implementations raise RemoteUnavailable for any failure to reach the
    store or any rejected request. list_thread returns letters newest first,
    each carrying its replies oldest first, with likes_count derived from
    the like rows present at fetch time.
    """

    @abstractmethod
    def list_recipients(self) -> list[Recipient]:
        """Return the roster sorted by name."""

    @abstractmethod
    def list_thread(self, recipient_id: int) -> list[Letter]:
        """Return a recipient's letters with replies and like counts."""

    @abstractmethod
    def insert_letter(self, recipient_id: int, content: str) -> Letter:
        """Store a new letter."""

    @abstractmethod
    def insert_reply(self, letter_id: int, content: str) -> Reply:
        """Store a new reply under a letter."""

    @abstractmethod
    def insert_like(self, letter_id: int, friend_id: int) -> Like:
        """Record one like on a letter."""

    @abstractmethod
    def insert_reply_like(self, reply_id: int) -> ReplyLike:
        """Record one like on a reply."""

    def close(self):
        """Release any held connection."""


class SQLiteStore(Store):
    """Store backed by the local SQLite database."""

    def __init__(self, db: Database):
        self.db = db

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except sqlite3.Error as e:
            logger.error(f"SQLite store failed to {action}: {e}")
            raise RemoteUnavailable() from e

    def list_recipients(self) -> list[Recipient]:
        with self._guard("list recipients"):
            rows = self.db.fetchall("SELECT id, name FROM recipients ORDER BY name, id")
        return [Recipient(id=row["id"], name=row["name"]) for row in rows]

    def list_thread(self, recipient_id: int) -> list[Letter]:
        with self._guard(f"load letters for recipient {recipient_id}"):
            letter_rows = self.db.fetchall("""
                SELECT l.*,
                       (SELECT COUNT(*) FROM likes WHERE likes.letter_id = l.id) AS likes_count
                FROM letters l
                WHERE l.friend_id = ?
                ORDER BY l.created_at_us DESC, l.id DESC
            """, (recipient_id,))

            letters = [self._row_to_letter(row) for row in letter_rows]
            if not letters:
                return []

            by_id = {letter.id: letter for letter in letters}
            placeholders = ",".join("?" for _ in by_id)
            reply_rows = self.db.fetchall(f"""
                SELECT r.*,
                       (SELECT COUNT(*) FROM reply_likes WHERE reply_likes.reply_id = r.id) AS likes_count
                FROM replies r
                WHERE r.letter_id IN ({placeholders})
                ORDER BY r.created_at_us ASC, r.id ASC
            """, tuple(by_id))

        for row in reply_rows:
            by_id[row["letter_id"]].replies.append(self._row_to_reply(row))

        return letters

    def insert_letter(self, recipient_id: int, content: str) -> Letter:
        now_us = int(time.time() * 1_000_000)
        with self._guard(f"insert letter for recipient {recipient_id}"):
            cursor = self.db.execute("""
                INSERT INTO letters (friend_id, content, created_at_us)
                VALUES (?, ?, ?)
            """, (recipient_id, content, now_us))

        return Letter(
            id=cursor.lastrowid,
            friend_id=recipient_id,
            content=content,
            created_at_us=now_us
        )

    def insert_reply(self, letter_id: int, content: str) -> Reply:
        now_us = int(time.time() * 1_000_000)
        with self._guard(f"insert reply on letter {letter_id}"):
            cursor = self.db.execute("""
                INSERT INTO replies (letter_id, content, created_at_us)
                VALUES (?, ?, ?)
            """, (letter_id, content, now_us))

        return Reply(
            id=cursor.lastrowid,
            letter_id=letter_id,
            content=content,
            created_at_us=now_us
        )

    def insert_like(self, letter_id: int, friend_id: int) -> Like:
        with self._guard(f"like letter {letter_id}"):
            cursor = self.db.execute(
                "INSERT INTO likes (letter_id, friend_id) VALUES (?, ?)",
                (letter_id, friend_id)
            )
        return Like(id=cursor.lastrowid, letter_id=letter_id, friend_id=friend_id)

    def insert_reply_like(self, reply_id: int) -> ReplyLike:
        with self._guard(f"like reply {reply_id}"):
            cursor = self.db.execute(
                "INSERT INTO reply_likes (reply_id) VALUES (?)",
                (reply_id,)
            )
        return ReplyLike(id=cursor.lastrowid, reply_id=reply_id)

    def close(self):
        self.db.close()

    def _row_to_letter(self, row) -> Letter:
        """Convert database row to Letter object."""
        return Letter(
            id=row["id"],
            friend_id=row["friend_id"],
            content=row["content"],
            created_at_us=row["created_at_us"],
            likes_count=row["likes_count"]
        )

    def _row_to_reply(self, row) -> Reply:
        """Convert database row to Reply object."""
        return Reply(
            id=row["id"],
            letter_id=row["letter_id"],
            content=row["content"],
            created_at_us=row["created_at_us"],
            likes_count=row["likes_count"]
        )
