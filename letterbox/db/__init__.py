"""Letterbox Database Module - store interface and backends."""

from .connection import Database
from .models import Recipient, Letter, Reply, Like, ReplyLike
from .store import Store, SQLiteStore
from .rest import RestStore

__all__ = [
    "Database",
    "Recipient",
    "Letter",
    "Reply",
    "Like",
    "ReplyLike",
    "Store",
    "SQLiteStore",
    "RestStore",
]
