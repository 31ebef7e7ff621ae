"""Letterbox Core Module - board components, like history and rate limiting."""

from .board import LetterBoard, create_store
from .roster import RosterReader
from .threads import ThreadRepository, ThreadState
from .reactions import ReactionGuard
from .history import HistoryStore, MemoryHistoryStore, JsonFileHistoryStore, MappingHistoryStore
from .rate_limiter import RateLimiter

__all__ = [
    "LetterBoard",
    "create_store",
    "RosterReader",
    "ThreadRepository",
    "ThreadState",
    "ReactionGuard",
    "HistoryStore",
    "MemoryHistoryStore",
    "JsonFileHistoryStore",
    "MappingHistoryStore",
    "RateLimiter",
]
