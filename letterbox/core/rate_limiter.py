"""
Letterbox Submission Limits

Each client address gets a token bucket per kind of submission (letter,
reply, like). A board-wide bucket per kind, ten times larger, caps the total.
A board token is only spent when the client's own bucket allows the
submission, so a client hammering the board exhausts its own bucket and
nobody else's.

One RateLimiter is shared by every request thread of the web app.
"""

import logging
import threading
import time
from typing import Callable

from ..errors import RateLimited

logger = logging.getLogger(__name__)

BOARD_MULTIPLIER = 10
SWEEP_INTERVAL = 300  # seconds


class TokenBucket:
    """
    Holds up to `capacity` tokens, refilled continuously at `per_second`.

    Not synchronized; RateLimiter only touches buckets under its lock.
    """

    def __init__(self, capacity: int, per_second: float, now: float):
        self.capacity = capacity
        self.per_second = per_second
        self.level = float(capacity)
        self.stamp = now

    def _refill(self, now: float):
        self.level = min(self.capacity, self.level + (now - self.stamp) * self.per_second)
        self.stamp = now

    def ready(self, now: float) -> bool:
        self._refill(now)
        return self.level >= 1

    def take(self):
        self.level -= 1

    def wait(self, now: float) -> float:
        """Seconds until one token is available."""
        self._refill(now)
        return max(0.0, (1 - self.level) / self.per_second)

    def full(self, now: float) -> bool:
        self._refill(now)
        return self.level >= self.capacity


class RateLimiter:
    """Per-client submission limits, with a board-wide ceiling."""

    def __init__(
        self,
        letters_per_minute: int = 5,
        replies_per_minute: int = 10,
        likes_per_minute: int = 30,
        clock: Callable[[], float] = time.monotonic
    ):
        self.per_minute = {
            "letter": letters_per_minute,
            "reply": replies_per_minute,
            "like": likes_per_minute,
        }
        self._clock = clock
        self._lock = threading.Lock()

        now = clock()
        self._clients: dict[tuple[str, str], TokenBucket] = {}
        self._board = {
            kind: self._new_bucket(kind, now, BOARD_MULTIPLIER)
            for kind in self.per_minute
        }
        self._last_sweep = now

        logger.debug(f"RateLimiter initialized: {self.per_minute}")

    def _new_bucket(self, kind: str, now: float, scale: int = 1) -> TokenBucket:
        limit = self.per_minute[kind] * scale
        return TokenBucket(limit, limit / 60.0, now)

    @property
    def client_count(self) -> int:
        """Distinct client addresses currently tracked."""
        with self._lock:
            return len({client for client, _ in self._clients})

    def acquire(self, client: str, kind: str) -> float:
        """
        Spend one token for a client's submission.

        Returns:
            0.0 if allowed, otherwise the seconds to wait. A refused
            attempt spends nothing.
        """
        if kind not in self.per_minute:
            raise ValueError(f"Unknown submission kind: {kind}")

        with self._lock:
            now = self._clock()
            if now - self._last_sweep > SWEEP_INTERVAL:
                self._sweep(now)

            own = self._clients.get((client, kind))
            if own is None:
                own = self._clients[(client, kind)] = self._new_bucket(kind, now)

            if not own.ready(now):
                logger.warning(f"Rate limit exceeded for {client} ({kind})")
                return own.wait(now)

            board = self._board[kind]
            if not board.ready(now):
                logger.warning(f"Board-wide {kind} limit reached")
                return board.wait(now)

            own.take()
            board.take()
            return 0.0

    def check(self, client: str, kind: str = "letter") -> bool:
        return self.acquire(client, kind) == 0.0

    def require(self, client: str, kind: str = "letter"):
        """Like check(), but raise RateLimited carrying the wait instead of returning False."""
        wait = self.acquire(client, kind)
        if wait > 0:
            raise RateLimited(retry_after=wait)

    def _sweep(self, now: float):
        # A full bucket is the same as a fresh one, so dropping it loses nothing
        idle = [key for key, bucket in self._clients.items() if bucket.full(now)]
        for key in idle:
            del self._clients[key]
        self._last_sweep = now

        if idle:
            logger.debug(f"Dropped {len(idle)} idle rate limit buckets")
