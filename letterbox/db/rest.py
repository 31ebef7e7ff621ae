"""
Letterbox PostgREST Store

Talks to a hosted PostgREST endpoint (such as a Supabase project) over HTTP.
Like counts are derived by embedding the like rows and counting them.
"""

import re
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from ..errors import RemoteUnavailable
from .models import Recipient, Letter, Reply, Like, ReplyLike
from .store import Store

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

LETTER_SELECT = "*,likes(id),replies(*,reply_likes(id))"

_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp_us(value: Optional[str]) -> int:
    """
    Convert a PostgREST timestamp to microseconds since epoch.

    Timestamps without an offset are taken as UTC.
    """
    if not value:
        return 0

    text = value.strip().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only accepts 3 or 6 fractional digits
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)

    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp()) * 1_000_000 + dt.microsecond


class RestStore(Store):
    """Store backed by a PostgREST API."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the REST store.

        Args:
            url: Project URL; "/rest/v1" is appended when missing
            api_key: Key sent as both apikey and bearer token
            timeout: Seconds before a request is abandoned
            transport: Optional httpx transport (used by tests)
        """
        base_url = url.rstrip("/")
        if not base_url.endswith("/rest/v1"):
            base_url += "/rest/v1"

        self.base_url = base_url
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
        )

    def close(self):
        """Close the underlying HTTP client."""
        self._client.close()

    @contextmanager
    def _reading(self, action: str):
        """Map a row the store sent in an unexpected shape to RemoteUnavailable."""
        try:
            yield
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Store sent a malformed row while trying to {action}: {e!r}")
            raise RemoteUnavailable() from e

    def _request(self, method: str, table: str, action: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, f"/{table}", **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Store rejected request to {action} "
                f"({e.response.status_code}): {e.response.text}"
            )
            raise RemoteUnavailable() from e
        except httpx.HTTPError as e:
            logger.error(f"Store unreachable while trying to {action}: {e}")
            raise RemoteUnavailable() from e

    def _get(self, table: str, action: str, params: dict[str, str]) -> list[dict[str, Any]]:
        response = self._request("GET", table, action, params=params)
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Store sent malformed JSON while trying to {action}")
            raise RemoteUnavailable() from e
        return data or []

    def _insert(self, table: str, action: str, row: dict[str, Any]) -> Optional[dict[str, Any]]:
        response = self._request(
            "POST", table, action,
            json=[row],
            headers={"Prefer": "return=representation"},
        )
        if not response.content:
            return None
        try:
            data = response.json()
        except ValueError:
            return None
        return data[0] if isinstance(data, list) and data else None

    def list_recipients(self) -> list[Recipient]:
        rows = self._get("recipients", "list recipients", {
            "select": "id,name",
            "order": "name.asc,id.asc",
        })
        with self._reading("list recipients"):
            return [Recipient(id=int(row["id"]), name=row["name"]) for row in rows]

    def list_thread(self, recipient_id: int) -> list[Letter]:
        action = f"load letters for recipient {recipient_id}"
        rows = self._get("letters", action, {
            "select": LETTER_SELECT,
            "friend_id": f"eq.{recipient_id}",
            "order": "created_at.desc,id.desc",
            "replies.order": "created_at.asc,id.asc",
        })
        with self._reading(action):
            return [self._row_to_letter(row) for row in rows]

    def insert_letter(self, recipient_id: int, content: str) -> Letter:
        row = self._insert("letters", f"insert letter for recipient {recipient_id}", {
            "friend_id": recipient_id,
            "content": content,
        }) or {}
        return Letter(
            id=int(row.get("id", 0)),
            friend_id=recipient_id,
            content=content,
            created_at_us=parse_timestamp_us(row.get("created_at"))
        )

    def insert_reply(self, letter_id: int, content: str) -> Reply:
        row = self._insert("replies", f"insert reply on letter {letter_id}", {
            "letter_id": letter_id,
            "content": content,
        }) or {}
        return Reply(
            id=int(row.get("id", 0)),
            letter_id=letter_id,
            content=content,
            created_at_us=parse_timestamp_us(row.get("created_at"))
        )

    def insert_like(self, letter_id: int, friend_id: int) -> Like:
        row = self._insert("likes", f"like letter {letter_id}", {
            "letter_id": letter_id,
            "friend_id": friend_id,
        }) or {}
        return Like(id=row.get("id"), letter_id=letter_id, friend_id=friend_id)

    def insert_reply_like(self, reply_id: int) -> ReplyLike:
        row = self._insert("reply_likes", f"like reply {reply_id}", {
            "reply_id": reply_id,
        }) or {}
        return ReplyLike(id=row.get("id"), reply_id=reply_id)

    def _row_to_letter(self, row: dict[str, Any]) -> Letter:
        """Convert an API row (with embedded likes and replies) to a Letter."""
        replies = [self._row_to_reply(r) for r in row.get("replies") or []]
        # Embedded ordering is requested, but sort anyway in case the
        # endpoint ignores the replies.order hint
        replies.sort(key=lambda r: (r.created_at_us, r.id))
        return Letter(
            id=int(row["id"]),
            friend_id=int(row["friend_id"]),
            content=row.get("content") or "",
            created_at_us=parse_timestamp_us(row.get("created_at")),
            likes_count=len(row.get("likes") or []),
            replies=replies
        )

    def _row_to_reply(self, row: dict[str, Any]) -> Reply:
        """Convert an API row to a Reply."""
        return Reply(
            id=int(row["id"]),
            letter_id=int(row["letter_id"]),
            content=row.get("content") or "",
            created_at_us=parse_timestamp_us(row.get("created_at")),
            likes_count=len(row.get("reply_likes") or [])
        )
