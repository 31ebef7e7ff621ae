"""
Letterbox Reaction Guard

Records likes on letters and replies, refusing a second like on the same
item from the same device.
"""

import logging
from typing import Any, Optional

from ..db.store import Store
from ..errors import DuplicateLike, ValidationError
from .history import HistoryStore, LIKED_LETTERS, LIKED_REPLIES, coerce_id
from .threads import ThreadRepository

logger = logging.getLogger(__name__)


def _item_id(value: Any, kind: str) -> int:
    try:
        return coerce_id(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {kind} id: {value!r}") from None


class ReactionGuard:
    """
    Like handling for the loaded thread.

    A successful like bumps the in-memory count by one without reloading,
    then adds the item to the device's like history. A failed insert leaves
    both untouched. The history check is advisory only; it cannot stop other
    devices from liking the same item.
    """

    def __init__(self, store: Store, threads: ThreadRepository, history: HistoryStore):
        self.store = store
        self.threads = threads
        self.history = history

    def has_liked_letter(self, letter_id: Any) -> bool:
        return _item_id(letter_id, "letter") in self.history.get(LIKED_LETTERS)

    def has_liked_reply(self, reply_id: Any) -> bool:
        return _item_id(reply_id, "reply") in self.history.get(LIKED_REPLIES)

    def like_letter(self, letter_id: Any) -> Optional[int]:
        """
        Like a letter.

        Returns:
            The letter's new in-memory like count, or None if the letter
            isn't part of the loaded thread

        Raises:
            ValidationError: bad identifier or no recipient selected
            DuplicateLike: this device already liked the letter (no store call)
            RemoteUnavailable: insert failed
        """
        item_id = _item_id(letter_id, "letter")

        liked = self.history.get(LIKED_LETTERS)
        if item_id in liked:
            logger.info(f"Duplicate like refused for letter {item_id}")
            raise DuplicateLike()

        recipient_id = self.threads.recipient_id
        if recipient_id is None:
            raise ValidationError("Pick a recipient first.")

        self.store.insert_like(item_id, recipient_id)

        count = None
        letter = self.threads.find_letter(item_id)
        if letter:
            letter.likes_count += 1
            count = letter.likes_count

        liked.add(item_id)
        self.history.put(LIKED_LETTERS, liked)

        logger.info(f"Letter {item_id} liked")
        return count

    def like_reply(self, reply_id: Any, parent_letter_id: Any) -> Optional[int]:
        """
        Like a reply threaded under parent_letter_id.

        Returns:
            The reply's new in-memory like count, or None if it isn't loaded

        Raises:
            ValidationError: bad identifier
            DuplicateLike: this device already liked the reply (no store call)
            RemoteUnavailable: insert failed
        """
        item_id = _item_id(reply_id, "reply")
        letter_id = _item_id(parent_letter_id, "letter")

        liked = self.history.get(LIKED_REPLIES)
        if item_id in liked:
            logger.info(f"Duplicate like refused for reply {item_id}")
            raise DuplicateLike()

        self.store.insert_reply_like(item_id)

        count = None
        letter = self.threads.find_letter(letter_id)
        reply = letter.find_reply(item_id) if letter else None
        if reply:
            reply.likes_count += 1
            count = reply.likes_count

        liked.add(item_id)
        self.history.put(LIKED_REPLIES, liked)

        logger.info(f"Reply {item_id} on letter {letter_id} liked")
        return count
