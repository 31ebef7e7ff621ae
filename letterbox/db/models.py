"""
Letterbox Data Models

Dataclasses representing store entities.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Recipient:
    """Someone letters can be addressed to."""
    id: int = 0
    name: str = ""


@dataclass
class Reply:
    """Anonymous reply threaded under a letter."""
    id: int = 0
    letter_id: int = 0
    content: str = ""
    created_at_us: int = 0
    likes_count: int = 0  # derived: number of reply_likes rows at fetch time


@dataclass
class Letter:
    """Anonymous letter addressed to a recipient."""
    id: int = 0
    friend_id: int = 0
    content: str = ""
    created_at_us: int = 0
    likes_count: int = 0  # derived: number of likes rows at fetch time
    replies: list[Reply] = field(default_factory=list)  # oldest first

    def find_reply(self, reply_id: int) -> Optional[Reply]:
        """Find a reply in this letter's thread."""
        for reply in self.replies:
            if reply.id == reply_id:
                return reply
        return None


@dataclass
class Like:
    """One like event on a letter."""
    id: Optional[int] = None
    letter_id: int = 0
    friend_id: int = 0


@dataclass
class ReplyLike:
    """One like event on a reply."""
    id: Optional[int] = None
    reply_id: int = 0
