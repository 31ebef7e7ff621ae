"""
Letterbox Thread Repository

Loads a recipient's letters (with replies and like counts) and submits new
letters and replies. Every successful submission reloads the whole thread
from the store; nothing is merged locally.
"""

import logging
from enum import Enum
from typing import Optional

from ..db.models import Letter
from ..db.store import Store
from ..errors import ValidationError

logger = logging.getLogger(__name__)


MAX_BODY_LENGTH = 2000


class ThreadState(Enum):
    """What the thread view should show."""
    NO_SELECTION = "no_selection"
    LOADING = "loading"
    EMPTY = "empty"
    LOADED = "loaded"


class ThreadRepository:
    """
    Thread view state for one screen.

    `busy` is set while a load or submission is in flight. It is a soft
    debounce for the submit action, not a lock.
    """

    def __init__(self, store: Store, max_body_length: int = MAX_BODY_LENGTH):
        self.store = store
        self.max_body_length = max_body_length

        self.recipient_id: Optional[int] = None
        self.letters: list[Letter] = []
        self.busy = False

        # Compose state
        self.letter_draft = ""
        self.reply_drafts: dict[int, str] = {}
        self.open_replies: set[int] = set()

    @property
    def state(self) -> ThreadState:
        if self.recipient_id is None:
            return ThreadState.NO_SELECTION
        if self.busy:
            return ThreadState.LOADING
        if not self.letters:
            return ThreadState.EMPTY
        return ThreadState.LOADED

    @property
    def can_submit(self) -> bool:
        """Whether the letter compose action should be enabled."""
        return (
            not self.busy
            and self.recipient_id is not None
            and bool(self.letter_draft.strip())
        )

    def can_submit_reply(self, letter_id: int) -> bool:
        """Whether the reply action for letter_id should be enabled."""
        return (
            not self.busy
            and self.recipient_id is not None
            and bool(self.reply_drafts.get(letter_id, "").strip())
        )

    def find_letter(self, letter_id: int) -> Optional[Letter]:
        """Find a letter in the loaded thread."""
        for letter in self.letters:
            if letter.id == letter_id:
                return letter
        return None

    def list_thread(self, recipient_id: int) -> list[Letter]:
        """
        Load a recipient's letters, newest first, replies oldest first.

        Raises:
            RemoteUnavailable: store could not be read (previous thread kept)
        """
        self.recipient_id = recipient_id
        self.busy = True
        try:
            letters = self.store.list_thread(recipient_id)
        finally:
            self.busy = False

        self.letters = letters
        logger.debug(f"Loaded {len(letters)} letters for recipient {recipient_id}")
        return letters

    def _validate_body(self, body: str):
        if not body or not body.strip():
            raise ValidationError("Please write something first.")
        if len(body) > self.max_body_length:
            raise ValidationError(
                f"That's too long ({len(body)} characters, max {self.max_body_length})."
            )
        if self.busy:
            raise ValidationError("Still sending, please wait.")

    def submit_letter(self, recipient_id: Optional[int], body: Optional[str] = None) -> list[Letter]:
        """
        Send a letter, then reload the recipient's thread.

        Args:
            recipient_id: Selected recipient, None if nothing is selected
            body: Letter text; defaults to the current letter draft

        Raises:
            ValidationError: no recipient, blank or oversized body (no store call)
            RemoteUnavailable: insert or reload failed
        """
        if body is None:
            body = self.letter_draft
        else:
            self.letter_draft = body

        if recipient_id is None:
            raise ValidationError("Pick a recipient first.")
        self._validate_body(body)

        self.busy = True
        try:
            letter = self.store.insert_letter(recipient_id, body)
        finally:
            self.busy = False

        logger.info(f"Letter {letter.id} sent to recipient {recipient_id}")
        self.letter_draft = ""
        return self.list_thread(recipient_id)

    def submit_reply(self, letter_id: int, body: Optional[str] = None) -> list[Letter]:
        """
        Reply to a letter, then reload the selected recipient's thread.

        On success the letter's reply draft is cleared and its reply panel closed.

        Raises:
            ValidationError: no recipient, blank or oversized body (no store call)
            RemoteUnavailable: insert or reload failed
        """
        if body is None:
            body = self.reply_drafts.get(letter_id, "")
        else:
            self.reply_drafts[letter_id] = body

        if self.recipient_id is None:
            raise ValidationError("Pick a recipient first.")
        self._validate_body(body)

        self.busy = True
        try:
            reply = self.store.insert_reply(letter_id, body)
        finally:
            self.busy = False

        logger.info(f"Reply {reply.id} posted on letter {letter_id}")
        self.reply_drafts.pop(letter_id, None)
        self.open_replies.discard(letter_id)
        return self.list_thread(self.recipient_id)

    def toggle_reply_panel(self, letter_id: int) -> bool:
        """Open or close a letter's reply compose panel. Returns True if now open."""
        if letter_id in self.open_replies:
            self.open_replies.discard(letter_id)
            return False
        self.open_replies.add(letter_id)
        return True

    def set_reply_draft(self, letter_id: int, text: str):
        self.reply_drafts[letter_id] = text
