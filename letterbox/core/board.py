"""
Letterbox Main Board Class

Ties the roster, thread and reaction components to one store and one
device-local like history. One LetterBoard is one visitor's screen.
"""

import logging
from typing import Any, Optional, Union

from ..config import Config
from ..db.models import Letter, Recipient
from ..db.store import Store
from ..errors import ConfigError, ValidationError
from .history import HistoryStore
from .reactions import ReactionGuard
from .roster import RosterReader
from .threads import ThreadRepository, ThreadState

logger = logging.getLogger(__name__)


def create_store(config: Config) -> Store:
    """
    Build the configured store backend.

    Raises:
        ConfigError: unknown backend or missing remote settings
    """
    backend = config.store.backend

    if backend == "sqlite":
        from ..db.connection import Database
        from ..db.store import SQLiteStore

        db = Database(config.database.path)
        db.initialize(recipients=config.board.recipients)
        logger.info(f"Using SQLite store at {config.database.path}")
        return SQLiteStore(db)

    if backend == "rest":
        from ..db.rest import RestStore

        if not config.remote.url or not config.remote.api_key:
            raise ConfigError("remote.url and remote.api_key are required for the rest backend")
        logger.info(f"Using REST store at {config.remote.url}")
        return RestStore(
            config.remote.url,
            config.remote.api_key,
            timeout=config.remote.timeout_seconds
        )

    raise ConfigError(f"Unknown store backend: {backend!r}")


class LetterBoard:
    """
    One screen of the anonymous letter board.

    Responsibilities:
    - Load the roster and track the selected recipient
    - Load and refresh the selected recipient's thread
    - Send letters and replies
    - Like letters and replies through the device's like history
    """

    def __init__(self, store: Store, history: HistoryStore, config: Optional[Config] = None):
        self.config = config or Config()
        self.store = store
        self.history = history

        self.roster = RosterReader(store)
        self.threads = ThreadRepository(store, max_body_length=self.config.board.max_body_length)
        self.reactions = ReactionGuard(store, self.threads, history)

        self.selected: Optional[Recipient] = None

    @property
    def recipients(self) -> list[Recipient]:
        return self.roster.recipients

    @property
    def letters(self) -> list[Letter]:
        return self.threads.letters

    @property
    def state(self) -> ThreadState:
        return self.threads.state

    @property
    def busy(self) -> bool:
        return self.threads.busy

    def load_roster(self) -> list[Recipient]:
        """Load the roster. Raises RemoteUnavailable on failure."""
        return self.roster.list_recipients()

    def select_recipient(self, key: Union[Recipient, int, str], load: bool = True) -> list[Letter]:
        """
        Select a recipient from the loaded roster and load their thread.

        The selection sticks even if the load fails, so a retry or a
        submission still targets the chosen recipient. With load=False the
        thread is left empty; submissions reload it anyway.

        Raises:
            ValidationError: recipient not in the roster
            RemoteUnavailable: thread could not be loaded
        """
        if key is None or str(key).strip() == "":
            raise ValidationError("Pick a recipient first.")

        recipient = self.roster.find(key)
        if recipient is None:
            raise ValidationError(f"No such recipient: {key}")

        self.selected = recipient
        if not load:
            self.threads.recipient_id = recipient.id
            return self.threads.letters
        return self.threads.list_thread(recipient.id)

    def refresh(self) -> list[Letter]:
        """Reload the selected recipient's thread."""
        if self.selected is None:
            raise ValidationError("Pick a recipient first.")
        return self.threads.list_thread(self.selected.id)

    def send_letter(self, body: Optional[str] = None) -> list[Letter]:
        """Send a letter to the selected recipient and reload the thread."""
        recipient_id = self.selected.id if self.selected else None
        return self.threads.submit_letter(recipient_id, body)

    def send_reply(self, letter_id: int, body: Optional[str] = None) -> list[Letter]:
        """Reply to a letter and reload the thread."""
        return self.threads.submit_reply(letter_id, body)

    def like_letter(self, letter_id: Any) -> Optional[int]:
        return self.reactions.like_letter(letter_id)

    def like_reply(self, reply_id: Any, parent_letter_id: Any) -> Optional[int]:
        return self.reactions.like_reply(reply_id, parent_letter_id)

    def toggle_reply_panel(self, letter_id: int) -> bool:
        return self.threads.toggle_reply_panel(letter_id)
