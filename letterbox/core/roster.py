"""
Letterbox Roster Reader

Loads the list of people letters can be addressed to.
"""

import logging
from typing import Optional, Union

from ..db.models import Recipient
from ..db.store import Store

logger = logging.getLogger(__name__)


class RosterReader:
    """
    Read-only view of the recipient roster.

    The last successfully loaded roster stays in `recipients` when a later
    load fails; it is empty until the first load succeeds.
    """

    def __init__(self, store: Store):
        self.store = store
        self.recipients: list[Recipient] = []

    def list_recipients(self) -> list[Recipient]:
        """
        Fetch the roster sorted by name.

        Raises:
            RemoteUnavailable: store could not be read (roster left unchanged)
        """
        recipients = self.store.list_recipients()
        self.recipients = recipients
        logger.debug(f"Loaded {len(recipients)} recipients")
        return recipients

    def find(self, key: Union[Recipient, int, str]) -> Optional[Recipient]:
        """Find a loaded recipient by object, identifier or name (case-insensitive)."""
        if isinstance(key, Recipient):
            key = key.id

        if isinstance(key, int) or str(key).strip().isdigit():
            recipient_id = int(key)
            for recipient in self.recipients:
                if recipient.id == recipient_id:
                    return recipient

        name = str(key).strip().casefold()
        for recipient in self.recipients:
            if recipient.name.casefold() == name:
                return recipient

        return None
