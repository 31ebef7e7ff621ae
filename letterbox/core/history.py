"""
Letterbox Like History

Device-local record of what this device has already liked. The record is
advisory: it only stops the same device from liking twice and is never
reconciled with the store.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, MutableMapping, Optional

logger = logging.getLogger(__name__)

LIKED_LETTERS = "likedLetters"
LIKED_REPLIES = "likedReplies"


def coerce_id(value: Any) -> int:
    """
    Coerce an item identifier to int.

    Raises ValueError for anything that is not a whole number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an identifier: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Not an identifier: {value!r}")
        return int(value)
    return int(str(value).strip())


def decode_ids(raw: Any) -> set[int]:
    """Decode a stored list of identifiers, skipping entries that aren't numbers."""
    if not isinstance(raw, list):
        return set()

    ids = set()
    for item in raw:
        try:
            ids.add(coerce_id(item))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unreadable like history entry: {item!r}")
    return ids


def encode_ids(ids: Iterable[int]) -> list[int]:
    return sorted(ids)


class HistoryStore(ABC):
    """Key-value capability holding sets of liked identifiers."""

    @abstractmethod
    def get(self, key: str) -> set[int]:
        """Return the identifiers stored under key (empty if none)."""

    @abstractmethod
    def put(self, key: str, ids: set[int]):
        """Replace the identifiers stored under key."""


class MemoryHistoryStore(HistoryStore):
    """History kept only for the life of the process."""

    def __init__(self, initial: Optional[dict[str, Iterable[int]]] = None):
        self._data: dict[str, set[int]] = {
            key: set(ids) for key, ids in (initial or {}).items()
        }

    def get(self, key: str) -> set[int]:
        return set(self._data.get(key, ()))

    def put(self, key: str, ids: set[int]):
        self._data[key] = set(ids)


class JsonFileHistoryStore(HistoryStore):
    """
    History stored as a JSON object in a file.

    The whole file is read on every get and rewritten on every put.
    A missing or unreadable file counts as an empty history.
    """

    def __init__(self, path: str):
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read like history {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> set[int]:
        return decode_ids(self._load().get(key))

    def put(self, key: str, ids: set[int]):
        data = self._load()
        data[key] = encode_ids(ids)

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            # The like is already stored remotely; only the local guard is lost
            logger.error(f"Could not write like history {self.path}: {e}")


class MappingHistoryStore(HistoryStore):
    """
    History kept in any mutable mapping of JSON-encoded strings.

    Values are stored the way a browser's localStorage holds them, as a
    string-encoded array. The web front end hands in the Flask session.
    """

    def __init__(self, mapping: MutableMapping[str, Any]):
        self.mapping = mapping

    def get(self, key: str) -> set[int]:
        raw = self.mapping.get(key)
        if raw is None:
            return set()
        try:
            return decode_ids(json.loads(raw))
        except (TypeError, ValueError):
            logger.warning(f"Discarding unreadable like history under {key}")
            return set()

    def put(self, key: str, ids: set[int]):
        self.mapping[key] = json.dumps(encode_ids(ids))
