"""
Tests for the Letterbox thread repository and board screen
"""

import pytest
from unittest.mock import MagicMock

from letterbox.config import Config
from letterbox.core.board import LetterBoard
from letterbox.core.history import MemoryHistoryStore
from letterbox.core.threads import ThreadRepository, ThreadState
from letterbox.db.connection import Database
from letterbox.db.store import SQLiteStore
from letterbox.errors import RemoteUnavailable, ValidationError


class MockBoard:
    """Board over an in-memory store, with the store wrapped for call tracking."""

    def __init__(self, names=("A", "B")):
        self.db = Database(":memory:")
        self.db.initialize(recipients=names)
        self.real_store = SQLiteStore(self.db)
        self.store = MagicMock(wraps=self.real_store)
        self.history = MemoryHistoryStore()
        self.board = LetterBoard(self.store, self.history, Config())
        self.board.load_roster()


class TestSelection:
    """Tests for picking a recipient."""

    def setup_method(self):
        self.mock = MockBoard()
        self.board = self.mock.board

    def test_no_selection_state(self):
        """Test the thread starts with nothing selected."""
        assert self.board.state == ThreadState.NO_SELECTION
        assert self.board.selected is None

    def test_roster_scenario(self):
        """Test roster [A, B] and selecting A with no letters gives the empty state."""
        assert [(r.id, r.name) for r in self.board.recipients] == [(1, "A"), (2, "B")]

        letters = self.board.select_recipient(1)

        assert letters == []
        assert self.board.state == ThreadState.EMPTY
        assert not self.board.busy

    def test_select_by_name(self):
        """Test recipients can be selected by name, case-insensitively."""
        self.board.select_recipient("b")
        assert self.board.selected.name == "B"

    def test_select_unknown(self):
        """Test selecting someone outside the roster fails."""
        with pytest.raises(ValidationError):
            self.board.select_recipient("Zed")
        assert self.board.selected is None

    def test_select_blank(self):
        """Test selecting nothing asks for a recipient."""
        with pytest.raises(ValidationError, match="Pick a recipient"):
            self.board.select_recipient("")

    def test_loaded_state(self):
        """Test a recipient with letters shows the loaded state."""
        self.mock.real_store.insert_letter(1, "hi")
        self.board.select_recipient(1)
        assert self.board.state == ThreadState.LOADED


class TestLoading:
    """Tests for thread loading behaviour."""

    def test_busy_while_loading(self):
        """Test the busy flag is set while the store call is in flight."""
        store = MagicMock()
        repo = ThreadRepository(store)
        seen = {}

        def list_thread(recipient_id):
            seen["busy"] = repo.busy
            seen["state"] = repo.state
            return []

        store.list_thread.side_effect = list_thread
        repo.list_thread(5)

        assert seen == {"busy": True, "state": ThreadState.LOADING}
        assert repo.busy is False

    def test_failed_load_keeps_previous_thread(self):
        """Test a failed load keeps the letters from the last good load."""
        mock = MockBoard()
        mock.real_store.insert_letter(1, "still here")
        mock.board.select_recipient(1)

        mock.store.list_thread.side_effect = RemoteUnavailable()
        with pytest.raises(RemoteUnavailable):
            mock.board.refresh()

        assert [l.content for l in mock.board.letters] == ["still here"]
        assert not mock.board.busy

    def test_failed_roster_keeps_previous_roster(self):
        """Test a failed roster load keeps the last good roster."""
        mock = MockBoard()
        mock.store.list_recipients.side_effect = RemoteUnavailable()

        with pytest.raises(RemoteUnavailable):
            mock.board.load_roster()

        assert [r.name for r in mock.board.recipients] == ["A", "B"]

    def test_failed_first_roster_is_empty(self):
        """Test the roster stays empty when the first load fails."""
        store = MagicMock()
        store.list_recipients.side_effect = RemoteUnavailable()
        board = LetterBoard(store, MemoryHistoryStore())

        with pytest.raises(RemoteUnavailable):
            board.load_roster()
        assert board.recipients == []


class TestSubmitLetter:
    """Tests for sending letters."""

    def setup_method(self):
        self.mock = MockBoard()
        self.board = self.mock.board
        self.store = self.mock.store

    def test_blank_letter_never_writes(self):
        """Test empty and whitespace-only letters are rejected without a store call."""
        self.board.select_recipient(1)

        for body in ("", "   ", "\n\t "):
            with pytest.raises(ValidationError):
                self.board.send_letter(body)

        self.store.insert_letter.assert_not_called()

    def test_letter_without_recipient(self):
        """Test sending with no recipient selected is rejected without a store call."""
        with pytest.raises(ValidationError, match="Pick a recipient"):
            self.board.send_letter("hello")

        self.store.insert_letter.assert_not_called()

    def test_too_long_letter(self):
        """Test oversized letters are rejected locally."""
        config = Config()
        config.board.max_body_length = 10
        board = LetterBoard(self.store, MemoryHistoryStore(), config)
        board.load_roster()
        board.select_recipient(1)

        with pytest.raises(ValidationError, match="too long"):
            board.send_letter("x" * 11)
        self.store.insert_letter.assert_not_called()

    def test_send_reloads_thread(self):
        """Test a sent letter shows up only after the thread is reloaded."""
        self.board.select_recipient(1)
        self.store.list_thread.reset_mock()

        letters = self.board.send_letter("hello there")

        self.store.insert_letter.assert_called_once_with(1, "hello there")
        self.store.list_thread.assert_called_once_with(1)
        assert [l.content for l in letters] == ["hello there"]
        assert self.board.threads.letter_draft == ""

    def test_send_uses_draft(self):
        """Test sending without a body sends the current draft."""
        self.board.select_recipient(1)
        self.board.threads.letter_draft = "from the draft"
        assert self.board.threads.can_submit

        self.board.send_letter()

        self.store.insert_letter.assert_called_once_with(1, "from the draft")

    def test_failed_send_keeps_draft(self):
        """Test the draft survives a failed insert."""
        self.board.select_recipient(1)
        self.store.insert_letter.side_effect = RemoteUnavailable()

        with pytest.raises(RemoteUnavailable):
            self.board.send_letter("don't lose me")

        assert self.board.threads.letter_draft == "don't lose me"
        assert not self.board.busy

    def test_busy_blocks_submission(self):
        """Test submitting while busy is refused."""
        self.board.select_recipient(1)
        self.board.threads.busy = True

        assert not self.board.threads.can_submit
        with pytest.raises(ValidationError):
            self.board.send_letter("again")
        self.store.insert_letter.assert_not_called()

    def test_letters_sorted_after_sends(self):
        """Test the newest letter is first after several sends."""
        self.board.select_recipient(2)
        for text in ("one", "two", "three"):
            self.board.send_letter(text)

        assert [l.content for l in self.board.letters] == ["three", "two", "one"]


class TestSubmitReply:
    """Tests for replying to letters."""

    def setup_method(self):
        self.mock = MockBoard()
        self.board = self.mock.board
        self.store = self.mock.store
        self.board.select_recipient(1)
        self.letter_id = self.board.send_letter("original")[0].id

    def test_reply_positioned_after_existing(self):
        """Test a new reply appears after all earlier replies on the next load."""
        self.board.send_reply(self.letter_id, "first")
        self.board.send_reply(self.letter_id, "second")
        self.board.send_reply(self.letter_id, "x")

        letters = self.board.refresh()
        replies = letters[0].replies
        assert [r.content for r in replies] == ["first", "second", "x"]

    def test_blank_reply_never_writes(self):
        """Test blank replies are rejected without a store call."""
        with pytest.raises(ValidationError):
            self.board.send_reply(self.letter_id, "   ")
        self.store.insert_reply.assert_not_called()

    def test_reply_clears_draft_and_closes_panel(self):
        """Test a successful reply clears its draft and collapses its panel."""
        assert self.board.toggle_reply_panel(self.letter_id) is True
        self.board.threads.set_reply_draft(self.letter_id, "thanks")

        self.board.send_reply(self.letter_id)

        self.store.insert_reply.assert_called_once_with(self.letter_id, "thanks")
        assert self.letter_id not in self.board.threads.reply_drafts
        assert self.letter_id not in self.board.threads.open_replies

    def test_failed_reply_keeps_draft_and_panel(self):
        """Test a failed reply keeps the draft and the panel open."""
        self.board.toggle_reply_panel(self.letter_id)
        self.store.insert_reply.side_effect = RemoteUnavailable()

        with pytest.raises(RemoteUnavailable):
            self.board.send_reply(self.letter_id, "try again")

        assert self.board.threads.reply_drafts[self.letter_id] == "try again"
        assert self.letter_id in self.board.threads.open_replies

    def test_toggle_reply_panel(self):
        """Test the reply panel opens and closes."""
        assert self.board.toggle_reply_panel(self.letter_id) is True
        assert self.board.toggle_reply_panel(self.letter_id) is False

    def test_can_submit_reply(self):
        """Test the reply action is enabled only for a non-blank draft while idle."""
        threads = self.board.threads
        assert not threads.can_submit_reply(self.letter_id)

        threads.set_reply_draft(self.letter_id, "  ")
        assert not threads.can_submit_reply(self.letter_id)

        threads.set_reply_draft(self.letter_id, "nice")
        assert threads.can_submit_reply(self.letter_id)

        threads.busy = True
        assert not threads.can_submit_reply(self.letter_id)
