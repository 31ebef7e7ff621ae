"""
Letterbox Board Commands

Command line client for the board. The JSON like-history file stands in
for the device, so liking twice from the same machine is refused.
"""

import sys
import logging

from ..config import Config
from ..core.board import LetterBoard, create_store
from ..core.history import JsonFileHistoryStore
from ..errors import BoardError
from ..utils.formatting import format_roster, format_thread

logger = logging.getLogger(__name__)

BOARD_COMMANDS = ("recipients", "letters", "send", "reply", "like", "like-reply")


def open_board(config: Config) -> LetterBoard:
    """Build a board over the configured store and local like history."""
    store = create_store(config)
    history = JsonFileHistoryStore(config.history.path)
    return LetterBoard(store, history, config)


def run_board_command(args, config: Config) -> int:
    """
    Run one board command.

    Returns:
        Exit code (0 on success, 1 on any board error)
    """
    try:
        board = open_board(config)
    except BoardError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    try:
        board.load_roster()

        if args.command == "recipients":
            print(format_roster(board.recipients))
            return 0

        board.select_recipient(args.recipient)

        if args.command == "letters":
            pass
        elif args.command == "send":
            board.send_letter(args.text)
            print("Sent!")
        elif args.command == "reply":
            board.send_reply(args.letter, args.text)
            print("Reply posted.")
        elif args.command == "like":
            count = board.like_letter(args.letter)
            print(f"Liked letter #{args.letter}" + (f" ({count} likes)" if count is not None else ""))
            return 0
        elif args.command == "like-reply":
            count = board.like_reply(args.reply, args.letter)
            print(f"Liked reply #{args.reply}" + (f" ({count} likes)" if count is not None else ""))
            return 0

        print(format_thread(board.selected, board.letters))
        return 0

    except BoardError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        board.store.close()
