"""
Letterbox Page Views

The single server-rendered page and the form posts it makes. Notices are
flashed; a failed letter or reply re-renders the page with the draft kept.
"""

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from ..core.board import LetterBoard
from ..core.history import LIKED_LETTERS, LIKED_REPLIES
from ..core.threads import ThreadState
from ..errors import BoardError, RemoteUnavailable
from ..utils.formatting import format_timestamp
from .app import check_rate, get_board, status_for

logger = logging.getLogger(__name__)

bp = Blueprint("board", __name__)


def _render(board: LetterBoard, status: int = 200):
    return render_template(
        "index.html",
        board=board,
        ThreadState=ThreadState,
        format_timestamp=format_timestamp,
        liked_letters=board.history.get(LIKED_LETTERS),
        liked_replies=board.history.get(LIKED_REPLIES),
    ), status


def _back_to_thread(board: LetterBoard):
    if board.selected is None:
        return redirect(url_for("board.index"))
    return redirect(url_for("board.index", recipient=board.selected.id))


def _reload_for_display(board: LetterBoard):
    """Reload the thread after a failed submission so the page isn't blank."""
    if board.selected is None or board.letters:
        return
    try:
        board.refresh()
    except RemoteUnavailable:
        logger.warning(f"Could not reload thread for recipient {board.selected.id}")


@bp.get("/")
def index():
    board = get_board()
    try:
        board.load_roster()
        recipient = request.args.get("recipient")
        if recipient:
            board.select_recipient(recipient)
    except BoardError as e:
        flash(e.message, "error")
        return _render(board, status_for(e))

    reply_to = request.args.get("reply", type=int)
    if reply_to is not None:
        board.toggle_reply_panel(reply_to)

    return _render(board)


@bp.post("/letters")
def send_letter():
    board = get_board()
    content = request.form.get("content", "")
    board.threads.letter_draft = content

    try:
        check_rate("letter")
        board.load_roster()
        board.select_recipient(request.form.get("recipient_id"), load=False)
        board.send_letter(content)
    except BoardError as e:
        flash(e.message, "error")
        _reload_for_display(board)
        return _render(board, status_for(e))

    flash("Sent!", "success")
    return _back_to_thread(board)


@bp.post("/letters/<int:letter_id>/replies")
def send_reply(letter_id: int):
    board = get_board()
    content = request.form.get("content", "")
    board.threads.set_reply_draft(letter_id, content)

    try:
        check_rate("reply")
        board.load_roster()
        board.select_recipient(request.form.get("recipient_id"), load=False)
        board.send_reply(letter_id, content)
    except BoardError as e:
        flash(e.message, "error")
        board.threads.open_replies.add(letter_id)
        _reload_for_display(board)
        return _render(board, status_for(e))

    flash("Reply posted.", "success")
    return _back_to_thread(board)


@bp.post("/letters/<int:letter_id>/like")
def like_letter(letter_id: int):
    board = get_board()
    try:
        check_rate("like")
        board.load_roster()
        board.select_recipient(request.form.get("recipient_id"), load=False)
        board.like_letter(letter_id)
    except BoardError as e:
        flash(e.message, "error")
    return _back_to_thread(board)


@bp.post("/replies/<int:reply_id>/like")
def like_reply(reply_id: int):
    board = get_board()
    try:
        check_rate("like")
        board.load_roster()
        board.select_recipient(request.form.get("recipient_id"), load=False)
        board.like_reply(reply_id, request.form.get("letter_id"))
    except BoardError as e:
        flash(e.message, "error")
    return _back_to_thread(board)
