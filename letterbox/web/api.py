"""
Letterbox JSON API

Same operations as the page, as JSON. Board errors become
{"error": ..., "message": ...} with a matching status code.
"""

import math
from dataclasses import asdict

from flask import Blueprint, jsonify, request

from ..errors import BoardError, RateLimited
from .app import check_rate, get_board, status_for

bp = Blueprint("api", __name__, url_prefix="/api")


@bp.errorhandler(BoardError)
def handle_board_error(error: BoardError):
    response = jsonify({"error": type(error).__name__, "message": error.message})
    response.status_code = status_for(error)
    if isinstance(error, RateLimited):
        response.headers["Retry-After"] = str(max(1, math.ceil(error.retry_after)))
    return response


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def _thread_response(board, status: int = 200):
    return jsonify({
        "recipient": asdict(board.selected),
        "state": board.state.value,
        "letters": [asdict(letter) for letter in board.letters],
    }), status


@bp.get("/recipients")
def list_recipients():
    board = get_board()
    recipients = board.load_roster()
    return jsonify({"recipients": [asdict(r) for r in recipients]})


@bp.get("/recipients/<int:recipient_id>/letters")
def list_letters(recipient_id: int):
    board = get_board()
    board.load_roster()
    board.select_recipient(recipient_id)
    return _thread_response(board)


@bp.post("/recipients/<int:recipient_id>/letters")
def send_letter(recipient_id: int):
    board = get_board()
    check_rate("letter")
    board.load_roster()
    board.select_recipient(recipient_id, load=False)
    board.send_letter(str(_payload().get("content") or ""))
    return _thread_response(board, 201)


@bp.post("/letters/<int:letter_id>/replies")
def send_reply(letter_id: int):
    board = get_board()
    payload = _payload()
    check_rate("reply")
    board.load_roster()
    board.select_recipient(payload.get("recipient_id"), load=False)
    board.send_reply(letter_id, str(payload.get("content") or ""))
    return _thread_response(board, 201)


@bp.post("/letters/<int:letter_id>/like")
def like_letter(letter_id: int):
    board = get_board()
    check_rate("like")
    board.load_roster()
    board.select_recipient(_payload().get("recipient_id"))
    count = board.like_letter(letter_id)
    return jsonify({"letter_id": letter_id, "likes_count": count})


@bp.post("/replies/<int:reply_id>/like")
def like_reply(reply_id: int):
    board = get_board()
    payload = _payload()
    check_rate("like")
    board.load_roster()
    board.select_recipient(payload.get("recipient_id"))
    count = board.like_reply(reply_id, payload.get("letter_id"))
    return jsonify({"reply_id": reply_id, "likes_count": count})
