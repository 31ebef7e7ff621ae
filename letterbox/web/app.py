"""
Letterbox Web Application

Flask app factory plus the per-request board helpers shared by the page
and API blueprints.
"""

import logging
from typing import Optional

from flask import Flask, current_app, g, request, session

from ..config import Config
from ..core.board import LetterBoard, create_store
from ..core.history import MappingHistoryStore
from ..core.rate_limiter import RateLimiter
from ..db.store import Store
from ..errors import (
    BoardError,
    ConfigError,
    DuplicateLike,
    RateLimited,
    RemoteUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = "letterbox"

_STATUS_CODES = {
    ValidationError: 400,
    DuplicateLike: 409,
    RateLimited: 429,
    RemoteUnavailable: 503,
    ConfigError: 500,
}


def status_for(error: BoardError) -> int:
    """HTTP status for a board error."""
    for cls in type(error).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return 500


def create_app(config: Optional[Config] = None, store: Optional[Store] = None) -> Flask:
    """
    Create the Flask application.

    Args:
        config: Loaded configuration (defaults if omitted)
        store: Store to use; built from config when omitted
    """
    config = config or Config()

    app = Flask(__name__)
    app.secret_key = config.web.secret_key
    app.config["BOARD_NAME"] = config.board.name
    app.config["BOARD_TAGLINE"] = config.board.tagline

    app.extensions[EXTENSION_KEY] = {
        "config": config,
        "store": store or create_store(config),
        "rate_limiter": RateLimiter(
            letters_per_minute=config.rate_limits.letters_per_minute,
            replies_per_minute=config.rate_limits.replies_per_minute,
            likes_per_minute=config.rate_limits.likes_per_minute
        ),
    }

    from .views import bp as views_bp
    from .api import bp as api_bp

    app.register_blueprint(views_bp)
    app.register_blueprint(api_bp)

    logger.info(f"Web app created for board '{config.board.name}'")
    return app


def get_board() -> LetterBoard:
    """
    Return this request's board.

    The visitor's like history lives in their signed session cookie.
    """
    if "board" not in g:
        ext = current_app.extensions[EXTENSION_KEY]
        g.board = LetterBoard(
            ext["store"],
            MappingHistoryStore(session),
            ext["config"]
        )
    return g.board


def check_rate(kind: str):
    """Raise RateLimited if this client is over its limit for kind."""
    limiter: RateLimiter = current_app.extensions[EXTENSION_KEY]["rate_limiter"]
    limiter.require(request.remote_addr or "unknown", kind)
