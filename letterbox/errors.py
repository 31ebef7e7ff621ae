"""
Letterbox Errors

Every failure the board surfaces to a visitor derives from BoardError.
"""


class BoardError(Exception):
    """Base class for errors shown to the visitor as a notice."""

    default_message = "Something went wrong."

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class RemoteUnavailable(BoardError):
    """The store could not be reached or rejected the request."""

    default_message = "The letter store is unavailable. Please try again."


class ValidationError(BoardError):
    """A submission was rejected locally, before reaching the store."""

    default_message = "Please write something first."


class DuplicateLike(BoardError):
    """This device has already liked the item."""

    default_message = "You already liked this."


class RateLimited(BoardError):
    """Too many submissions from one client."""

    default_message = "Slow down a little and try again shortly."

    def __init__(self, message: str = "", retry_after: float = 0.0):
        super().__init__(message)
        self.retry_after = retry_after


class ConfigError(BoardError):
    """Configuration is invalid."""

    default_message = "Invalid configuration."
