"""Letterbox Utilities Module."""

from .formatting import format_timestamp, format_thread, format_roster

__all__ = ["format_timestamp", "format_thread", "format_roster"]
