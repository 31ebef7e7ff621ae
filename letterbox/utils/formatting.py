"""
Letterbox Formatting Utilities

Helper functions for formatting output.
"""

from datetime import datetime

from ..db.models import Letter, Recipient


def format_timestamp(timestamp_us: int) -> str:
    """
    Format microsecond timestamp to human-readable local time.

    Args:
        timestamp_us: Microseconds since epoch

    Returns:
        Formatted string like "2025-12-10 14:32"
    """
    if not timestamp_us:
        return "Unknown"

    timestamp_s = timestamp_us / 1_000_000
    dt = datetime.fromtimestamp(timestamp_s)
    return dt.strftime("%Y-%m-%d %H:%M")


def indent(text: str, prefix: str) -> str:
    """Prefix every line of text."""
    return "\n".join(prefix + line for line in text.splitlines() or [""])


def format_roster(recipients: list[Recipient]) -> str:
    """Format the roster as one "id  name" line per recipient."""
    if not recipients:
        return "No recipients yet."
    width = max(len(str(r.id)) for r in recipients)
    return "\n".join(f"{str(r.id).rjust(width)}  {r.name}" for r in recipients)


def format_letter(letter: Letter) -> str:
    """Format a letter with its replies for the terminal."""
    lines = [
        f"#{letter.id}  {format_timestamp(letter.created_at_us)}  [{letter.likes_count} likes]",
        indent(letter.content, "  "),
    ]
    for reply in letter.replies:
        lines.append(
            f"    > #{reply.id}  {format_timestamp(reply.created_at_us)}  [{reply.likes_count} likes]"
        )
        lines.append(indent(reply.content, "      "))
    return "\n".join(lines)


def format_thread(recipient: Recipient, letters: list[Letter]) -> str:
    """Format a recipient's whole thread, or the empty-state notice."""
    header = f"{len(letters)} anonymous letters for {recipient.name}"
    if not letters:
        return f"{header}\nNo letters yet. Be the first to write one."
    return "\n\n".join([header] + [format_letter(letter) for letter in letters])
