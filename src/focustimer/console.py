"""Formatting for the single in-place status line."""
from __future__ import annotations

LINE_WIDTH = 64


def format_time(seconds: float) -> str:
    whole = int(max(0, seconds))
    minutes, remainder = divmod(whole, 60)
    return f"{minutes:02d}:{remainder:02d}"


def pad(text: str, width: int = LINE_WIDTH) -> str:
    if len(text) >= width:
        return text
    return text + " " * (width - len(text))


def clear_line(width: int = LINE_WIDTH) -> str:
    return "\r" + " " * width + "\r"


def status_line(
    label: str,
    cycle: int,
    total: int,
    remaining_seconds: float,
    *,
    paused: bool = False,
    width: int = LINE_WIDTH,
) -> str:
    """Build the carriage-return prefixed status line, without a newline."""
    text = f"{label} | cycle {cycle}/{total} | {format_time(remaining_seconds)}"
    if paused:
        text += " (paused)"
    return "\r" + pad(text, width)
