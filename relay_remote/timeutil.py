"""Best-effort parsing of the dates sent by a remote."""

from __future__ import annotations

import re
from datetime import datetime

_EPOCH_RE = re.compile(r"^(\d+)(?:\.(\d+))?$")


def parse_time(text: str | None) -> tuple[int, int] | None:
    """Parse a date into ``(seconds, microseconds)`` since the epoch.

    Accepts ISO 8601 (``2024-03-10T18:22:05.123456Z``, with an offset, or
    naive local time) and epoch seconds with an optional fraction
    (``1710094925.123456``). Returns None if the text is not a date.
    """
    if not text:
        return None
    text = text.strip()

    match = _EPOCH_RE.match(text)
    if match:
        fraction = (match.group(2) or "")[:6]
        return int(match.group(1)), int(fraction.ljust(6, "0")) if fraction else 0

    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        date = datetime.fromisoformat(text)
    except ValueError:
        return None
    try:
        seconds = int(date.replace(microsecond=0).timestamp())
    except (OverflowError, OSError, ValueError):
        return None
    return seconds, date.microsecond
