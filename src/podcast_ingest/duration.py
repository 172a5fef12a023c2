"""Duration normalization for ``itunes:duration`` values.

Feeds encode durations as plain seconds, ``MM:SS`` or ``HH:MM:SS`` (and
occasionally as garbage). Everything normalizes to whole seconds; malformed
input degrades to 0 so a single bad episode never aborts feed ingestion.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Time conversion constants
SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600

# Duration parsing constants
DURATION_PARTS_HHMMSS = 3
DURATION_PARTS_MMSS = 2
DURATION_PARTS_SS = 1

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _parse_int_prefix(value: str) -> Optional[int]:
    """Parse the leading integer of a string, None when there is none.

    "12abc" -> 12, "abc" -> None, " 7 " -> 7.
    """
    match = _LEADING_INT_RE.match(value)
    if match is None:
        return None
    return int(match.group(1))


def parse_duration(value: Optional[Union[str, int, float]]) -> int:
    """Convert a duration encoding to integer seconds.

    Args:
        value: Raw ``itunes:duration`` value (string, number or None)

    Returns:
        Duration in whole seconds; 0 for absent, empty or malformed input

    Example:
        >>> parse_duration("01:23:45")
        5025
        >>> parse_duration("45:30")
        2730
        >>> parse_duration("90")
        90
        >>> parse_duration(90.7)
        90
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return int(math.floor(value))

    text = str(value).strip()
    if not text:
        return 0

    parsed = [_parse_int_prefix(part) for part in text.split(":")]
    if any(part is None for part in parsed):
        logger.debug("Non-numeric duration %r, using 0", text)
        return 0
    parts = [part for part in parsed if part is not None]

    if len(parts) == DURATION_PARTS_HHMMSS:
        hours, minutes, seconds = parts
        return hours * SECONDS_PER_HOUR + minutes * SECONDS_PER_MINUTE + seconds
    if len(parts) == DURATION_PARTS_MMSS:
        minutes, seconds = parts
        return minutes * SECONDS_PER_MINUTE + seconds
    if len(parts) == DURATION_PARTS_SS:
        return parts[0]

    logger.debug("Unexpected duration format %r, using 0", text)
    return 0


def format_duration(seconds: Union[int, float]) -> str:
    """Format seconds as ``H:MM:SS`` (when at least an hour) or ``M:SS``.

    ``parse_duration(format_duration(n)) == n`` for every non-negative int.
    Negative or non-finite input renders as ``"0:00"``.
    """
    if isinstance(seconds, float) and not math.isfinite(seconds):
        return "0:00"
    if seconds < 0:
        return "0:00"
    total = int(math.floor(seconds))
    hours, remainder = divmod(total, SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, SECONDS_PER_MINUTE)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_duration_friendly(seconds: Union[int, float]) -> str:
    """Format seconds as "1hr 30min", "45min 10sec" or "45sec"."""
    total = max(0, int(math.floor(seconds))) if math.isfinite(seconds) else 0
    hours, remainder = divmod(total, SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, SECONDS_PER_MINUTE)
    if hours > 0:
        return f"{hours}hr {minutes}min" if minutes > 0 else f"{hours}hr"
    if minutes > 0:
        return f"{minutes}min {secs}sec" if secs > 0 else f"{minutes}min"
    return f"{secs}sec"
