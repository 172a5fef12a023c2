"""URL slug derivation for episodes and people."""

from __future__ import annotations

import re
from typing import Any, Optional

from .config_constants import MAX_SLUG_LENGTH

_NON_ALNUM_RUN_RE = re.compile(r"[^a-z0-9]+")
_HYPHEN_RUN_RE = re.compile(r"-{2,}")

# ASCII word characters, matching the browser-side slugging of person names
_PERSON_STRIP_RE = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE_RUN_RE = re.compile(r"\s+")


def _truncate_at_word_boundary(slug: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Cut a slug to at most ``max_length`` characters on a hyphen boundary.

    A slug that is a single over-long word is hard-cut, since it has no
    boundary to break on.
    """
    if len(slug) <= max_length:
        return slug
    cut = slug[:max_length]
    # The cut already ends on a whole word when the next character is a separator
    if slug[max_length] != "-":
        boundary = cut.rfind("-")
        if boundary > 0:
            cut = cut[:boundary]
    return cut.rstrip("-")


def generate_slug(title: Any, episode_number: Optional[int] = None) -> str:
    """Derive a URL slug from an episode title.

    Steps: lowercase, ``&`` becomes ``and``, straight apostrophes are dropped,
    every other run of characters outside ``[a-z0-9]`` becomes one hyphen,
    hyphens are collapsed and trimmed, the episode number (if given, even 0 or
    negative) is prepended, and the result is cut to 100 characters on a word
    boundary. Uniqueness is not guaranteed; colliding slugs are not deduplicated.

    Args:
        title: Free text title (coerced to str; None yields "")
        episode_number: Optional ``itunes:episode`` number to prefix

    Returns:
        The slug, or "" when the title yields no slug characters

    Example:
        >>> generate_slug("Salt & Pepper")
        'salt-and-pepper'
        >>> generate_slug("My Episode", 42)
        '42-my-episode'
    """
    if title is None:
        return ""
    slug = str(title).lower()
    slug = slug.replace("&", "and")
    slug = slug.replace("'", "")
    slug = _NON_ALNUM_RUN_RE.sub("-", slug)
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    slug = slug.strip("-")
    if not slug:
        return ""

    if episode_number is not None:
        slug = f"{episode_number}-{slug}"

    return _truncate_at_word_boundary(slug)


def person_slug(name: Any) -> str:
    """Derive a slug from a person's display name.

    Simpler than ``generate_slug``: no ampersand rewriting and no truncation.

    Example:
        >>> person_slug("Jane O'Host")
        'jane-ohost'
    """
    if name is None:
        return ""
    slug = str(name).strip().lower()
    slug = _PERSON_STRIP_RE.sub("", slug)
    slug = _WHITESPACE_RUN_RE.sub("-", slug)
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")
