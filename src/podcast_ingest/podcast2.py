"""Podcasting 2.0 namespace extraction.

Applied identically to a ``<channel>`` and to each ``<item>``. Only the tags the
site consumes are read: transcript, chapters, person, funding and guid.
"""

from __future__ import annotations

import logging

# Bandit: ElementTree usage limited to typing references
import xml.etree.ElementTree as ET  # nosec B405
from typing import List, Optional, Sequence, Tuple

from . import xml_nodes
from .config_constants import (
    DEFAULT_CHAPTERS_TYPE,
    DEFAULT_TRANSCRIPT_TYPE,
    TRANSCRIPT_TYPE_PREFERENCE,
)
from .models import ChaptersRef, FundingLink, PersonTag, Podcast2Tags, TranscriptRef

logger = logging.getLogger(__name__)


def choose_transcript(
    candidates: Sequence[TranscriptRef],
    prefer_types: Sequence[str] = TRANSCRIPT_TYPE_PREFERENCE,
) -> Optional[TranscriptRef]:
    """Select one transcript from the formats a feed offers.

    Preference follows ``prefer_types`` (VTT, then SubRip, then plain text by
    default), otherwise the first candidate regardless of type. Types compare
    exactly as declared.

    Args:
        candidates: Transcript references in document order
        prefer_types: MIME types in order of preference

    Returns:
        The selected reference, or None when there are no candidates
    """
    if not candidates:
        return None
    for preferred in prefer_types:
        for candidate in candidates:
            if candidate.type == preferred:
                return candidate
    return candidates[0]


def _extract_transcript(node: ET.Element) -> Optional[TranscriptRef]:
    candidates: List[TranscriptRef] = []
    for el in xml_nodes.children(node, "podcast:transcript"):
        candidates.append(
            TranscriptRef(
                url=xml_nodes.attr_or_text(el, "url") or "",
                type=xml_nodes.attr(el, "type") or DEFAULT_TRANSCRIPT_TYPE,
                language=xml_nodes.attr(el, "language"),
            )
        )
    chosen = choose_transcript(candidates)
    if chosen is None or not chosen.url:
        return None
    if len(candidates) > 1:
        logger.debug("Selected %s transcript out of %d offered", chosen.type, len(candidates))
    return chosen


def _extract_chapters(node: ET.Element) -> Optional[ChaptersRef]:
    el = xml_nodes.child(node, "podcast:chapters")
    if el is None:
        return None
    return ChaptersRef(
        url=xml_nodes.attr_or_text(el, "url") or "",
        type=xml_nodes.attr(el, "type") or DEFAULT_CHAPTERS_TYPE,
    )


def _extract_persons(node: ET.Element) -> Optional[Tuple[PersonTag, ...]]:
    elements = xml_nodes.children(node, "podcast:person")
    if not elements:
        return None
    return tuple(
        PersonTag(
            name=xml_nodes.text_or_attr(el, "name") or "",
            role=xml_nodes.attr(el, "role"),
            group=xml_nodes.attr(el, "group"),
            img=xml_nodes.attr(el, "img"),
            href=xml_nodes.attr(el, "href"),
        )
        for el in elements
    )


def _extract_funding(node: ET.Element) -> Optional[Tuple[FundingLink, ...]]:
    elements = xml_nodes.children(node, "podcast:funding")
    if not elements:
        return None
    return tuple(
        FundingLink(
            url=xml_nodes.attr(el, "url") or "",
            text=xml_nodes.node_text(el) or "",
        )
        for el in elements
    )


def extract_podcast2_tags(node: Optional[ET.Element]) -> Optional[Podcast2Tags]:
    """Extract Podcasting 2.0 tags from a channel or item element.

    Args:
        node: ``<channel>`` or ``<item>`` element

    Returns:
        A ``Podcast2Tags`` block, or None when none of its tags are present
    """
    if node is None:
        return None
    tags = Podcast2Tags(
        transcript=_extract_transcript(node),
        chapters=_extract_chapters(node),
        persons=_extract_persons(node),
        funding=_extract_funding(node),
        guid=xml_nodes.child_text(node, "podcast:guid"),
    )
    if tags.is_empty():
        return None
    return tags
