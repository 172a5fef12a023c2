"""RSS feed mapping into typed ``Podcast`` / ``Episode`` records."""

from __future__ import annotations

import logging
import re

# Bandit: parsing handled via defusedxml safe APIs
import xml.etree.ElementTree as ET  # nosec B405
from typing import Any, Callable, List, Optional, Tuple, TYPE_CHECKING, Union

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring as safe_fromstring, ParseError as DefusedXMLParseError

from . import downloader, xml_nodes
from .config_constants import (
    DEFAULT_AUDIO_TYPE,
    DEFAULT_AUTHOR,
    DEFAULT_EPISODE_TITLE,
    DEFAULT_PODCAST_TITLE,
)
from .duration import parse_duration
from .exceptions import MalformedXmlError, MissingChannelError
from .models import Episode, Podcast, PodcastFeed
from .podcast2 import extract_podcast2_tags
from .slugs import generate_slug

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)

EPISODE_TYPES = ("full", "trailer", "bonus")
DEFAULT_EPISODE_TYPE = "full"
PODCAST_TYPES = ("episodic", "serial")
DEFAULT_PODCAST_TYPE = "episodic"

_TRUE_VALUES = frozenset({"true", "yes", "1"})
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

FetchFn = Callable[..., downloader.FetchResult]


def parse_boolean(value: Any) -> bool:
    """Coerce an RSS boolean-ish value.

    "true", "yes" and "1" (any case) are True; everything else is False.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


def parse_int(value: Any) -> Optional[int]:
    """Parse the leading integer of a value ("42", " 42 ", "42a" -> 42), else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT_RE.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def parse_episode_type(value: Optional[str]) -> str:
    """Map ``itunes:episodeType`` case-insensitively; unknown or absent is "full"."""
    if not value:
        return DEFAULT_EPISODE_TYPE
    lowered = value.strip().lower()
    return lowered if lowered in EPISODE_TYPES else DEFAULT_EPISODE_TYPE


def parse_podcast_type(value: Optional[str]) -> str:
    if value and value.strip().lower() == "serial":
        return "serial"
    return DEFAULT_PODCAST_TYPE


def parse_keywords(value: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Split a comma-separated ``itunes:keywords`` string, dropping empty tokens."""
    if value is None:
        return None
    return tuple(token.strip() for token in value.split(",") if token.strip())


def _category_text(element: ET.Element) -> Optional[str]:
    # Attribute form, nested <text> form, then bare text form
    return (
        xml_nodes.attr(element, "text")
        or xml_nodes.child_text(element, "text")
        or xml_nodes.node_text(element)
    )


def parse_categories(elements: Any) -> Tuple[str, ...]:
    """Normalize ``itunes:category`` occurrences into a list of names.

    Accepts one element or many. Entries that yield no text are dropped;
    duplicates and document order are kept. Nested subcategories are ignored.
    """
    categories: List[str] = []
    for element in xml_nodes.as_list(elements):
        if isinstance(element, str):
            text: Optional[str] = element.strip() or None
        else:
            text = _category_text(element)
        if text:
            categories.append(text)
    return tuple(categories)


def _parse_document(xml: Union[bytes, str], feed_url: Optional[str] = None) -> ET.Element:
    try:
        return safe_fromstring(xml)
    except (DefusedXMLParseError, DefusedXmlException, ValueError) as exc:
        raise MalformedXmlError(f"Failed to parse RSS XML: {exc}", feed_url=feed_url) from exc


def find_channel(root: ET.Element, feed_url: Optional[str] = None) -> ET.Element:
    """Return the single ``rss/channel`` element.

    Raises:
        MissingChannelError: If the root is not ``<rss>`` or has no channel
    """
    _, local = xml_nodes.split_tag(root.tag)
    if local != "rss":
        raise MissingChannelError(
            f"Invalid RSS feed: root element is <{local}>, expected <rss>", feed_url=feed_url
        )
    channel = xml_nodes.child(root, "channel")
    if channel is None:
        raise MissingChannelError("Invalid RSS feed: missing channel element", feed_url=feed_url)
    return channel


def map_channel(channel: ET.Element, feed_url: str) -> Podcast:
    """Map a ``<channel>`` element to a ``Podcast``.

    Missing optional tags fall back to explicit defaults so consumers never
    branch on absence for author, artwork, categories, type or explicit.
    """
    artwork = xml_nodes.attr_or_text(
        xml_nodes.child(channel, "itunes:image"), "href"
    ) or xml_nodes.child_text(xml_nodes.child(channel, "image"), "url")

    return Podcast(
        title=xml_nodes.child_text(channel, "title") or DEFAULT_PODCAST_TITLE,
        author=(
            xml_nodes.child_text(channel, "itunes:author")
            or xml_nodes.child_text(channel, "author")
            or DEFAULT_AUTHOR
        ),
        description=xml_nodes.child_text(channel, "description") or "",
        artwork=artwork or "",
        categories=parse_categories(xml_nodes.children(channel, "itunes:category")),
        feed_url=feed_url,
        type=parse_podcast_type(xml_nodes.child_text(channel, "itunes:type")),
        explicit=parse_boolean(xml_nodes.child_text(channel, "itunes:explicit")),
        link=xml_nodes.child_text(channel, "link"),
        language=xml_nodes.child_text(channel, "language"),
        copyright=xml_nodes.child_text(channel, "copyright"),
        podcast2=extract_podcast2_tags(channel),
    )


def map_item(
    item: ET.Element, podcast: Podcast, channel_explicit: Optional[str] = None
) -> Optional[Episode]:
    """Map an ``<item>`` element to an ``Episode``.

    Args:
        item: The ``<item>`` element
        podcast: The already-mapped show, for artwork fallback
        channel_explicit: Raw channel ``itunes:explicit`` text, inherited when the
            item has no explicit tag of its own

    Returns:
        The episode, or None when the item has no usable enclosure URL
    """
    enclosure = xml_nodes.child(item, "enclosure")
    audio_url = xml_nodes.attr(enclosure, "url")
    if not audio_url:
        return None

    title = xml_nodes.child_text(item, "title") or DEFAULT_EPISODE_TITLE
    episode_number = parse_int(xml_nodes.child_text(item, "itunes:episode"))

    explicit_el = xml_nodes.child(item, "itunes:explicit")
    explicit_raw = xml_nodes.node_text(explicit_el) if explicit_el is not None else channel_explicit

    artwork = xml_nodes.attr_or_text(xml_nodes.child(item, "itunes:image"), "href")

    return Episode(
        guid=xml_nodes.child_text(item, "guid") or audio_url,
        title=title,
        slug=generate_slug(title, episode_number),
        description=(
            xml_nodes.child_text(item, "itunes:summary")
            or xml_nodes.child_text(item, "description")
            or ""
        ),
        html_content=xml_nodes.child_text(item, "content:encoded"),
        audio_url=audio_url,
        audio_type=xml_nodes.attr(enclosure, "type") or DEFAULT_AUDIO_TYPE,
        audio_length=parse_int(xml_nodes.attr(enclosure, "length")) or 0,
        pub_date=xml_nodes.child_text(item, "pubDate") or "",
        duration=parse_duration(xml_nodes.child_text(item, "itunes:duration")),
        artwork=artwork or podcast.artwork or None,
        episode_number=episode_number,
        season_number=parse_int(xml_nodes.child_text(item, "itunes:season")),
        episode_type=parse_episode_type(xml_nodes.child_text(item, "itunes:episodeType")),
        explicit=parse_boolean(explicit_raw),
        keywords=parse_keywords(xml_nodes.child_text(item, "itunes:keywords")),
        link=xml_nodes.child_text(item, "link"),
        podcast2=extract_podcast2_tags(item),
    )


def parse_feed_xml(xml: Union[bytes, str], feed_url: str) -> PodcastFeed:
    """Parse raw RSS XML into a ``PodcastFeed``.

    Args:
        xml: Raw RSS document
        feed_url: URL the feed was requested with (stored on the Podcast as-is)

    Returns:
        The parsed feed; items without an enclosure URL are skipped

    Raises:
        MalformedXmlError: If the document cannot be parsed as XML
        MissingChannelError: If the document has no ``rss/channel`` element
    """
    root = _parse_document(xml, feed_url)
    channel = find_channel(root, feed_url)

    podcast = map_channel(channel, feed_url)
    channel_explicit = xml_nodes.child_text(channel, "itunes:explicit")

    items = xml_nodes.children(channel, "item")
    episodes: List[Episode] = []
    for idx, item in enumerate(items):
        episode = map_item(item, podcast, channel_explicit)
        if episode is None:
            logger.debug("Skipping item %d of %s: no enclosure URL", idx, feed_url)
            continue
        episodes.append(episode)

    logger.info(
        "Parsed feed %s: %d episodes (%d items without audio skipped)",
        feed_url,
        len(episodes),
        len(items) - len(episodes),
    )
    return PodcastFeed(podcast=podcast, episodes=tuple(episodes))


def fetch_and_parse_feed(
    feed_url: str,
    cfg: Optional["Config"] = None,
    fetch_fn: Optional[FetchFn] = None,
) -> PodcastFeed:
    """Fetch a feed over HTTP and parse it.

    Args:
        feed_url: Feed URL to fetch
        cfg: Configuration with HTTP settings (defaults used when None)
        fetch_fn: HTTP fetch capability; defaults to ``downloader.fetch_feed``

    Returns:
        The parsed feed

    Raises:
        FeedUnavailableError: If the fetch fails (network, timeout, HTTP status)
        InvalidFeedError: If the response is not a usable RSS document
    """
    if cfg is None:
        from .config import Config

        cfg = Config()
    fetch = fetch_fn or downloader.fetch_feed

    result = fetch(feed_url, cfg.user_agent, cfg.timeout, retries=cfg.http_retries)
    return parse_feed_xml(result.content, feed_url)
