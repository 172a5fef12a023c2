"""Podcast Ingest - Fetch, normalize and cache podcast RSS feeds.

This package turns a podcast RSS document (RSS 2.0 plus the iTunes and
Podcasting 2.0 namespaces) into an immutable ``PodcastFeed`` and keeps it in a
TTL-bound, single-flight cache:
- Show metadata and playable episodes with stable URL slugs
- Transcript, chapters, person, funding and guid tags (Podcasting 2.0)
- A contributor directory aggregated from per-episode person credits
- Paged episode lists and a client-side search index

Programmatic API Example:
    >>> import podcast_ingest
    >>>
    >>> cfg = podcast_ingest.Config(feed_url="https://example.com/feed.xml")
    >>> svc = podcast_ingest.FeedService(cfg)
    >>> feed = svc.get_feed()
    >>> print(f"{feed.podcast.title}: {len(feed.episodes)} episodes")

Parsing without HTTP:
    >>> feed = podcast_ingest.parse_feed_xml(xml_bytes, "https://example.com/feed.xml")

CLI Usage:
    $ podcast-ingest https://example.com/feed.xml --episodes --page 2
    $ python -m podcast_ingest.cli --config feed.yaml --people
"""

from __future__ import annotations

from .config import Config, load_config_file
from .exceptions import (
    FeedConfigError,
    FeedError,
    FeedTimeoutError,
    FeedUnavailableError,
    HttpStatusError,
    InvalidFeedError,
    MalformedXmlError,
    MissingChannelError,
    NetworkError,
    NotFoundError,
)
from .feed_cache import FeedCache
from .models import Episode, Person, Podcast, Podcast2Tags, PodcastFeed
from .people import aggregate_persons
from .rss_parser import fetch_and_parse_feed, parse_feed_xml

__all__ = [
    "Config",
    "load_config_file",
    "FeedCache",
    "FeedService",
    "parse_feed_xml",
    "fetch_and_parse_feed",
    "aggregate_persons",
    "Podcast",
    "Episode",
    "Podcast2Tags",
    "PodcastFeed",
    "Person",
    "FeedError",
    "FeedConfigError",
    "FeedUnavailableError",
    "NetworkError",
    "FeedTimeoutError",
    "HttpStatusError",
    "InvalidFeedError",
    "MalformedXmlError",
    "MissingChannelError",
    "NotFoundError",
    "__version__",
]
# Note: 'cli', 'service' and 'FeedService' are resolved lazily via __getattr__
__version__ = "0.1.0"

# Cache for lazy-loaded modules to prevent circular imports
_import_cache: dict = {}


def __getattr__(name: str):
    if name in _import_cache:
        return _import_cache[name]

    import importlib

    if name in ("cli", "service"):
        module = importlib.import_module(f"{__name__}.{name}")
        _import_cache[name] = module
        return module
    if name == "FeedService":
        service_cls = importlib.import_module(f"{__name__}.service").FeedService
        _import_cache[name] = service_cls
        return service_cls

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
