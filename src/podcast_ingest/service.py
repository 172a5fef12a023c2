"""Service API for programmatic use of podcast_ingest.

``FeedService`` is what an HTTP layer (or the CLI) talks to: it owns one
``FeedCache``, resolves the feed URL from configuration, and exposes the read
paths that pages and API routes need. ``error_response`` is the single place
where feed errors become boundary status codes.

Example:
    >>> from podcast_ingest import config, service
    >>> cfg = config.Config(feed_url="https://example.com/feed.xml")
    >>> svc = service.FeedService(cfg)
    >>> page = svc.list_episodes(page=2)
    >>> print(page.total_pages)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional
from urllib.parse import urlparse

from . import people, rss_parser, views
from .config import Config
from .exceptions import (
    FeedConfigError,
    FeedError,
    FeedTimeoutError,
    FeedUnavailableError,
    InvalidFeedError,
    NotFoundError,
)
from .feed_cache import FeedCache
from .models import (
    Episode,
    PaginatedEpisodes,
    Person,
    PersonDetail,
    Podcast,
    PodcastFeed,
    SearchIndexEntry,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorResponse:
    """Boundary representation of a failed request.

    Attributes:
        status_code: HTTP-style status code
        status_message: Short status text ("Feed unavailable", ...)
        message: Detailed, human-readable message
    """

    status_code: int
    status_message: str
    message: str

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "statusMessage": self.status_message,
            "message": self.message,
        }


def error_response(exc: BaseException) -> ErrorResponse:
    """Map an exception raised by a read path to a boundary response.

    Subclass checks run before their parents so a timeout is reported as a
    timeout rather than as generic unavailability.
    """
    if isinstance(exc, FeedTimeoutError):
        return ErrorResponse(504, "Feed timeout", str(exc))
    if isinstance(exc, FeedUnavailableError):
        return ErrorResponse(502, "Feed unavailable", str(exc))
    if isinstance(exc, InvalidFeedError):
        return ErrorResponse(502, "Invalid feed format", str(exc))
    if isinstance(exc, NotFoundError):
        return ErrorResponse(404, f"{exc.kind.capitalize()} not found", str(exc))
    if isinstance(exc, FeedConfigError):
        return ErrorResponse(500, "Feed not configured", str(exc))
    return ErrorResponse(500, "Feed processing failed", str(exc) or exc.__class__.__name__)


def validate_feed_url(url: Optional[str]) -> str:
    """Return ``url`` unchanged if it is an absolute http(s) URL.

    Raises:
        FeedConfigError: If the URL is missing, blank or not http(s)
    """
    if url is None or not str(url).strip():
        raise FeedConfigError(
            "Feed URL is not configured",
            suggestion="Pass a feed URL or set PODCAST_FEED_URL",
        )
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise FeedConfigError(
            f"Feed URL must be an absolute http(s) URL: {url}",
            feed_url=url,
        )
    return url


class FeedService:
    """Cached feed reads plus the derived views built on them.

    Args:
        cfg: Configuration (defaults to ``Config()``)
        cache: Pre-built cache; when omitted, one is created from ``cfg``
        fetch_fn: HTTP fetch capability handed to ``rss_parser.fetch_and_parse_feed``
            (defaults to ``downloader.fetch_feed``); ignored when ``cache`` is given
    """

    def __init__(
        self,
        cfg: Optional[Config] = None,
        cache: Optional[FeedCache] = None,
        fetch_fn: Optional[rss_parser.FetchFn] = None,
    ) -> None:
        self.cfg = cfg or Config()
        if cache is None:
            cache = FeedCache(
                lambda url: rss_parser.fetch_and_parse_feed(url, self.cfg, fetch_fn),
                ttl_seconds=self.cfg.cache_ttl_seconds,
                wait_timeout=self.cfg.cache_wait_timeout,
            )
        self.cache = cache

    def _resolve_url(self, url: Optional[str]) -> str:
        return validate_feed_url(url if url is not None else self.cfg.feed_url)

    def get_feed(self, url: Optional[str] = None) -> PodcastFeed:
        """The parsed feed for ``url`` (or the configured feed), from cache when fresh."""
        return self.cache.get_or_fetch(self._resolve_url(url))

    def refresh_feed(self, url: Optional[str] = None) -> PodcastFeed:
        """Drop the cached copy and fetch again."""
        feed_url = self._resolve_url(url)
        logger.info("Refreshing feed: %s", feed_url)
        return self.cache.refresh(feed_url)

    def invalidate(self, url: Optional[str] = None) -> bool:
        return self.cache.invalidate(self._resolve_url(url))

    @staticmethod
    def list_persons(feed: PodcastFeed) -> List[Person]:
        return people.aggregate_persons(feed.episodes)

    @staticmethod
    def find_person(feed: PodcastFeed, slug: str) -> Person:
        try:
            return people.find_person(people.aggregate_persons(feed.episodes), slug)
        except NotFoundError:
            raise NotFoundError("person", slug, feed_url=feed.podcast.feed_url) from None

    def get_podcast(self, url: Optional[str] = None) -> Podcast:
        return self.get_feed(url).podcast

    def list_episodes(
        self, url: Optional[str] = None, page: Any = 1, limit: Any = None
    ) -> PaginatedEpisodes:
        """One page of episode summaries; ``limit`` defaults to ``cfg.episodes_per_page``."""
        feed = self.get_feed(url)
        if limit is None:
            limit = self.cfg.episodes_per_page
        return views.paginate_episodes(feed, page=page, limit=limit)

    def get_episode(self, url: Optional[str], slug: str) -> Episode:
        return views.find_episode(self.get_feed(url), slug)

    def search_index(self, url: Optional[str] = None) -> List[SearchIndexEntry]:
        return views.search_index(self.get_feed(url))

    def get_person_detail(self, url: Optional[str], slug: str) -> PersonDetail:
        return people.person_detail(self.get_feed(url), slug)


def describe_error(exc: FeedError) -> str:
    """One-line log form of a feed error, including its boundary status."""
    response = error_response(exc)
    return f"{response.status_code} {response.status_message}: {response.message}"
