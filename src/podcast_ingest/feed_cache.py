"""TTL-bound, single-flight cache of parsed feeds keyed by feed URL.

Per key the cache moves ``Empty -> Fetching -> Cached -> (expired or
invalidated) -> Fetching -> ...``. While a key is Fetching, every caller for that
key waits on the same ``concurrent.futures.Future``, so there is at most one
upstream fetch per URL at any instant. Different URLs never wait on each other:
the lock only guards the bookkeeping dictionaries, never a fetch.

Failure policy: a failed fetch stores nothing and the key returns to Empty
(any expired or invalidated entry for it is dropped); the error is raised to
every caller that was waiting on that fetch.
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .config_constants import DEFAULT_CACHE_TTL_SECONDS
from .exceptions import FeedTimeoutError
from .models import CacheEntry, PodcastFeed

logger = logging.getLogger(__name__)

FeedFetcher = Callable[[str], PodcastFeed]


@dataclass
class _Flight:
    """An in-progress fetch and the invalidation generation it started under."""

    future: "concurrent.futures.Future[PodcastFeed]"
    generation: int


class FeedCache:
    """In-memory feed cache with TTL, explicit invalidation and single-flight fetches.

    Construct one per process and pass it to whatever serves feed reads.

    Args:
        fetch_fn: Fetches and parses one feed URL; called at most once at a time
            per URL. Exceptions it raises propagate to callers and are not cached.
        ttl_seconds: Freshness bound for stored entries (default 3600).
        clock: Monotonic clock returning seconds; injectable for tests.
        wait_timeout: Default seconds a caller waits on another caller's fetch
            before giving up with ``FeedTimeoutError`` (None waits indefinitely).
            Giving up never cancels the shared fetch.

    Example:
        >>> cache = FeedCache(lambda url: rss_parser.fetch_and_parse_feed(url, cfg))
        >>> feed = cache.get_or_fetch("https://example.com/feed.xml")
    """

    def __init__(
        self,
        fetch_fn: FeedFetcher,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        wait_timeout: Optional[float] = None,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got: {ttl_seconds}")
        self._fetch_fn = fetch_fn
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self.wait_timeout = wait_timeout
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, _Flight] = {}
        self._generations: Dict[str, int] = {}

    def get_or_fetch(self, url: str, timeout: Optional[float] = None) -> PodcastFeed:
        """Return the cached feed for ``url``, fetching it if absent or stale.

        Args:
            url: Feed URL (used byte-for-byte as the key)
            timeout: Seconds to wait on a fetch started by another caller;
                defaults to ``wait_timeout``

        Returns:
            The parsed feed (shared, immutable)

        Raises:
            FeedTimeoutError: If waiting on another caller's fetch timed out
            FeedError: Whatever the fetch raised
        """
        with self._lock:
            entry = self._entries.get(url)
            if entry is not None and entry.is_fresh(self._clock()):
                logger.debug("Feed cache hit: %s", url)
                return entry.feed

            flight = self._inflight.get(url)
            leader = flight is None
            if flight is None:
                flight = _Flight(
                    future=concurrent.futures.Future(),
                    generation=self._generations.get(url, 0),
                )
                self._inflight[url] = flight
                logger.debug(
                    "Feed cache %s: %s", "expired" if entry is not None else "miss", url
                )
            else:
                logger.debug("Joining in-flight fetch: %s", url)

        if leader:
            self._run_fetch(url, flight)
            # The leader already holds the outcome; no waiting involved
            return flight.future.result()
        return self._wait(url, flight, timeout if timeout is not None else self.wait_timeout)

    def _run_fetch(self, url: str, flight: _Flight) -> None:
        logger.info("Fetching feed: %s", url)
        try:
            feed = self._fetch_fn(url)
        except BaseException as exc:
            with self._lock:
                if self._inflight.get(url) is flight:
                    del self._inflight[url]
                self._entries.pop(url, None)
            logger.warning("Feed fetch failed for %s: %s", url, exc)
            flight.future.set_exception(exc)
            if not isinstance(exc, Exception):
                raise
            return

        with self._lock:
            if self._inflight.get(url) is flight:
                del self._inflight[url]
            if self._generations.get(url, 0) == flight.generation:
                self._entries[url] = CacheEntry(
                    feed=feed, fetched_at=self._clock(), ttl_seconds=self.ttl_seconds
                )
            else:
                logger.debug("Feed %s was invalidated during fetch; result not stored", url)
        flight.future.set_result(feed)

    def _wait(self, url: str, flight: _Flight, timeout: Optional[float]) -> PodcastFeed:
        try:
            return flight.future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            logger.warning("Gave up waiting %ss for in-flight fetch of %s", timeout, url)
            raise FeedTimeoutError(
                f"Timed out after {timeout} seconds waiting for feed fetch",
                feed_url=url,
                timeout=timeout,
            ) from None

    def invalidate(self, url: str) -> bool:
        """Drop the cached entry for ``url`` so the next read fetches again.

        A fetch already in flight keeps serving the callers waiting on it, but
        its result is not stored.

        Returns:
            True if an entry was dropped
        """
        with self._lock:
            self._generations[url] = self._generations.get(url, 0) + 1
            dropped = self._entries.pop(url, None) is not None
        logger.info("Invalidated feed cache entry: %s", url)
        return dropped

    def refresh(self, url: str, timeout: Optional[float] = None) -> PodcastFeed:
        """Invalidate ``url`` and fetch it again.

        When a fetch for ``url`` is already in flight, the refresh joins it
        instead of starting a second upstream request, so it may return data
        that was requested before the invalidation. That result is not stored.
        """
        self.invalidate(url)
        return self.get_or_fetch(url, timeout=timeout)

    def peek(self, url: str) -> Optional[PodcastFeed]:
        """The cached feed for ``url`` if fresh, without any I/O."""
        with self._lock:
            entry = self._entries.get(url)
            if entry is not None and entry.is_fresh(self._clock()):
                return entry.feed
        return None

    def entry(self, url: str) -> Optional[CacheEntry]:
        """The stored entry for ``url`` (fresh or not), or None."""
        with self._lock:
            return self._entries.get(url)

    def is_fetching(self, url: str) -> bool:
        with self._lock:
            return url in self._inflight

    def clear(self) -> None:
        """Drop every stored entry. In-flight fetches complete but are not stored."""
        with self._lock:
            for url in set(self._entries) | set(self._inflight):
                self._generations[url] = self._generations.get(url, 0) + 1
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries
