"""HTTP session management and feed fetching for podcast_ingest."""

from __future__ import annotations

import atexit
import logging
import threading
from dataclasses import dataclass
from typing import cast, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from requests.utils import requote_uri
from urllib3.util.retry import Retry

from .config_constants import DEFAULT_HTTP_RETRIES, DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from .exceptions import FeedTimeoutError, HttpStatusError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_HTTP_BACKOFF_FACTOR = 0.5
HTTP_RETRY_ALLOWED_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
HTTP_RETRY_STATUS_CODES = (429, 500, 502, 503, 504)
FEED_ACCEPT_HEADER = (
    "application/rss+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.5"
)

# One session per transport retry budget
_SESSION_REGISTRY: Dict[int, requests.Session] = {}
_SESSION_REGISTRY_LOCK = threading.Lock()


@dataclass(frozen=True)
class FetchResult:
    """Raw upstream response for a feed request.

    Attributes:
        content: Response body bytes.
        status_code: HTTP status code.
        url: Final URL after redirects.
        content_type: Content-Type header, if any.
    """

    content: bytes
    status_code: int
    url: str
    content_type: Optional[str] = None


def normalize_url(url: str) -> str:
    """Normalize URLs while preserving already-encoded segments."""
    normalized = requote_uri(url)
    if normalized != url:
        logger.debug("Normalized URL %s -> %s", url, normalized)
    return cast(str, normalized)


def _configure_http_session(session: requests.Session, retries: int = DEFAULT_HTTP_RETRIES) -> None:
    """Attach HTTP adapters with a transport-level retry budget to a session."""

    class LoggingRetry(Retry):
        def increment(self, method=None, url=None, *args, **kwargs):  # type: ignore[override]
            new_retry = super().increment(method=method, url=url, *args, **kwargs)
            attempt = len(new_retry.history) + 1
            reason = kwargs.get("error") or kwargs.get("response")
            logger.warning(
                "Retrying HTTP request (attempt %d) %s %s due to %s",
                attempt,
                method or "",
                url or "",
                reason,
            )
            return new_retry

    retry = LoggingRetry(
        total=retries,
        read=retries,
        connect=retries,
        status=retries,
        backoff_factor=DEFAULT_HTTP_BACKOFF_FACTOR,
        status_forcelist=HTTP_RETRY_STATUS_CODES,
        allowed_methods=HTTP_RETRY_ALLOWED_METHODS,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    logger.debug(
        "Configured HTTP session %s with %d transport retries", hex(id(session)), retries
    )


def _get_request_session(retries: int = DEFAULT_HTTP_RETRIES) -> requests.Session:
    """Process-wide session for a retry budget, shared by every calling thread.

    The registry holds at most one session per retry budget.
    """
    with _SESSION_REGISTRY_LOCK:
        session = _SESSION_REGISTRY.get(retries)
        if session is None:
            session = requests.Session()
            _configure_http_session(session, retries)
            _SESSION_REGISTRY[retries] = session
            logger.debug("Created shared HTTP session %s", hex(id(session)))
    return session


def _close_all_sessions() -> None:
    with _SESSION_REGISTRY_LOCK:
        for session in _SESSION_REGISTRY.values():
            try:
                session.close()
            except Exception as exc:  # pragma: no cover  # nosec B110
                logger.debug("Ignoring error while closing HTTP session: %s", exc)
        _SESSION_REGISTRY.clear()


atexit.register(_close_all_sessions)


def _request_timeout(timeout: float) -> Tuple[float, float]:
    # (connect, read); the connect phase never gets more than the overall budget
    return (min(timeout, 10.0), timeout)


def fetch_feed(
    url: str,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    *,
    retries: int = DEFAULT_HTTP_RETRIES,
) -> FetchResult:
    """Fetch a feed document over HTTP(S).

    Args:
        url: Feed URL
        user_agent: User-Agent header identifying the ingester
        timeout: Request deadline in seconds
        retries: Transport-level retry budget (0 leaves retry policy to the caller)

    Returns:
        FetchResult with the raw body

    Raises:
        FeedTimeoutError: If the upstream exceeded the deadline
        NetworkError: If the connection failed or the request was invalid
        HttpStatusError: If the final response status is not 2xx
    """
    normalized_url = normalize_url(url)
    headers = {"User-Agent": user_agent, "Accept": FEED_ACCEPT_HEADER}
    session = _get_request_session(retries)
    logger.debug("Fetching feed %s (timeout=%s, retries=%d)", normalized_url, timeout, retries)

    try:
        resp = session.get(normalized_url, headers=headers, timeout=_request_timeout(timeout))
    except requests.Timeout as exc:
        logger.warning("Feed request to %s timed out after %ss", url, timeout)
        raise FeedTimeoutError(
            f"RSS feed request timed out after {timeout} seconds",
            feed_url=url,
            timeout=timeout,
        ) from exc
    except requests.ConnectionError as exc:
        logger.warning("Failed to connect to %s: %s", url, exc)
        raise NetworkError(f"Failed to fetch feed: {exc}", feed_url=url) from exc
    except requests.RequestException as exc:
        logger.warning("Failed to fetch %s: %s", url, exc)
        raise NetworkError(f"Failed to fetch feed: {exc}", feed_url=url) from exc

    try:
        if not 200 <= resp.status_code < 300:
            # 3xx that were not followed (304, missing Location) carry no feed body
            logger.warning("Feed request to %s returned HTTP %s", url, resp.status_code)
            raise HttpStatusError(resp.status_code, feed_url=url, reason=resp.reason or None)
        content = resp.content
    except requests.RequestException as exc:
        # Body read failures surface after the status line was received
        logger.warning("Failed to read response body from %s: %s", url, exc)
        raise NetworkError(f"Failed to fetch feed: {exc}", feed_url=url) from exc
    finally:
        resp.close()

    logger.debug(
        "Fetched %s: status=%s, %d bytes, content-type=%s",
        normalized_url,
        resp.status_code,
        len(content),
        resp.headers.get("Content-Type"),
    )
    return FetchResult(
        content=content,
        status_code=resp.status_code,
        url=resp.url or url,
        content_type=resp.headers.get("Content-Type"),
    )
