"""Custom exceptions for podcast_ingest.

Every failure of a single ``get_feed`` call is raised as one of these types so
callers can branch on the failure kind instead of parsing messages.

Exception Hierarchy:
    FeedError (base)
    ├── FeedConfigError - Missing or invalid feed URL / settings
    ├── FeedUnavailableError - The upstream feed could not be retrieved
    │   ├── NetworkError - Connection failed or host unreachable
    │   ├── FeedTimeoutError - Upstream exceeded the fetch deadline
    │   └── HttpStatusError - Upstream answered with a non-success status
    ├── InvalidFeedError - The document is not a usable RSS feed
    │   ├── MalformedXmlError - Body could not be parsed as XML
    │   └── MissingChannelError - XML parsed but has no rss/channel node
    └── NotFoundError - A slug lookup found no matching record
"""

from typing import Optional


class FeedError(Exception):
    """Base exception for all feed ingestion errors.

    Attributes:
        message: Human-readable error message
        feed_url: Feed URL the error relates to, if any
        suggestion: Optional suggestion for resolving the error
    """

    def __init__(
        self,
        message: str,
        feed_url: Optional[str] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.message = message
        self.feed_url = feed_url
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message with feed URL and suggestion."""
        parts = [self.message]
        if self.feed_url and self.feed_url not in self.message:
            parts.append(f"(feed: {self.feed_url})")
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " ".join(parts)


class FeedConfigError(FeedError):
    """Raised when the feed URL is not configured or is not an HTTP(S) URL."""


class FeedUnavailableError(FeedError):
    """Raised when the upstream feed could not be retrieved."""


class NetworkError(FeedUnavailableError):
    """Raised when the upstream host is unreachable or the connection failed."""


class FeedTimeoutError(FeedUnavailableError):
    """Raised when the upstream fetch (or a wait on it) exceeds its deadline.

    Example:
        >>> raise FeedTimeoutError(
        ...     message="Feed request timed out after 20 seconds",
        ...     feed_url="https://example.com/feed.xml",
        ...     timeout=20,
        ... )
    """

    def __init__(
        self,
        message: str,
        feed_url: Optional[str] = None,
        timeout: Optional[float] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.timeout = timeout
        super().__init__(message=message, feed_url=feed_url, suggestion=suggestion)


class HttpStatusError(FeedUnavailableError):
    """Raised when the upstream responded with a non-success HTTP status.

    Example:
        >>> raise HttpStatusError(
        ...     status_code=404,
        ...     feed_url="https://example.com/feed.xml",
        ...     reason="Not Found",
        ... )
    """

    def __init__(
        self,
        status_code: int,
        feed_url: Optional[str] = None,
        reason: Optional[str] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        reason_str = f" {reason}" if reason else ""
        super().__init__(
            message=f"Failed to fetch feed: {status_code}{reason_str}",
            feed_url=feed_url,
            suggestion=suggestion,
        )


class InvalidFeedError(FeedError):
    """Raised when the fetched document is not a usable RSS feed."""


class MalformedXmlError(InvalidFeedError):
    """Raised when the response body cannot be parsed as XML at all."""


class MissingChannelError(InvalidFeedError):
    """Raised when the XML parsed but contains no ``rss/channel`` element."""


class NotFoundError(FeedError):
    """Raised when a slug lookup (episode or person) finds no matching record.

    This is a normal negative result, not a parse failure.

    Attributes:
        kind: What was looked up ("episode" or "person")
        slug: The slug that did not match
    """

    def __init__(self, kind: str, slug: str, feed_url: Optional[str] = None) -> None:
        self.kind = kind
        self.slug = slug
        super().__init__(message=f"No {kind} found with slug: {slug}", feed_url=feed_url)
