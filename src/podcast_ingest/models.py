from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .duration import format_duration


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None so absent optionals stay absent."""
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class TranscriptRef:
    """A single selected ``podcast:transcript`` reference."""

    url: str
    type: str
    language: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"url": self.url, "type": self.type, "language": self.language})


@dataclass(frozen=True)
class ChaptersRef:
    """A ``podcast:chapters`` reference, passed through as-is."""

    url: str
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "type": self.type}


@dataclass(frozen=True)
class PersonTag:
    """One raw ``podcast:person`` occurrence on a channel or item.

    Occurrences are never merged at this level; see ``people.aggregate_persons``.
    """

    name: str
    role: Optional[str] = None
    group: Optional[str] = None
    img: Optional[str] = None
    href: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "role": self.role,
                "group": self.group,
                "img": self.img,
                "href": self.href,
            }
        )


@dataclass(frozen=True)
class FundingLink:
    url: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "text": self.text}


@dataclass(frozen=True)
class Podcast2Tags:
    """Podcasting 2.0 namespace data for a show or an episode.

    Each field is independently optional. A block with no populated field is
    never attached to its owner; ``extract_podcast2_tags`` returns None instead.
    """

    transcript: Optional[TranscriptRef] = None
    chapters: Optional[ChaptersRef] = None
    persons: Optional[Tuple[PersonTag, ...]] = None
    funding: Optional[Tuple[FundingLink, ...]] = None
    guid: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.transcript is None
            and self.chapters is None
            and self.persons is None
            and self.funding is None
            and self.guid is None
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "transcript": self.transcript.to_dict() if self.transcript else None,
                "chapters": self.chapters.to_dict() if self.chapters else None,
                "persons": (
                    [p.to_dict() for p in self.persons] if self.persons is not None else None
                ),
                "funding": (
                    [f.to_dict() for f in self.funding] if self.funding is not None else None
                ),
                "guid": self.guid,
            }
        )


@dataclass(frozen=True)
class Podcast:
    """Show-level metadata.

    Created once per successful parse and replaced wholesale on refresh.

    Attributes:
        title: Channel title ("Untitled Podcast" when absent).
        author: ``itunes:author`` or ``author`` ("Unknown" when absent).
        description: Channel description ("" when absent).
        artwork: ``itunes:image`` href or ``image/url`` ("" when absent).
        categories: ``itunes:category`` texts in document order, duplicates kept.
        feed_url: The URL the feed was requested with, byte-for-byte.
        type: "episodic" or "serial".
        explicit: Channel-level explicit flag.
        link: Optional channel link.
        language: Optional language code.
        copyright: Optional copyright notice.
        podcast2: Show-level Podcasting 2.0 tags, or None when none are present.
    """

    title: str
    author: str
    description: str
    artwork: str
    categories: Tuple[str, ...]
    feed_url: str
    type: str
    explicit: bool
    link: Optional[str] = None
    language: Optional[str] = None
    copyright: Optional[str] = None
    podcast2: Optional[Podcast2Tags] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "title": self.title,
                "author": self.author,
                "description": self.description,
                "artwork": self.artwork,
                "categories": list(self.categories),
                "feedUrl": self.feed_url,
                "type": self.type,
                "explicit": self.explicit,
                "link": self.link,
                "language": self.language,
                "copyright": self.copyright,
                "podcast2": self.podcast2.to_dict() if self.podcast2 else None,
            }
        )


@dataclass(frozen=True)
class Episode:
    """A playable episode (an item that carried an enclosure URL).

    Attributes:
        guid: Item ``guid``, falling back to the enclosure URL.
        title: Item title ("Untitled Episode" when absent).
        slug: URL slug derived from title and episode number.
        description: ``itunes:summary`` or ``description`` ("" when absent).
        audio_url: Enclosure URL, never empty.
        audio_type: Enclosure MIME type ("audio/mpeg" when absent).
        audio_length: Enclosure length in bytes (0 when absent or invalid).
        pub_date: Raw ``pubDate`` string, not reparsed.
        duration: Duration in whole seconds (0 when absent or malformed).
        episode_type: "full", "trailer" or "bonus".
        explicit: Item explicit flag, inheriting the channel flag when absent.
        html_content: ``content:encoded`` HTML, if any.
        artwork: Item artwork, falling back to show artwork.
        episode_number: ``itunes:episode``, if numeric.
        season_number: ``itunes:season``, if numeric.
        keywords: ``itunes:keywords`` split on commas, if present.
        link: Item link, if any.
        podcast2: Episode-level Podcasting 2.0 tags, or None.
    """

    guid: str
    title: str
    slug: str
    description: str
    audio_url: str
    audio_type: str
    audio_length: int
    pub_date: str
    duration: int
    episode_type: str
    explicit: bool
    html_content: Optional[str] = None
    artwork: Optional[str] = None
    episode_number: Optional[int] = None
    season_number: Optional[int] = None
    keywords: Optional[Tuple[str, ...]] = None
    link: Optional[str] = None
    podcast2: Optional[Podcast2Tags] = None

    @property
    def duration_display(self) -> str:
        return format_duration(self.duration)

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "guid": self.guid,
                "title": self.title,
                "slug": self.slug,
                "description": self.description,
                "htmlContent": self.html_content,
                "audioUrl": self.audio_url,
                "audioType": self.audio_type,
                "audioLength": self.audio_length,
                "pubDate": self.pub_date,
                "duration": self.duration,
                "artwork": self.artwork,
                "episodeNumber": self.episode_number,
                "seasonNumber": self.season_number,
                "episodeType": self.episode_type,
                "explicit": self.explicit,
                "keywords": list(self.keywords) if self.keywords is not None else None,
                "link": self.link,
                "podcast2": self.podcast2.to_dict() if self.podcast2 else None,
            }
        )


@dataclass(frozen=True)
class PodcastFeed:
    """A fully parsed feed: show metadata plus its playable episodes."""

    podcast: Podcast
    episodes: Tuple[Episode, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "podcast": self.podcast.to_dict(),
            "episodes": [episode.to_dict() for episode in self.episodes],
        }


@dataclass(frozen=True)
class Person:
    """A contributor aggregated from ``podcast:person`` tags across episodes.

    Attributes:
        slug: Derived from the name; feeds do not supply person identifiers.
        name: Display name from the first occurrence.
        role: First non-empty role seen.
        group: First non-empty group seen.
        img: First non-empty avatar URL seen.
        href: First non-empty external link seen.
        episode_slugs: Slugs of crediting episodes, first-seen order, no duplicates.
    """

    slug: str
    name: str
    role: Optional[str] = None
    group: Optional[str] = None
    img: Optional[str] = None
    href: Optional[str] = None
    episode_slugs: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "slug": self.slug,
                "name": self.name,
                "role": self.role,
                "group": self.group,
                "img": self.img,
                "href": self.href,
                "episodeSlugs": list(self.episode_slugs),
            }
        )


@dataclass(frozen=True)
class EpisodeSummary:
    """Lightweight episode view for list pages.

    Omits html_content, podcast2, keywords, link, audio_length, audio_type and
    explicit to keep list payloads small.
    """

    guid: str
    title: str
    slug: str
    description: str
    audio_url: str
    pub_date: str
    duration: int
    episode_type: str
    artwork: Optional[str] = None
    episode_number: Optional[int] = None
    season_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "guid": self.guid,
                "title": self.title,
                "slug": self.slug,
                "description": self.description,
                "audioUrl": self.audio_url,
                "pubDate": self.pub_date,
                "duration": self.duration,
                "artwork": self.artwork,
                "episodeNumber": self.episode_number,
                "seasonNumber": self.season_number,
                "episodeType": self.episode_type,
            }
        )


@dataclass(frozen=True)
class SearchIndexEntry:
    """Minimal per-episode fields for client-side search."""

    slug: str
    title: str
    description: str
    pub_date: str
    duration: int
    episode_type: str
    episode_number: Optional[int] = None
    artwork: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "slug": self.slug,
                "title": self.title,
                "description": self.description,
                "pubDate": self.pub_date,
                "duration": self.duration,
                "episodeNumber": self.episode_number,
                "episodeType": self.episode_type,
                "artwork": self.artwork,
            }
        )


@dataclass(frozen=True)
class PaginatedEpisodes:
    episodes: Tuple[EpisodeSummary, ...]
    total: int
    page: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "episodes": [summary.to_dict() for summary in self.episodes],
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class PersonDetail:
    """A person plus summaries of the episodes that credit them."""

    person: Person
    episodes: Tuple[EpisodeSummary, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "person": self.person.to_dict(),
            "episodes": [summary.to_dict() for summary in self.episodes],
        }


@dataclass(frozen=True)
class CacheEntry:
    """A cached feed and the clock reading it was stored at.

    Attributes:
        feed: The parsed feed; shared by reference, immutable.
        fetched_at: Cache clock value (seconds) when the entry was stored.
        ttl_seconds: Freshness bound for this entry.
    """

    feed: PodcastFeed
    fetched_at: float
    ttl_seconds: float

    def is_fresh(self, now: float) -> bool:
        return (now - self.fetched_at) < self.ttl_seconds

    def age(self, now: float) -> float:
        return max(0.0, now - self.fetched_at)
