"""Read-path projections over a cached ``PodcastFeed``.

Everything here is a pure, synchronous transform; nothing is cached separately.
"""

from __future__ import annotations

import math
from typing import Any, List

from .config_constants import DEFAULT_EPISODES_PER_PAGE, MAX_EPISODES_PER_PAGE
from .exceptions import NotFoundError
from .models import Episode, EpisodeSummary, PaginatedEpisodes, PodcastFeed, SearchIndexEntry


def to_summary(episode: Episode) -> EpisodeSummary:
    """Strip heavy fields from an episode for list views."""
    return EpisodeSummary(
        guid=episode.guid,
        title=episode.title,
        slug=episode.slug,
        description=episode.description,
        audio_url=episode.audio_url,
        pub_date=episode.pub_date,
        duration=episode.duration,
        episode_type=episode.episode_type,
        artwork=episode.artwork,
        episode_number=episode.episode_number,
        season_number=episode.season_number,
    )


def to_search_entry(episode: Episode) -> SearchIndexEntry:
    return SearchIndexEntry(
        slug=episode.slug,
        title=episode.title,
        description=episode.description,
        pub_date=episode.pub_date,
        duration=episode.duration,
        episode_type=episode.episode_type,
        episode_number=episode.episode_number,
        artwork=episode.artwork,
    )


def search_index(feed: PodcastFeed) -> List[SearchIndexEntry]:
    """Minimal per-episode entries for client-side search, in feed order."""
    return [to_search_entry(episode) for episode in feed.episodes]


def _coerce_positive_int(value: Any, default: int) -> int:
    """Unparseable or zero becomes ``default``; anything else is clamped to >= 1."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number == 0:
        return default
    return max(1, number)


def paginate_episodes(
    feed: PodcastFeed, page: Any = 1, limit: Any = DEFAULT_EPISODES_PER_PAGE
) -> PaginatedEpisodes:
    """One page of episode summaries.

    ``page`` below 1 or unparseable becomes 1. ``limit`` is clamped to 1..100;
    zero or unparseable becomes the default page size. A page past the end is empty.
    """
    page_number = _coerce_positive_int(page, 1)
    page_size = min(MAX_EPISODES_PER_PAGE, _coerce_positive_int(limit, DEFAULT_EPISODES_PER_PAGE))

    total = len(feed.episodes)
    start = (page_number - 1) * page_size
    window = feed.episodes[start : start + page_size]
    return PaginatedEpisodes(
        episodes=tuple(to_summary(episode) for episode in window),
        total=total,
        page=page_number,
        total_pages=math.ceil(total / page_size),
    )


def find_episode(feed: PodcastFeed, slug: str) -> Episode:
    """The first episode with ``slug`` (slugs are not deduplicated).

    Raises:
        NotFoundError: If no episode has that slug
    """
    for episode in feed.episodes:
        if episode.slug == slug:
            return episode
    raise NotFoundError("episode", slug, feed_url=feed.podcast.feed_url)
