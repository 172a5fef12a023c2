"""Contributor directory derived from per-episode ``podcast:person`` tags.

Feeds do not carry person records, only per-episode credits. A ``Person`` is
synthesized by merging every credit whose name derives the same slug.
"""

from __future__ import annotations

import functools
import logging
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import NotFoundError
from .models import Episode, Person, PersonDetail, PersonTag, PodcastFeed
from .slugs import person_slug
from .views import to_summary

logger = logging.getLogger(__name__)

_OPTIONAL_FIELDS = ("role", "group", "img", "href")


@dataclass
class _PersonAccumulator:
    slug: str
    name: str
    role: Optional[str] = None
    group: Optional[str] = None
    img: Optional[str] = None
    href: Optional[str] = None
    episode_slugs: List[str] = field(default_factory=list)

    def add_credit(self, tag: PersonTag, episode_slug: str) -> None:
        if episode_slug not in self.episode_slugs:
            self.episode_slugs.append(episode_slug)
        # First non-empty value wins; later credits only fill gaps
        for name in _OPTIONAL_FIELDS:
            if not getattr(self, name) and getattr(tag, name):
                setattr(self, name, getattr(tag, name))

    def freeze(self) -> Person:
        return Person(
            slug=self.slug,
            name=self.name,
            role=self.role,
            group=self.group,
            img=self.img,
            href=self.href,
            episode_slugs=tuple(self.episode_slugs),
        )


def _name_sort_key(name: str) -> Tuple[str, str, str]:
    """Accent- and case-insensitive collation key, raw name as the last tie-break."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name.casefold(), name)


def _compare_persons(a: Person, b: Person) -> int:
    diff = len(b.episode_slugs) - len(a.episode_slugs)
    if diff:
        return diff
    key_a, key_b = _name_sort_key(a.name), _name_sort_key(b.name)
    if key_a != key_b:
        return -1 if key_a < key_b else 1
    # Deterministic order for names that collate equal
    if a.slug != b.slug:
        return -1 if a.slug < b.slug else 1
    return 0


def aggregate_persons(episodes: Iterable[Episode]) -> List[Person]:
    """Merge per-episode person credits into a contributor directory.

    Credits with an empty name are ignored. Credits are grouped by
    ``person_slug(name)``; each person lists the slugs of the episodes that
    credit them (no duplicates) and takes role/group/img/href from the first
    credit that supplies each one.

    Args:
        episodes: Episodes in feed order

    Returns:
        Persons ordered by number of credited episodes (descending), then by name
    """
    by_slug: Dict[str, _PersonAccumulator] = {}
    for episode in episodes:
        persons = episode.podcast2.persons if episode.podcast2 else None
        if not persons:
            continue
        for tag in persons:
            if not tag.name:
                continue
            slug = person_slug(tag.name)
            if not slug:
                logger.debug("Person %r on %s yields an empty slug, skipping", tag.name, episode.slug)
                continue
            acc = by_slug.get(slug)
            if acc is None:
                acc = _PersonAccumulator(slug=slug, name=tag.name)
                by_slug[slug] = acc
            acc.add_credit(tag, episode.slug)

    return sorted(
        (acc.freeze() for acc in by_slug.values()),
        key=functools.cmp_to_key(_compare_persons),
    )


def find_persons_for_episode(persons: Iterable[Person], episode_slug: str) -> List[Person]:
    """Persons credited on the episode with ``episode_slug``."""
    return [person for person in persons if episode_slug in person.episode_slugs]


def find_person(persons: Iterable[Person], slug: str) -> Person:
    """Look up an aggregated person by slug.

    Raises:
        NotFoundError: If no person has that slug
    """
    for person in persons:
        if person.slug == slug:
            return person
    raise NotFoundError("person", slug)


def person_detail(feed: PodcastFeed, slug: str) -> PersonDetail:
    """A person plus summaries of every episode that credits them, in feed order.

    Raises:
        NotFoundError: If no person has that slug
    """
    try:
        person = find_person(aggregate_persons(feed.episodes), slug)
    except NotFoundError:
        raise NotFoundError("person", slug, feed_url=feed.podcast.feed_url) from None
    credited = set(person.episode_slugs)
    episodes = tuple(to_summary(ep) for ep in feed.episodes if ep.slug in credited)
    return PersonDetail(person=person, episodes=episodes)
