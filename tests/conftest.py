"""Shared fixtures and test utilities for podcast_ingest tests.

This module contains:
- Test constants
- RSS document builders
- Helper functions for creating test objects
- Fake fetchers and mock HTTP responses

Test modules import helpers from here directly (``from conftest import ...``);
``tests`` is on ``pythonpath`` via pyproject.toml.
"""

import os
import threading

# Keep .env files out of tests; Config reads the environment directly
os.environ.setdefault("TESTING", "1")

from podcast_ingest import config, models  # noqa: E402
from podcast_ingest.downloader import FetchResult  # noqa: E402

# Test constants
TEST_BASE_URL = "https://example.com"
TEST_FEED_URL = "https://example.com/feed.xml"
TEST_OTHER_FEED_URL = "https://example.org/other.xml"
TEST_MEDIA_URL = f"{TEST_BASE_URL}/ep1.mp3"
TEST_ARTWORK_URL = f"{TEST_BASE_URL}/artwork.jpg"
TEST_TRANSCRIPT_URL = f"{TEST_BASE_URL}/transcript.vtt"
TEST_TRANSCRIPT_URL_SRT = f"{TEST_BASE_URL}/transcript.srt"
TEST_CHAPTERS_URL = f"{TEST_BASE_URL}/chapters.json"
TEST_FEED_TITLE = "Test Feed"
TEST_EPISODE_TITLE = "Episode Title"
TEST_MEDIA_TYPE_MP3 = "audio/mpeg"
TEST_TRANSCRIPT_TYPE_VTT = "text/vtt"
TEST_TRANSCRIPT_TYPE_SRT = "application/x-subrip"
TEST_PUB_DATE = "Mon, 01 Jan 2024 00:00:00 GMT"

NS_ITUNES = "http://www.itunes.com/dtds/podcast-1.0.dtd"
NS_PODCAST = "https://podcastindex.org/namespace/1.0"
NS_CONTENT = "http://purl.org/rss/1.0/modules/content/"

RSS_NAMESPACES = (
    f'xmlns:itunes="{NS_ITUNES}" xmlns:podcast="{NS_PODCAST}" xmlns:content="{NS_CONTENT}"'
)


# RSS builders
def build_item_xml(
    title=TEST_EPISODE_TITLE,
    audio_url=TEST_MEDIA_URL,
    audio_type=TEST_MEDIA_TYPE_MP3,
    length="1000",
    extra="",
):
    """Build one ``<item>`` element.

    Args:
        title: Item title (None omits the tag)
        audio_url: Enclosure URL (None omits the enclosure)
        audio_type: Enclosure type
        length: Enclosure length attribute
        extra: Raw XML appended inside the item

    Returns:
        Item XML string
    """
    parts = ["<item>"]
    if title is not None:
        parts.append(f"<title>{title}</title>")
    if audio_url is not None:
        parts.append(f'<enclosure url="{audio_url}" type="{audio_type}" length="{length}" />')
    if extra:
        parts.append(extra)
    parts.append("</item>")
    return "\n".join(parts)


def build_rss_xml(items=(), title=TEST_FEED_TITLE, channel_extra=""):
    """Build an RSS 2.0 document with iTunes, Podcasting 2.0 and content namespaces.

    Args:
        items: Item XML strings (see ``build_item_xml``)
        title: Channel title (None omits the tag)
        channel_extra: Raw XML appended inside the channel, before the items

    Returns:
        RSS XML string
    """
    title_xml = f"<title>{title}</title>" if title is not None else ""
    body = "\n".join(items)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" {RSS_NAMESPACES}>
  <channel>
    {title_xml}
    {channel_extra}
    {body}
  </channel>
</rss>"""


def build_person_xml(name, role=None, group=None, img=None, href=None):
    attrs = ""
    for key, value in (("role", role), ("group", group), ("img", img), ("href", href)):
        if value is not None:
            attrs += f' {key}="{value}"'
    return f"<podcast:person{attrs}>{name}</podcast:person>"


MINIMAL_FEED_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="{NS_ITUNES}">
  <channel>
    <title>My Podcast</title>
    <description>A great podcast</description>
    <item>
      <title>Episode 1</title>
      <description>First episode</description>
      <enclosure url="https://example.com/ep1.mp3" type="audio/mpeg" length="12345678" />
      <pubDate>{TEST_PUB_DATE}</pubDate>
    </item>
  </channel>
</rss>"""

ITUNES_FEED_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="{NS_ITUNES}" xmlns:content="{NS_CONTENT}">
  <channel>
    <title>iTunes Podcast</title>
    <description>Podcast with full iTunes tags</description>
    <itunes:author>John Doe</itunes:author>
    <itunes:image href="https://example.com/artwork.jpg" />
    <itunes:category text="Technology" />
    <itunes:type>serial</itunes:type>
    <itunes:explicit>yes</itunes:explicit>
    <link>https://example.com</link>
    <language>en-us</language>
    <copyright>2024 John Doe</copyright>
    <item>
      <title>Episode 42</title>
      <description>The answer to everything</description>
      <content:encoded><![CDATA[<p>Rich <strong>HTML</strong> content</p>]]></content:encoded>
      <enclosure url="https://example.com/ep42.mp3" type="audio/mpeg" length="98765432" />
      <pubDate>Fri, 15 Mar 2024 12:00:00 GMT</pubDate>
      <itunes:duration>01:23:45</itunes:duration>
      <itunes:episode>42</itunes:episode>
      <itunes:season>3</itunes:season>
      <itunes:episodeType>full</itunes:episodeType>
      <itunes:image href="https://example.com/ep42-art.jpg" />
      <itunes:explicit>no</itunes:explicit>
      <itunes:keywords>tech, programming, answers</itunes:keywords>
      <guid>unique-guid-42</guid>
    </item>
  </channel>
</rss>"""

PODCAST2_FEED_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="{NS_ITUNES}" xmlns:podcast="{NS_PODCAST}">
  <channel>
    <title>Podcast 2.0</title>
    <description>Testing Podcasting 2.0 namespace</description>
    <podcast:funding url="https://example.com/donate">Support the show</podcast:funding>
    <podcast:guid>show-guid-abc-123</podcast:guid>
    <item>
      <title>P2.0 Episode</title>
      <enclosure url="https://example.com/ep.mp3" type="audio/mpeg" length="5000" />
      <podcast:transcript url="https://example.com/transcript.srt" type="application/srt" language="en" />
      <podcast:chapters url="https://example.com/chapters.json" type="application/json+chapters" />
      <podcast:person role="host" img="https://example.com/host.jpg" href="https://example.com/host">Jane Host</podcast:person>
      <podcast:funding url="https://example.com/tip">Leave a tip</podcast:funding>
      <podcast:guid>episode-guid-xyz-789</podcast:guid>
    </item>
  </channel>
</rss>"""


def build_people_feed_xml():
    """Three episodes crediting overlapping hosts and guests."""
    items = [
        build_item_xml(
            title="First",
            audio_url=f"{TEST_BASE_URL}/1.mp3",
            extra=build_person_xml("Jane Host", role="host", img="https://example.com/jane.jpg")
            + build_person_xml("Guest One", role="guest"),
        ),
        build_item_xml(
            title="Second",
            audio_url=f"{TEST_BASE_URL}/2.mp3",
            extra=build_person_xml("Jane Host", role="co-host", href="https://example.com/jane")
            + build_person_xml("Bob Guest", role="guest"),
        ),
        build_item_xml(
            title="Third",
            audio_url=f"{TEST_BASE_URL}/3.mp3",
            extra=build_person_xml("jane host"),
        ),
    ]
    return build_rss_xml(items, title="People Show")


# Helper functions
def create_test_config(**overrides):
    """Create a test Config with the test feed URL and fast timeouts.

    Args:
        **overrides: Fields to override from defaults

    Returns:
        config.Config object
    """
    defaults = {
        "feed_url": TEST_FEED_URL,
        "timeout": 5,
        "cache_ttl_seconds": 60,
    }
    defaults.update(overrides)
    return config.Config(**defaults)


def create_test_episode(**overrides):
    """Create a test Episode with sensible defaults."""
    defaults = {
        "guid": "guid-1",
        "title": TEST_EPISODE_TITLE,
        "slug": "episode-title",
        "description": "Description",
        "audio_url": TEST_MEDIA_URL,
        "audio_type": TEST_MEDIA_TYPE_MP3,
        "audio_length": 1000,
        "pub_date": TEST_PUB_DATE,
        "duration": 60,
        "episode_type": "full",
        "explicit": False,
    }
    defaults.update(overrides)
    return models.Episode(**defaults)


def create_test_podcast(**overrides):
    defaults = {
        "title": TEST_FEED_TITLE,
        "author": "Unknown",
        "description": "",
        "artwork": "",
        "categories": (),
        "feed_url": TEST_FEED_URL,
        "type": "episodic",
        "explicit": False,
    }
    defaults.update(overrides)
    return models.Podcast(**defaults)


def create_test_feed(episodes=(), **podcast_overrides):
    """Create a PodcastFeed from episodes (Episode objects)."""
    return models.PodcastFeed(
        podcast=create_test_podcast(**podcast_overrides), episodes=tuple(episodes)
    )


def create_numbered_feed(count):
    """Feed with ``count`` episodes slugged ``episode-1`` .. ``episode-N``."""
    return create_test_feed(
        create_test_episode(
            guid=f"guid-{n}",
            title=f"Episode {n}",
            slug=f"episode-{n}",
            audio_url=f"{TEST_BASE_URL}/{n}.mp3",
        )
        for n in range(1, count + 1)
    )


def create_fetch_result(content, status_code=200, url=TEST_FEED_URL):
    if isinstance(content, str):
        content = content.encode("utf-8")
    return FetchResult(
        content=content,
        status_code=status_code,
        url=url,
        content_type="application/rss+xml",
    )


class FakeFetcher:
    """Stand-in for ``downloader.fetch_feed``.

    Serves ``documents[url]`` (str/bytes) or raises it when it is an exception.
    Records every call; ``gate`` (a threading.Event), when set up, blocks each
    call until released so tests can hold a fetch in flight.
    """

    def __init__(self, documents=None, gate=None):
        self.documents = dict(documents or {})
        self.gate = gate
        self.calls = []
        self.started = threading.Event()
        self._lock = threading.Lock()

    def __call__(self, url, user_agent=None, timeout=None, *, retries=0):
        with self._lock:
            self.calls.append(
                {"url": url, "user_agent": user_agent, "timeout": timeout, "retries": retries}
            )
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=10)
        document = self.documents[url]
        if isinstance(document, BaseException):
            raise document
        return create_fetch_result(document, url=url)

    @property
    def call_count(self):
        with self._lock:
            return len(self.calls)


class MockHTTPResponse:
    """Simple mock for ``requests`` responses used by downloader tests."""

    def __init__(self, *, content=b"", status_code=200, url="", headers=None, reason="OK"):
        self.content = content
        self.status_code = status_code
        self.url = url
        self.headers = headers or {}
        self.reason = reason
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    def close(self):
        self.closed = True
