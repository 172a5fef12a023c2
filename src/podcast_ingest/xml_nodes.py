"""Shape-normalizing accessors over parsed RSS XML.

Real-world feeds disagree on namespace URIs, on whether a value lives in an
attribute or a text node, and on whether a tag appears once or many times. All
of that variance is absorbed here so the mapper and the Podcasting 2.0
extractor never branch on document shape themselves.
"""

from __future__ import annotations

# Bandit: ElementTree usage limited to typing references; parsing goes through defusedxml
import xml.etree.ElementTree as ET  # nosec B405
from typing import Any, Dict, List, Optional, Tuple

# Namespace URIs accepted for each prefix. Several URIs circulate for the
# Podcasting 2.0 namespace and hosts still emit the older ones.
NAMESPACES: Dict[str, Tuple[str, ...]] = {
    "itunes": (
        "http://www.itunes.com/dtds/podcast-1.0.dtd",
        "https://www.itunes.com/dtds/podcast-1.0.dtd",
        "http://www.itunes.com/DTDs/Podcast-1.0.dtd",
    ),
    "podcast": (
        "https://podcastindex.org/namespace/1.0",
        "http://podcastindex.org/namespace/1.0",
        "https://github.com/Podcastindex-org/podcast-namespace/blob/main/docs/1.0.md",
    ),
    "content": ("http://purl.org/rss/1.0/modules/content/",),
    "atom": ("http://www.w3.org/2005/Atom",),
}


def split_tag(tag: Any) -> Tuple[str, str]:
    """Split an ElementTree tag ``{uri}local`` into ``(uri, local)``.

    Comments and processing instructions (non-string tags) yield ``("", "")``.
    """
    if not isinstance(tag, str):
        return "", ""
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return "", tag


def _split_qname(qname: str) -> Tuple[Optional[str], str]:
    prefix, sep, local = qname.partition(":")
    if not sep:
        return None, qname
    return prefix, local


def matches(element: ET.Element, qname: str) -> bool:
    """Return True if ``element`` is the tag named by ``qname``.

    ``qname`` is ``"prefix:local"`` for a known namespace or a bare ``"local"``
    for an un-namespaced RSS tag.
    """
    uri, local = split_tag(element.tag)
    prefix, wanted = _split_qname(qname)
    if local != wanted:
        return False
    if prefix is None:
        return uri == ""
    return uri in NAMESPACES.get(prefix, ())


def children(node: Optional[ET.Element], qname: str) -> List[ET.Element]:
    """All direct children of ``node`` named ``qname``, in document order."""
    if node is None:
        return []
    return [el for el in node if matches(el, qname)]


def child(node: Optional[ET.Element], qname: str) -> Optional[ET.Element]:
    """The first direct child of ``node`` named ``qname``, or None."""
    if node is None:
        return None
    for el in node:
        if matches(el, qname):
            return el
    return None


def as_list(value: Any) -> List[Any]:
    """Normalize a maybe-single, maybe-repeated value into a list.

    None -> [], list/tuple -> list, anything else -> [value].
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def node_text(element: Optional[ET.Element]) -> Optional[str]:
    """Stripped text content of an element (CDATA included), or None if blank."""
    if element is None:
        return None
    text = element.text
    if not (text and text.strip()):
        # Text may be split around stray child markup
        text = "".join(element.itertext())
    text = text.strip() if text else ""
    return text or None


def attr(element: Optional[ET.Element], name: str) -> Optional[str]:
    """Stripped attribute value, or None if missing or blank."""
    if element is None:
        return None
    value = element.attrib.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def text_or_attr(element: Optional[ET.Element], attr_name: str) -> Optional[str]:
    """Text content of ``element``, falling back to its ``attr_name`` attribute."""
    return node_text(element) or attr(element, attr_name)


def attr_or_text(element: Optional[ET.Element], attr_name: str) -> Optional[str]:
    """The ``attr_name`` attribute of ``element``, falling back to its text."""
    return attr(element, attr_name) or node_text(element)


def child_text(node: Optional[ET.Element], qname: str) -> Optional[str]:
    """Text of the first ``qname`` child of ``node``, or None."""
    return node_text(child(node, qname))


def child_attr(node: Optional[ET.Element], qname: str, attr_name: str) -> Optional[str]:
    """Attribute ``attr_name`` of the first ``qname`` child of ``node``, or None."""
    return attr(child(node, qname), attr_name)
