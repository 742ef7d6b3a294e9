"""Downloading and parsing RSS feeds."""

from __future__ import annotations

import html
import urllib.error
import urllib.request
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime

USER_AGENT = "gator"
_RFC1123Z = "%a, %d %b %Y %H:%M:%S %z"


@dataclass
class RSSItem:
    title: str = ""
    link: str = ""
    description: str = ""
    pub_date: str = ""


@dataclass
class RSSFeed:
    title: str = ""
    link: str = ""
    description: str = ""
    items: list[RSSItem] = field(default_factory=list)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _text(element: ET.Element, name: str) -> str:
    found = _children(element, name)
    if not found:
        return ""
    return "".join(found[0].itertext())


def parse_feed(data: bytes | str) -> RSSFeed:
    """Parse an RSS document, unescaping HTML entities in titles and descriptions."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ValueError(f"invalid feed XML: {exc}") from exc
    channels = _children(root, "channel")
    if not channels:
        return RSSFeed()
    channel = channels[0]
    items = [
        RSSItem(
            title=html.unescape(_text(item, "title")),
            link=_text(item, "link"),
            description=html.unescape(_text(item, "description")),
            pub_date=_text(item, "pubDate"),
        )
        for item in _children(channel, "item")
    ]
    return RSSFeed(
        title=html.unescape(_text(channel, "title")),
        link=_text(channel, "link"),
        description=html.unescape(_text(channel, "description")),
        items=items,
    )


def fetch_feed(feed_url: str, timeout: float | None = None) -> RSSFeed:
    """Download the feed at *feed_url* and parse it."""
    request = urllib.request.Request(feed_url, headers={"User-Agent": USER_AGENT})
    kwargs = {} if timeout is None else {"timeout": timeout}
    try:
        with urllib.request.urlopen(request, **kwargs) as response:
            data = response.read()
    except urllib.error.HTTPError as exc:
        data = exc.read()
    return parse_feed(data)


def parse_pub_date(text: str) -> datetime | None:
    """Parse an RFC 1123 date with numeric zone, or return None."""
    try:
        return datetime.strptime(text.strip(), _RFC1123Z)
    except ValueError:
        return None