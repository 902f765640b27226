"""
RSS 2.0 Document Model
======================

Channel and item records for RSS 2.0. Items lean on extension modules for
metadata the core format lacks: ``content:encoded`` and Dublin Core for
descriptions, authors and dates, ``wfw`` and ``slash`` for comment threads.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .dates import FeedDate, parse_datetime
from .extensions import DublinCoreTerm, ExtensionBag
from .interfaces import Feed, FeedItem
from .namespaces import CONTENT_NS, RSS_MIME_TYPE, SLASH_NS, WFW_NS

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_PERSON_PATTERN = re.compile(r"^\s*(?P<email>[^\s()]+)\s*\((?P<name>[^)]*)\)\s*$")


def _add_part_namespaces(namespaces: Dict[str, str], *parts) -> None:
    for part in parts:
        if part is not None:
            part.extensions.add_namespaces(namespaces)


@dataclass
class RssPerson:
    """managingEditor / webMaster / item author, written as ``email (name)``."""
    email: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def parse(cls, text: Optional[str]) -> "RssPerson":
        if not text or not text.strip():
            return cls()
        match = _PERSON_PATTERN.match(text)
        if match:
            return cls(email=match.group("email"), name=match.group("name").strip() or None)
        value = text.strip()
        if "@" in value and " " not in value:
            return cls(email=value)
        return cls(name=value)

    @property
    def is_empty(self) -> bool:
        return not (self.email or self.name)

    @property
    def value(self) -> str:
        if self.email and self.name:
            return f"{self.email} ({self.name})"
        return self.email or self.name or ""

    @property
    def display_name(self) -> Optional[str]:
        return self.name or self.email or None

    def __str__(self) -> str:
        if self.email:
            return f'"{self.name or ""}" <{self.email}>'
        return f'"{self.name or ""}"'


@dataclass
class RssCategory:
    value: str = ""
    domain: Optional[str] = None
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)


@dataclass
class RssCloud:
    domain: str = ""
    port: Optional[int] = None
    path: str = ""
    register_procedure: str = ""
    protocol: str = ""
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.domain


@dataclass
class RssEnclosure:
    url: str = ""
    length: int = 0
    type: str = ""
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.url


@dataclass
class RssGuid:
    value: str = ""
    is_permalink: bool = True
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def permalink(self) -> bool:
        """Only absolute http(s) values are honoured as permalinks."""
        return self.is_permalink and self.value.lower().startswith("http")


@dataclass
class RssImage:
    url: str = ""
    title: str = ""
    link: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    description: Optional[str] = None
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.url


@dataclass
class RssSource:
    url: str = ""
    value: str = ""
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)


@dataclass
class RssTextInput:
    title: str = ""
    description: str = ""
    name: str = ""
    link: str = ""
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def is_empty(self) -> bool:
        return not (self.name and self.link)


@dataclass
class RssItem:
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    author: Optional[RssPerson] = None
    categories: List[RssCategory] = field(default_factory=list)
    comments: Optional[str] = None
    enclosure: Optional[RssEnclosure] = None
    guid: Optional[RssGuid] = None
    pub_date: FeedDate = field(default_factory=FeedDate)
    source: Optional[RssSource] = None
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        self.extensions.add_namespaces(namespaces)
        _add_part_namespaces(namespaces, self.enclosure, self.guid, self.source, *self.categories)

    def as_item(self) -> "RssItemView":
        return RssItemView(self)


@dataclass
class RssChannel:
    title: str = ""
    link: str = ""
    description: str = ""
    language: Optional[str] = None
    copyright: Optional[str] = None
    managing_editor: Optional[RssPerson] = None
    web_master: Optional[RssPerson] = None
    pub_date: FeedDate = field(default_factory=FeedDate)
    last_build_date: FeedDate = field(default_factory=FeedDate)
    categories: List[RssCategory] = field(default_factory=list)
    generator: Optional[str] = None
    docs: Optional[str] = None
    cloud: Optional[RssCloud] = None
    ttl: Optional[int] = None
    image: Optional[RssImage] = None
    rating: Optional[str] = None
    text_input: Optional[RssTextInput] = None
    skip_hours: List[int] = field(default_factory=list)
    skip_days: List[str] = field(default_factory=list)
    items: List[RssItem] = field(default_factory=list)
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        self.extensions.add_namespaces(namespaces)
        _add_part_namespaces(namespaces, self.cloud, self.image, self.text_input, *self.categories)
        for item in self.items:
            item.add_namespaces(namespaces)


@dataclass
class RssFeed:
    """RSS 2.0 ``<rss>`` document."""
    channel: RssChannel = field(default_factory=RssChannel)
    version: str = "2.0"
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    dialect = "rss"
    mime_type = RSS_MIME_TYPE

    @property
    def items(self) -> List[RssItem]:
        return self.channel.items

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        self.extensions.add_namespaces(namespaces)
        self.channel.add_namespaces(namespaces)

    def as_feed(self) -> "RssFeedView":
        return RssFeedView(self)


class RssItemView(FeedItem):
    """Normalized view of an RSS item."""

    def __init__(self, item: RssItem):
        self.item = item

    @property
    def _dc(self):
        return self.item.extensions.dublin_core

    @property
    def id(self) -> Optional[str]:
        if self.item.guid is not None and self.item.guid.value:
            return self.item.guid.value
        return None

    @property
    def title(self) -> str:
        return self.item.title or self._dc[DublinCoreTerm.TITLE] or ""

    @property
    def description(self) -> Optional[str]:
        if self.item.description:
            return self.item.description
        encoded = self.item.extensions.find_text(CONTENT_NS, "encoded")
        if encoded:
            return encoded
        return self._dc.first_of(DublinCoreTerm.DESCRIPTION, DublinCoreTerm.SUBJECT)

    @property
    def author(self) -> Optional[str]:
        if self.item.author is not None and not self.item.author.is_empty:
            return self.item.author.display_name
        return self._dc.first_of(
            DublinCoreTerm.CREATOR, DublinCoreTerm.CONTRIBUTOR, DublinCoreTerm.PUBLISHER
        )

    @property
    def published(self) -> Optional[datetime]:
        if self.item.pub_date.value is not None:
            return self.item.pub_date.value
        return parse_datetime(self._dc[DublinCoreTerm.DATE])

    @property
    def updated(self) -> Optional[datetime]:
        return self.published

    @property
    def link(self) -> Optional[str]:
        if self.item.link:
            return self.item.link
        if self.item.guid is not None and self.item.guid.permalink:
            return self.item.guid.value
        return None

    @property
    def thread_link(self) -> Optional[str]:
        return self.item.extensions.find_text(WFW_NS, "commentRss") or self.item.comments or None

    @property
    def thread_count(self) -> Optional[int]:
        count = self.item.extensions.find_text(SLASH_NS, "comments")
        if count is None:
            return None
        try:
            return int(count.strip())
        except ValueError:
            return None


class RssFeedView(Feed):
    """Normalized view of an RSS 2.0 document."""

    def __init__(self, feed: RssFeed):
        self.feed = feed

    @property
    def document(self) -> RssFeed:
        return self.feed

    @property
    def mime_type(self) -> str:
        return RSS_MIME_TYPE

    @property
    def id(self) -> Optional[str]:
        return self.feed.channel.link or None

    @property
    def title(self) -> str:
        return self.feed.channel.title or ""

    @property
    def description(self) -> Optional[str]:
        return self.feed.channel.description or None

    @property
    def author(self) -> Optional[str]:
        for person in (self.feed.channel.managing_editor, self.feed.channel.web_master):
            if person is not None and not person.is_empty:
                return person.display_name
        return None

    @property
    def published(self) -> Optional[datetime]:
        return self.feed.channel.pub_date.value

    @property
    def updated(self) -> Optional[datetime]:
        return self.feed.channel.last_build_date.value

    @property
    def link(self) -> Optional[str]:
        return self.feed.channel.link or None

    @property
    def image_link(self) -> Optional[str]:
        image = self.feed.channel.image
        if image is None or image.is_empty:
            return None
        return image.url

    @property
    def copyright(self) -> Optional[str]:
        return self.feed.channel.copyright

    @property
    def items(self) -> List[FeedItem]:
        return [RssItemView(item) for item in self.feed.channel.items]
