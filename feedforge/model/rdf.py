"""
RDF Site Summary (RSS 1.0) Document Model
=========================================

RSS 1.0 keeps only title, link and description natively; authorship and
dates come from the Dublin Core module, read through each object's
extension bag.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .dates import parse_datetime
from .extensions import DublinCoreTerm, ExtensionBag
from .interfaces import Feed, FeedItem
from .namespaces import CONTENT_NS, RSS_MIME_TYPE, WFW_NS

_AUTHOR_TERMS = (DublinCoreTerm.CREATOR, DublinCoreTerm.CONTRIBUTOR, DublinCoreTerm.PUBLISHER)


@dataclass
class RdfChannel:
    about: Optional[str] = None
    title: str = ""
    link: str = ""
    description: str = ""
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def resource(self) -> str:
        """``rdf:about`` value, defaulting to the channel link."""
        return self.about or self.link


@dataclass
class RdfImage:
    about: Optional[str] = None
    title: str = ""
    url: str = ""
    link: str = ""
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def resource(self) -> str:
        return self.about or self.url


@dataclass
class RdfTextInput:
    about: Optional[str] = None
    title: str = ""
    description: str = ""
    name: str = ""
    link: str = ""
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def resource(self) -> str:
        return self.about or self.link


@dataclass
class RdfItem:
    about: Optional[str] = None
    title: str = ""
    link: str = ""
    description: Optional[str] = None
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    @property
    def resource(self) -> str:
        return self.about or self.link

    def as_item(self) -> "RdfItemView":
        return RdfItemView(self)


@dataclass
class RdfFeed:
    """RSS 1.0 ``<rdf:RDF>`` document."""
    channel: RdfChannel = field(default_factory=RdfChannel)
    image: Optional[RdfImage] = None
    items: List[RdfItem] = field(default_factory=list)
    text_input: Optional[RdfTextInput] = None
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    dialect = "rdf"
    mime_type = RSS_MIME_TYPE

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        bags = [self.extensions, self.channel.extensions]
        bags.extend(item.extensions for item in self.items)
        if self.image is not None:
            bags.append(self.image.extensions)
        if self.text_input is not None:
            bags.append(self.text_input.extensions)
        for bag in bags:
            bag.add_namespaces(namespaces)

    def as_feed(self) -> "RdfFeedView":
        return RdfFeedView(self)


class RdfItemView(FeedItem):
    """Normalized view of an RSS 1.0 item."""

    def __init__(self, item: RdfItem):
        self.item = item

    @property
    def _dc(self):
        return self.item.extensions.dublin_core

    @property
    def id(self) -> Optional[str]:
        return self.item.about or self.item.link or None

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
        return self._dc.first_of(*_AUTHOR_TERMS)

    @property
    def published(self) -> Optional[datetime]:
        return parse_datetime(self._dc[DublinCoreTerm.DATE])

    @property
    def updated(self) -> Optional[datetime]:
        return self.published

    @property
    def link(self) -> Optional[str]:
        return self.item.link or None

    @property
    def thread_link(self) -> Optional[str]:
        return self.item.extensions.find_text(WFW_NS, "commentRss")


class RdfFeedView(Feed):
    """Normalized view of an RSS 1.0 document."""

    def __init__(self, feed: RdfFeed):
        self.feed = feed

    @property
    def _dc(self):
        return self.feed.channel.extensions.dublin_core

    @property
    def document(self) -> RdfFeed:
        return self.feed

    @property
    def mime_type(self) -> str:
        return RSS_MIME_TYPE

    @property
    def id(self) -> Optional[str]:
        return self.feed.channel.resource or None

    @property
    def title(self) -> str:
        return self.feed.channel.title or self._dc[DublinCoreTerm.TITLE] or ""

    @property
    def description(self) -> Optional[str]:
        return self.feed.channel.description or self._dc[DublinCoreTerm.DESCRIPTION]

    @property
    def author(self) -> Optional[str]:
        return self._dc.first_of(*_AUTHOR_TERMS)

    @property
    def published(self) -> Optional[datetime]:
        return parse_datetime(self._dc[DublinCoreTerm.DATE])

    @property
    def updated(self) -> Optional[datetime]:
        return self.published

    @property
    def link(self) -> Optional[str]:
        return self.feed.channel.link or None

    @property
    def image_link(self) -> Optional[str]:
        if self.feed.image is None or not self.feed.image.url:
            return None
        return self.feed.image.url

    @property
    def copyright(self) -> Optional[str]:
        return self._dc[DublinCoreTerm.RIGHTS]

    @property
    def items(self) -> List[FeedItem]:
        return [RdfItemView(item) for item in self.feed.items]
