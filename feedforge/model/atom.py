"""
Atom Document Model
===================

Atom 1.0 (RFC 4287) and the pre-standard Atom 0.3 share their value types;
only the document classes and the element names chosen by the codec differ.
The threading extension (RFC 4685) is modelled on links and entries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .dates import FeedDate
from .extensions import ExtensionBag
from .interfaces import Feed, FeedItem
from .namespaces import ATOM_MIME_TYPE, THREADING_NS, register_namespace


class AtomTextType(str, Enum):
    TEXT = "text"
    HTML = "html"
    XHTML = "xhtml"


class AtomLinkRelation(str, Enum):
    """Registered link relations used by feed readers."""
    ALTERNATE = "alternate"
    CURRENT = "current"
    ENCLOSURE = "enclosure"
    EDIT = "edit"
    EDIT_MEDIA = "edit-media"
    FIRST = "first"
    LAST = "last"
    LICENSE = "license"
    NEXT = "next"
    NEXT_ARCHIVE = "next-archive"
    PAYMENT = "payment"
    PREVIOUS = "previous"
    PREV_ARCHIVE = "prev-archive"
    RELATED = "related"
    REPLIES = "replies"
    SELF = "self"
    VIA = "via"


def is_xml_media_type(media_type: Optional[str]) -> bool:
    """``text/xml``, ``application/xml`` and any ``*/*+xml`` type."""
    if not media_type:
        return False
    media = media_type.split(";", 1)[0].strip().lower()
    return media.endswith("/xml") or media.endswith("+xml")


_RELATIONS = {relation.value: relation for relation in AtomLinkRelation}
_RELATIONS["prev"] = AtomLinkRelation.PREVIOUS


@dataclass
class AtomCommon:
    """Attributes every Atom element may carry."""
    xml_lang: Optional[str] = None
    xml_base: Optional[str] = None
    extensions: ExtensionBag = field(default_factory=ExtensionBag, repr=False)

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        self.extensions.add_namespaces(namespaces)


@dataclass
class AtomText(AtomCommon):
    """A text construct: title, subtitle, summary or rights."""
    type: AtomTextType = AtomTextType.TEXT
    value: Optional[str] = None
    # Set when the type attribute is a MIME type rather than text/html/xhtml
    media_type: Optional[str] = None
    # Value is serialized child markup rather than character data
    markup: bool = False

    @property
    def string_value(self) -> Optional[str]:
        return self.value

    @property
    def is_markup(self) -> bool:
        """True when the value is written back as child elements."""
        if self.markup:
            return True
        if self.media_type:
            return is_xml_media_type(self.media_type)
        return self.type is AtomTextType.XHTML

    @property
    def type_attribute(self) -> Optional[str]:
        """The ``type`` attribute to write; None means the text default."""
        if self.media_type:
            return self.media_type
        if self.type is AtomTextType.TEXT:
            return None
        return self.type.value

    def __str__(self) -> str:
        return self.value or ""


@dataclass
class AtomContent(AtomText):
    """Entry content, inline or referenced through ``src``."""
    src: Optional[str] = None


@dataclass
class AtomPerson(AtomCommon):
    name: str = ""
    uri: Optional[str] = None
    email: Optional[str] = None

    @property
    def has_identity(self) -> bool:
        return bool(self.name or self.email)

    @property
    def display_name(self) -> Optional[str]:
        return self.name or self.email or None

    def __str__(self) -> str:
        contact = self.email or self.uri
        if contact:
            return f'"{self.name}" <{contact}>'
        return f'"{self.name}"'


@dataclass
class AtomCategory(AtomCommon):
    term: str = ""
    scheme: Optional[str] = None
    label: Optional[str] = None


@dataclass
class AtomGenerator(AtomCommon):
    value: str = ""
    uri: Optional[str] = None
    version: Optional[str] = None


@dataclass
class AtomLink(AtomCommon):
    href: str = ""
    rel: Optional[str] = None
    type: Optional[str] = None
    hreflang: Optional[str] = None
    title: Optional[str] = None
    length: Optional[str] = None
    # thr:count and thr:updated, meaningful on replies links
    thread_count: Optional[int] = None
    thread_updated: FeedDate = field(default_factory=FeedDate)

    @property
    def relation(self) -> Optional[AtomLinkRelation]:
        """Parsed relation; a missing rel means alternate.

        A link carrying a positive reply count is a replies link whatever
        its rel says.
        """
        if self.thread_count is not None and self.thread_count > 0:
            return AtomLinkRelation.REPLIES
        if self.rel is None:
            return AtomLinkRelation.ALTERNATE
        return _RELATIONS.get(self.rel.strip().lower())

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        super().add_namespaces(namespaces)
        if self.thread_count is not None or self.thread_updated:
            register_namespace(namespaces, THREADING_NS, "thr")


@dataclass
class AtomInReplyTo(AtomCommon):
    """thr:in-reply-to reference from a comment entry to its parent."""
    ref: str = ""
    href: Optional[str] = None
    source: Optional[str] = None
    type: Optional[str] = None

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        super().add_namespaces(namespaces)
        register_namespace(namespaces, THREADING_NS, "thr")


def _first_identity(people: List[AtomPerson]) -> Optional[str]:
    for person in people:
        if person.has_identity:
            return person.display_name
    return None


@dataclass
class AtomSource(AtomCommon):
    """Feed-level metadata; also used for an entry's ``source`` element."""
    id: str = ""
    title: AtomText = field(default_factory=AtomText)
    subtitle: Optional[AtomText] = None
    updated: FeedDate = field(default_factory=FeedDate)
    authors: List[AtomPerson] = field(default_factory=list)
    contributors: List[AtomPerson] = field(default_factory=list)
    categories: List[AtomCategory] = field(default_factory=list)
    links: List[AtomLink] = field(default_factory=list)
    rights: Optional[AtomText] = None
    generator: Optional[AtomGenerator] = None
    icon: Optional[str] = None
    logo: Optional[str] = None

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        super().add_namespaces(namespaces)
        for text in (self.title, self.subtitle, self.rights, self.generator):
            if text is not None:
                text.add_namespaces(namespaces)
        for child in (*self.authors, *self.contributors, *self.categories, *self.links):
            child.add_namespaces(namespaces)


@dataclass
class AtomEntry(AtomCommon):
    id: str = ""
    title: AtomText = field(default_factory=AtomText)
    updated: FeedDate = field(default_factory=FeedDate)
    published: FeedDate = field(default_factory=FeedDate)
    authors: List[AtomPerson] = field(default_factory=list)
    contributors: List[AtomPerson] = field(default_factory=list)
    categories: List[AtomCategory] = field(default_factory=list)
    links: List[AtomLink] = field(default_factory=list)
    rights: Optional[AtomText] = None
    summary: Optional[AtomText] = None
    content: Optional[AtomContent] = None
    source: Optional[AtomSource] = None
    in_reply_to: List[AtomInReplyTo] = field(default_factory=list)
    # thr:total, kept independently of any replies link
    thread_total: int = 0

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        super().add_namespaces(namespaces)
        for text in (self.title, self.rights, self.summary, self.content, self.source):
            if text is not None:
                text.add_namespaces(namespaces)
        for child in (
            *self.authors,
            *self.contributors,
            *self.categories,
            *self.links,
            *self.in_reply_to,
        ):
            child.add_namespaces(namespaces)
        if self.thread_total > 0:
            register_namespace(namespaces, THREADING_NS, "thr")

    def as_item(self) -> "AtomEntryView":
        return AtomEntryView(self)


@dataclass
class AtomFeed10(AtomSource):
    """Atom 1.0 ``<feed>`` document."""
    entries: List[AtomEntry] = field(default_factory=list)

    dialect = "atom"
    mime_type = ATOM_MIME_TYPE

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        super().add_namespaces(namespaces)
        for entry in self.entries:
            entry.add_namespaces(namespaces)

    def as_feed(self) -> "AtomFeedView":
        return AtomFeedView(self)


@dataclass
class AtomFeed03(AtomSource):
    """Atom 0.3 ``<feed version="0.3">`` document."""
    version: str = "0.3"
    entries: List[AtomEntry] = field(default_factory=list)

    dialect = "atom"
    mime_type = ATOM_MIME_TYPE

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        super().add_namespaces(namespaces)
        for entry in self.entries:
            entry.add_namespaces(namespaces)

    def as_feed(self) -> "AtomFeedView":
        return AtomFeedView(self)


class AtomEntryView(FeedItem):
    """Normalized view of an Atom entry."""

    def __init__(self, entry: AtomEntry):
        self.entry = entry

    @property
    def id(self) -> Optional[str]:
        return self.entry.id or None

    @property
    def title(self) -> str:
        return self.entry.title.string_value or ""

    @property
    def description(self) -> Optional[str]:
        if self.entry.summary is not None:
            return self.entry.summary.string_value
        if self.entry.content is not None:
            return self.entry.content.string_value
        return None

    @property
    def author(self) -> Optional[str]:
        return _first_identity(self.entry.authors) or _first_identity(self.entry.contributors)

    @property
    def published(self) -> Optional[datetime]:
        if self.entry.published.value is not None:
            return self.entry.published.value
        return self.entry.updated.value

    @property
    def updated(self) -> Optional[datetime]:
        return self.entry.updated.value

    @property
    def link(self) -> Optional[str]:
        fallback = None
        for link in self.entry.links:
            relation = link.relation
            if relation is AtomLinkRelation.ALTERNATE:
                return link.href
            if fallback is None and relation in (
                AtomLinkRelation.RELATED,
                AtomLinkRelation.ENCLOSURE,
            ):
                fallback = link.href
        if fallback is not None:
            return fallback
        if self.entry.content is not None and self.entry.content.src:
            return self.entry.content.src
        return None

    def _replies_link(self) -> Optional[AtomLink]:
        for link in self.entry.links:
            if link.relation is AtomLinkRelation.REPLIES:
                return link
        return None

    @property
    def thread_link(self) -> Optional[str]:
        replies = self._replies_link()
        return replies.href if replies is not None else None

    @property
    def thread_count(self) -> Optional[int]:
        for link in self.entry.links:
            if link.relation is AtomLinkRelation.REPLIES and link.thread_count is not None:
                return link.thread_count
        if self.entry.thread_total > 0:
            return self.entry.thread_total
        return None

    @property
    def thread_updated(self) -> Optional[datetime]:
        for link in self.entry.links:
            if link.relation is AtomLinkRelation.REPLIES and link.thread_updated.value is not None:
                return link.thread_updated.value
        return None


class AtomFeedView(Feed):
    """Normalized view of an Atom 1.0 or 0.3 document."""

    def __init__(self, feed):
        self.feed = feed

    @property
    def document(self):
        return self.feed

    @property
    def mime_type(self) -> str:
        return ATOM_MIME_TYPE

    @property
    def id(self) -> Optional[str]:
        return self.feed.id or None

    @property
    def title(self) -> str:
        return self.feed.title.string_value or ""

    @property
    def description(self) -> Optional[str]:
        return self.feed.subtitle.string_value if self.feed.subtitle is not None else None

    @property
    def author(self) -> Optional[str]:
        return _first_identity(self.feed.authors) or _first_identity(self.feed.contributors)

    @property
    def published(self) -> Optional[datetime]:
        return self.feed.updated.value

    @property
    def updated(self) -> Optional[datetime]:
        return self.feed.updated.value

    @property
    def link(self) -> Optional[str]:
        for link in self.feed.links:
            if link.relation is AtomLinkRelation.ALTERNATE:
                return link.href
        for link in self.feed.links:
            if link.relation is not AtomLinkRelation.SELF:
                return link.href
        return None

    @property
    def image_link(self) -> Optional[str]:
        return self.feed.logo or self.feed.icon or None

    @property
    def copyright(self) -> Optional[str]:
        return self.feed.rights.string_value if self.feed.rights is not None else None

    @property
    def items(self) -> List[FeedItem]:
        return [AtomEntryView(entry) for entry in self.feed.entries]
