"""
FeedForge Document Model
========================

Dialect models for Atom 1.0, Atom 0.3, RSS 2.0 and RDF/RSS 1.0, the
tri-state ``FeedDate``, the extension bag, and the normalized
``Feed``/``FeedItem`` views.
"""

from .dates import DateState, FeedDate, parse_datetime
from .extensions import (
    DublinCore,
    DublinCoreTerm,
    ExtensionAttribute,
    ExtensionBag,
    ExtensionElement,
)
from .interfaces import Feed, FeedItem
from .atom import (
    AtomCategory,
    AtomContent,
    AtomEntry,
    AtomFeed03,
    AtomFeed10,
    AtomGenerator,
    AtomInReplyTo,
    AtomLink,
    AtomLinkRelation,
    AtomPerson,
    AtomSource,
    AtomText,
    AtomTextType,
)
from .rss import (
    RssCategory,
    RssChannel,
    RssCloud,
    RssEnclosure,
    RssFeed,
    RssGuid,
    RssImage,
    RssItem,
    RssPerson,
    RssSource,
    RssTextInput,
)
from .rdf import RdfChannel, RdfFeed, RdfImage, RdfItem, RdfTextInput

DOCUMENT_TYPES = (AtomFeed10, AtomFeed03, RssFeed, RdfFeed)

__all__ = [
    "DateState",
    "FeedDate",
    "parse_datetime",
    "DublinCore",
    "DublinCoreTerm",
    "ExtensionAttribute",
    "ExtensionBag",
    "ExtensionElement",
    "Feed",
    "FeedItem",
    "AtomCategory",
    "AtomContent",
    "AtomEntry",
    "AtomFeed03",
    "AtomFeed10",
    "AtomGenerator",
    "AtomInReplyTo",
    "AtomLink",
    "AtomLinkRelation",
    "AtomPerson",
    "AtomSource",
    "AtomText",
    "AtomTextType",
    "RssCategory",
    "RssChannel",
    "RssCloud",
    "RssEnclosure",
    "RssFeed",
    "RssGuid",
    "RssImage",
    "RssItem",
    "RssPerson",
    "RssSource",
    "RssTextInput",
    "RdfChannel",
    "RdfFeed",
    "RdfImage",
    "RdfItem",
    "RdfTextInput",
    "DOCUMENT_TYPES",
]
