"""
Dialect feed handlers.

Each handler serves one dialect and knows how to describe a failure as a
feed of that dialect: one item per exception in the cause chain, outermost
first.
"""

import uuid
from typing import Optional

from ..model.atom import AtomEntry, AtomFeed10, AtomGenerator, AtomLink, AtomText, AtomTextType
from ..model.dates import FeedDate
from ..model.extensions import DublinCoreTerm
from ..model.namespaces import ATOM_MIME_TYPE, RSS_MIME_TYPE
from ..model.rdf import RdfChannel, RdfFeed, RdfItem
from ..model.rss import RssCategory, RssChannel, RssFeed, RssItem
from .context import FeedContext
from .pipeline import FeedHandler

ERROR_FEED_TITLE = "Server Error"
ERROR_FEED_DESCRIPTION = "An error occurred while generating this feed. See feed items for details."
ERROR_CATEGORY = "error"


def _help_link(exception: BaseException) -> Optional[str]:
    return getattr(exception, "help_link", None)


def _urn() -> str:
    return f"urn:uuid:{uuid.uuid4()}"


class AtomFeedHandler(FeedHandler):
    """Serves Atom 1.0 feeds."""

    dialect = "atom"
    mime_type = ATOM_MIME_TYPE

    def build_error_feed(self, context: FeedContext, exception: BaseException) -> AtomFeed10:
        site = self.settings.site
        updated = FeedDate.now()
        feed = AtomFeed10(
            id=_urn(),
            title=AtomText(value=ERROR_FEED_TITLE),
            subtitle=AtomText(value=ERROR_FEED_DESCRIPTION),
            updated=updated,
            generator=AtomGenerator(value=site.title, version=self.settings.version),
        )
        if site.copyright:
            feed.rights = AtomText(value=site.copyright)
        if site.base_url:
            feed.links.append(AtomLink(href=site.base_url))

        summary_type = AtomTextType.HTML if self.debug else AtomTextType.TEXT
        for error in self.exception_chain(exception):
            entry = AtomEntry(
                id=_urn(),
                title=AtomText(value=type(error).__name__),
                summary=AtomText(type=summary_type, value=self.describe_exception(error)),
                updated=updated,
                published=updated,
            )
            link = _help_link(error)
            if link:
                entry.links.append(AtomLink(href=link))
            feed.entries.append(entry)
        return feed


class RssFeedHandler(FeedHandler):
    """Serves RSS 2.0 feeds."""

    dialect = "rss"
    mime_type = RSS_MIME_TYPE

    def build_error_feed(self, context: FeedContext, exception: BaseException) -> RssFeed:
        site = self.settings.site
        now = FeedDate.now()
        channel = RssChannel(
            title=ERROR_FEED_TITLE,
            link=site.base_url or "",
            description=ERROR_FEED_DESCRIPTION,
            copyright=site.copyright,
            last_build_date=now,
            generator=site.title,
            categories=[RssCategory(value=ERROR_CATEGORY)],
        )
        for error in self.exception_chain(exception):
            channel.items.append(
                RssItem(
                    title=type(error).__name__,
                    link=_help_link(error),
                    description=self.describe_exception(error),
                    pub_date=now,
                )
            )
        return RssFeed(channel=channel)


class RdfFeedHandler(FeedHandler):
    """Serves RDF Site Summary (RSS 1.0) feeds."""

    dialect = "rdf"
    mime_type = RSS_MIME_TYPE

    def build_error_feed(self, context: FeedContext, exception: BaseException) -> RdfFeed:
        site = self.settings.site
        timestamp = FeedDate.now().to_iso8601()
        channel = RdfChannel(
            about=context.url or site.base_url or _urn(),
            title=ERROR_FEED_TITLE,
            link=site.base_url or "",
            description=ERROR_FEED_DESCRIPTION,
        )
        channel.extensions.dublin_core[DublinCoreTerm.DATE] = timestamp
        if site.copyright:
            channel.extensions.dublin_core[DublinCoreTerm.RIGHTS] = site.copyright

        feed = RdfFeed(channel=channel)
        for error in self.exception_chain(exception):
            item = RdfItem(
                about=_urn(),
                title=type(error).__name__,
                link=_help_link(error) or "",
                description=self.describe_exception(error),
            )
            item.extensions.dublin_core[DublinCoreTerm.DATE] = timestamp
            feed.items.append(item)
        return feed


HANDLER_TYPES = {
    AtomFeedHandler.dialect: AtomFeedHandler,
    RssFeedHandler.dialect: RssFeedHandler,
    RdfFeedHandler.dialect: RdfFeedHandler,
}
