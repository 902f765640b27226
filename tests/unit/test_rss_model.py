"""
Unit Tests for the RSS 2.0 Model
================================

Tests for decoding RSS 2.0 documents, the person and guid rules, and the
normalized item fallbacks through the content and Dublin Core modules.
"""

from datetime import datetime, timezone

import pytest

from feedforge.model.dates import DateState
from feedforge.model.extensions import ExtensionElement
from feedforge.model.namespaces import CONTENT_NS, DC_NS, RSS_MIME_TYPE, SLASH_NS, WFW_NS
from feedforge.model.rss import (
    RssChannel,
    RssCloud,
    RssEnclosure,
    RssFeed,
    RssGuid,
    RssImage,
    RssItem,
    RssPerson,
    RssTextInput,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestRssDecoding:
    """Test decoding of the sample RSS 2.0 document."""

    @pytest.fixture
    def feed(self, serializer, rss_xml):
        return serializer.decode(rss_xml)

    @pytest.fixture
    def channel(self, feed):
        return feed.document.channel

    def test_document_type(self, feed):
        assert isinstance(feed.document, RssFeed)
        assert feed.document.version == "2.0"
        assert feed.mime_type == RSS_MIME_TYPE

    def test_feed_fields(self, feed):
        assert feed.id == "http://example.com"
        assert feed.title == "Test RSS Feed"
        assert feed.description == "Test feed for unit testing"
        assert feed.author == "Eddie Editor"
        assert feed.published == utc(2024, 9, 7, 0, 0, 1)
        assert feed.updated == utc(2024, 9, 7, 6, 0)
        assert feed.link == "http://example.com"
        assert feed.image_link == "http://example.com/logo.png"
        assert feed.copyright == "Copyright 2024 Example"
        assert len(feed.items) == 2

    def test_channel_elements(self, channel):
        assert channel.language == "en-us"
        assert channel.ttl == 60
        assert channel.generator == "FeedForge Test"
        assert channel.categories[0].value == "Technology"
        assert channel.categories[0].domain == "http://example.com/cats"
        assert channel.image.width == 88
        assert channel.image.height == 31

    def test_skip_hours_and_days(self, channel):
        assert channel.skip_hours == [0, 1]
        assert channel.skip_days == ["Saturday", "Sunday"]

    def test_managing_editor_is_split(self, channel):
        assert channel.managing_editor.email == "editor@example.com"
        assert channel.managing_editor.name == "Eddie Editor"

    def test_first_item(self, feed):
        item = feed.items[0]
        assert item.id == "http://example.com/article1"
        assert item.title == "Test Article 1"
        assert item.description == "This is a test article summary with <strong>HTML</strong>"
        assert item.author == "Wendy Writer"
        assert item.published == utc(2024, 9, 5, 12, 0)
        assert item.updated == item.published
        assert item.link == "http://example.com/article1"

    def test_first_item_comments(self, feed):
        item = feed.items[0]
        assert item.thread_link == "http://example.com/article1/comments.xml"
        assert item.thread_count == 4

    def test_enclosure(self, channel):
        enclosure = channel.items[0].enclosure
        assert enclosure.url == "http://example.com/a1.mp3"
        assert enclosure.length == 12345
        assert enclosure.type == "audio/mpeg"

    def test_second_item_uses_modules(self, feed):
        item = feed.items[1]
        assert item.id == "article-2-guid"
        assert item.title == "Dublin Core Title"
        assert item.description == "<p>Encoded body</p>"
        assert item.author == "DC Creator"
        assert item.published == utc(2024, 9, 4, 15, 30)

    def test_non_permalink_guid_is_not_a_link(self, feed):
        assert feed.items[1].link is None
        assert feed.document.channel.items[1].guid.is_permalink is False

    def test_invalid_ttl_is_kept_as_extension(self, serializer):
        xml = (
            "<rss version='2.0'><channel><title>t</title><link>l</link>"
            "<description>d</description><ttl>soon</ttl></channel></rss>"
        )
        channel = serializer.decode_document(xml).channel
        assert channel.ttl is None
        assert channel.extensions.find_text("", "ttl") == "soon"

    def test_garbage_pub_date_is_unparsed(self, serializer):
        xml = (
            "<rss version='2.0'><channel><title>t</title><link>l</link><description>d</description>"
            "<item><title>x</title><pubDate>garbage-date-value</pubDate></item></channel></rss>"
        )
        feed = serializer.decode(xml)
        assert feed.items[0].published is None
        assert feed.document.channel.items[0].pub_date.state is DateState.UNPARSED


class TestRssDescriptionFallback:
    """Each level of the item description fallback, verified on its own."""

    def test_native_description(self):
        item = RssItem(description="Native")
        item.extensions.add_element(ExtensionElement(CONTENT_NS, "encoded", "Encoded"))
        assert item.as_item().description == "Native"

    def test_content_encoded(self):
        item = RssItem()
        item.extensions.add_element(ExtensionElement(CONTENT_NS, "encoded", "Encoded"))
        item.extensions.add_element(ExtensionElement(DC_NS, "description", "DC description"))
        assert item.as_item().description == "Encoded"

    def test_dc_description(self):
        item = RssItem()
        item.extensions.add_element(ExtensionElement(DC_NS, "description", "DC description"))
        item.extensions.add_element(ExtensionElement(DC_NS, "subject", "DC subject"))
        assert item.as_item().description == "DC description"

    def test_dc_subject(self):
        item = RssItem()
        item.extensions.add_element(ExtensionElement(DC_NS, "subject", "DC subject"))
        assert item.as_item().description == "DC subject"

    def test_nothing(self):
        assert RssItem().as_item().description is None


class TestRssItemView:
    """Test remaining item fallbacks."""

    def test_author_falls_back_to_dc_contributor_then_publisher(self):
        item = RssItem()
        item.extensions.add_element(ExtensionElement(DC_NS, "publisher", "Publisher"))
        assert item.as_item().author == "Publisher"
        item.extensions.add_element(ExtensionElement(DC_NS, "contributor", "Contributor"))
        assert item.as_item().author == "Contributor"

    def test_thread_link_falls_back_to_comments(self):
        item = RssItem(comments="http://example.com/c")
        assert item.as_item().thread_link == "http://example.com/c"

    def test_non_numeric_slash_comments(self):
        item = RssItem()
        item.extensions.add_element(ExtensionElement(SLASH_NS, "comments", "many"))
        assert item.as_item().thread_count is None

    def test_wfw_comment_rss_preferred(self):
        item = RssItem(comments="http://example.com/c")
        item.extensions.add_element(ExtensionElement(WFW_NS, "commentRss", "http://example.com/rss"))
        assert item.as_item().thread_link == "http://example.com/rss"

    def test_permalink_guid_used_as_link(self):
        item = RssItem(guid=RssGuid("http://example.com/p"))
        assert item.as_item().link == "http://example.com/p"


class TestRssValueTypes:
    """Test the small RSS value types."""

    @pytest.mark.parametrize(
        "text,email,name",
        [
            ("editor@example.com (Eddie Editor)", "editor@example.com", "Eddie Editor"),
            ("editor@example.com", "editor@example.com", None),
            ("Eddie Editor", None, "Eddie Editor"),
            ("", None, None),
        ],
    )
    def test_person_parse(self, text, email, name):
        person = RssPerson.parse(text)
        assert person.email == email
        assert person.name == name

    def test_person_value(self):
        assert RssPerson("a@b.c", "Ann").value == "a@b.c (Ann)"
        assert RssPerson(name="Ann").value == "Ann"
        assert RssPerson().is_empty

    def test_guid_permalink_requires_http(self):
        assert RssGuid("http://example.com/1").permalink
        assert not RssGuid("urn:x:1").permalink
        assert not RssGuid("http://example.com/1", is_permalink=False).permalink

    def test_empty_rules(self):
        assert RssImage().is_empty
        assert RssCloud().is_empty
        assert RssEnclosure().is_empty
        assert RssTextInput(title="Search").is_empty
        assert not RssTextInput(name="q", link="http://example.com/s").is_empty

    def test_feed_items_delegate_to_channel(self):
        channel = RssChannel(items=[RssItem(title="a")])
        assert RssFeed(channel=channel).items == channel.items

    def test_empty_channel_view(self):
        view = RssFeed().as_feed()
        assert view.id is None
        assert view.author is None
        assert view.image_link is None
        assert view.published is None
