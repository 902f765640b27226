"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for FeedForge tests: environment defaults,
settings objects and one sample document per dialect.
"""

import pytest
import os
import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["FEEDFORGE_DEBUG"] = "false"
os.environ["FEEDFORGE_LOGGING__FILE_PATH"] = ""
os.environ["FEEDFORGE_HANDLER__TIMEOUT_MS"] = "5000"
os.environ["FEEDFORGE_SITE__TITLE"] = "FeedForge Test Site"


SAMPLE_ATOM10_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:thr="http://purl.org/syndication/thread/1.0"
      xmlns:media="http://search.yahoo.com/mrss/" xml:lang="en">
    <id>urn:uuid:60a76c80-d399-11d9-b93c-0003939e0af6</id>
    <title>Example Atom Feed</title>
    <subtitle>Everything about examples</subtitle>
    <updated>2024-09-07T00:00:01Z</updated>
    <author>
        <name>Feed Author</name>
        <email>feed@example.com</email>
    </author>
    <link rel="self" href="http://example.com/atom.xml"/>
    <link href="http://example.com/"/>
    <rights>Copyright 2024 Example</rights>
    <generator uri="http://example.com/gen" version="2.1">Example Generator</generator>
    <logo>http://example.com/logo.png</logo>
    <entry>
        <id>tag:example.com,2024:entry-1</id>
        <title type="html">First &lt;em&gt;entry&lt;/em&gt;</title>
        <updated>2024-09-05T12:00:00Z</updated>
        <published>2024-09-05T10:00:00Z</published>
        <author>
            <name>Entry Author</name>
        </author>
        <link rel="alternate" type="text/html" href="http://example.com/entry-1"/>
        <link rel="replies" type="application/atom+xml" href="http://example.com/entry-1/comments"
              thr:count="3" thr:updated="2024-09-06T08:00:00Z"/>
        <category term="tech" scheme="http://example.com/tags" label="Technology"/>
        <summary>Entry one summary</summary>
        <content type="html">&lt;p&gt;Entry one content&lt;/p&gt;</content>
        <media:thumbnail url="http://example.com/thumb.jpg" width="75"/>
    </entry>
    <entry>
        <id>tag:example.com,2024:entry-2</id>
        <title>Second entry</title>
        <updated>2024-09-04T15:30:00Z</updated>
        <contributor>
            <name>Helper</name>
        </contributor>
        <link rel="related" href="http://example.com/related-2"/>
        <thr:in-reply-to ref="tag:example.com,2024:entry-1" href="http://example.com/entry-1"/>
        <thr:total>7</thr:total>
        <content type="xhtml"><div xmlns="http://www.w3.org/1999/xhtml"><p>Second <b>body</b></p></div></content>
    </entry>
</feed>
"""

SAMPLE_ATOM03_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed version="0.3" xmlns="http://purl.org/atom/ns#">
    <title>Legacy Atom Feed</title>
    <tagline>An Atom 0.3 document</tagline>
    <link rel="alternate" type="text/html" href="http://legacy.example.com/"/>
    <modified>2005-07-31T12:29:29Z</modified>
    <copyright>Copyright 2005 Legacy</copyright>
    <author>
        <name>Mark</name>
        <url>http://legacy.example.com/mark</url>
    </author>
    <entry>
        <title>Atom 0.3 snapshot</title>
        <link rel="alternate" type="text/html" href="http://legacy.example.com/2005/07/31/1"/>
        <id>tag:legacy.example.com,2005:1</id>
        <issued>2005-07-31T12:29:29Z</issued>
        <modified>2005-07-31T12:29:29Z</modified>
        <summary>Old format entry</summary>
    </entry>
</feed>
"""

SAMPLE_RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:wfw="http://wellformedweb.org/CommentAPI/"
     xmlns:slash="http://purl.org/rss/1.0/modules/slash/">
    <channel>
        <title>Test RSS Feed</title>
        <link>http://example.com</link>
        <description>Test feed for unit testing</description>
        <language>en-us</language>
        <copyright>Copyright 2024 Example</copyright>
        <managingEditor>editor@example.com (Eddie Editor)</managingEditor>
        <pubDate>Sat, 07 Sep 2024 00:00:01 GMT</pubDate>
        <lastBuildDate>Sat, 07 Sep 2024 06:00:00 GMT</lastBuildDate>
        <category domain="http://example.com/cats">Technology</category>
        <generator>FeedForge Test</generator>
        <ttl>60</ttl>
        <image>
            <url>http://example.com/logo.png</url>
            <title>Test RSS Feed</title>
            <link>http://example.com</link>
            <width>88</width>
            <height>31</height>
        </image>
        <skipHours><hour>0</hour><hour>1</hour></skipHours>
        <skipDays><day>Saturday</day><day>sunday</day></skipDays>
        <item>
            <title>Test Article 1</title>
            <link>http://example.com/article1</link>
            <description>This is a test article summary with &lt;strong&gt;HTML&lt;/strong&gt;</description>
            <pubDate>Thu, 05 Sep 2024 12:00:00 GMT</pubDate>
            <guid>http://example.com/article1</guid>
            <author>writer@example.com (Wendy Writer)</author>
            <category>Tech</category>
            <comments>http://example.com/article1#comments</comments>
            <enclosure url="http://example.com/a1.mp3" length="12345" type="audio/mpeg"/>
            <wfw:commentRss>http://example.com/article1/comments.xml</wfw:commentRss>
            <slash:comments>4</slash:comments>
        </item>
        <item>
            <guid isPermaLink="false">article-2-guid</guid>
            <content:encoded><![CDATA[<p>Encoded body</p>]]></content:encoded>
            <dc:title>Dublin Core Title</dc:title>
            <dc:creator>DC Creator</dc:creator>
            <dc:date>2024-09-04T15:30:00Z</dc:date>
        </item>
    </channel>
</rss>
"""

SAMPLE_RDF_FEED = """<?xml version="1.0" encoding="utf-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/"
         xmlns:dc="http://purl.org/dc/elements/1.1/">
    <channel rdf:about="http://example.org/rss.rdf">
        <title>Example RDF Channel</title>
        <link>http://example.org/</link>
        <description>An RSS 1.0 channel</description>
        <dc:creator>Channel Creator</dc:creator>
        <dc:date>2024-09-07T00:00:00Z</dc:date>
        <dc:rights>Copyright 2024 RDF</dc:rights>
        <image rdf:resource="http://example.org/logo.png"/>
        <items>
            <rdf:Seq>
                <rdf:li rdf:resource="http://example.org/item/1"/>
                <rdf:li rdf:resource="http://example.org/item/2"/>
            </rdf:Seq>
        </items>
        <textinput rdf:resource="http://example.org/search"/>
    </channel>
    <image rdf:about="http://example.org/logo.png">
        <title>Example</title>
        <url>http://example.org/logo.png</url>
        <link>http://example.org/</link>
    </image>
    <item rdf:about="http://example.org/item/1">
        <title>RDF Item One</title>
        <link>http://example.org/item/1</link>
        <description>First RDF item</description>
        <dc:date>2024-09-06T09:00:00Z</dc:date>
        <dc:subject>Testing</dc:subject>
    </item>
    <item rdf:about="http://example.org/item/2">
        <title>RDF Item Two</title>
        <link>http://example.org/item/2</link>
        <dc:publisher>Item Publisher</dc:publisher>
    </item>
    <textinput rdf:about="http://example.org/search">
        <title>Search</title>
        <description>Search the site</description>
        <name>q</name>
        <link>http://example.org/search</link>
    </textinput>
</rdf:RDF>
"""


@pytest.fixture
def atom10_xml():
    """Atom 1.0 document with threading and extension elements."""
    return SAMPLE_ATOM10_FEED


@pytest.fixture
def atom03_xml():
    """Atom 0.3 document using the legacy element names."""
    return SAMPLE_ATOM03_FEED


@pytest.fixture
def rss_xml():
    """RSS 2.0 document with Dublin Core, content and comment modules."""
    return SAMPLE_RSS_FEED


@pytest.fixture
def rdf_xml():
    """RSS 1.0 document with image, textinput and Dublin Core metadata."""
    return SAMPLE_RDF_FEED


@pytest.fixture
def sample_documents():
    """All four sample documents keyed by dialect label."""
    return {
        "atom10": SAMPLE_ATOM10_FEED,
        "atom03": SAMPLE_ATOM03_FEED,
        "rss": SAMPLE_RSS_FEED,
        "rdf": SAMPLE_RDF_FEED,
    }


@pytest.fixture
def test_settings():
    """Settings with a short handler timeout and no file logging."""
    from feedforge.config.settings import FeedForgeSettings, HandlerSettings, SiteSettings

    return FeedForgeSettings(
        debug=False,
        site=SiteSettings(
            title="FeedForge Test Site",
            copyright="Copyright Test",
            base_url="http://feeds.example.com/",
        ),
        handler=HandlerSettings(timeout_ms=300),
    )


@pytest.fixture
def serializer():
    """Fresh serializer instance."""
    from feedforge.serialization.serializer import FeedSerializer

    return FeedSerializer()
