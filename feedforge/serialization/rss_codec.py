"""
RSS 2.0 codec.

Channel title, link and description are always written. Optional elements
are omitted when unset, and numeric fields with an out-of-range value (ttl
below zero, image size or cloud port not positive) suppress their element.
"""

from typing import Dict, Optional

from lxml import etree

from ..model.dates import FeedDate
from ..model.extensions import ExtensionBag
from ..model.rss import (
    WEEKDAYS,
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
from .xml_support import (
    add_text,
    capture_attributes,
    capture_element,
    child_elements,
    int_or_none,
    set_attribute,
    split_tag,
    text_of,
    write_extensions,
)

_DAY_NAMES = {day.lower(): day for day in WEEKDAYS}
_CLOUD_ATTRIBUTES = ("domain", "port", "path", "registerProcedure", "protocol")


def root_namespaces(feed: RssFeed) -> Dict[Optional[str], str]:
    return {}


# Decoding


def _plain_children(element: etree._Element):
    """Yield (local name, child) for no-namespace children."""
    for child in child_elements(element):
        namespace, name = split_tag(child)
        yield (name if not namespace else None), child


def _value_of(element: etree._Element, bag: ExtensionBag, known=()) -> str:
    """Text of a simple-valued element; other attributes and child elements go to ``bag``."""
    capture_attributes(element, bag, known)
    children = list(child_elements(element))
    if not children:
        return text_of(element)
    for child in children:
        bag.add_element(capture_element(child))
    return element.text or ""


def _decode_category(element: etree._Element) -> RssCategory:
    category = RssCategory(domain=element.get("domain"))
    category.value = _value_of(element, category.extensions, ("domain",))
    return category


def _decode_image(element: etree._Element) -> RssImage:
    image = RssImage()
    capture_attributes(element, image.extensions)
    for name, child in _plain_children(element):
        if name == "url":
            image.url = text_of(child)
        elif name == "title":
            image.title = text_of(child)
        elif name == "link":
            image.link = text_of(child)
        elif name == "width":
            image.width = int_or_none(text_of(child))
        elif name == "height":
            image.height = int_or_none(text_of(child))
        elif name == "description":
            image.description = text_of(child)
        else:
            image.extensions.add_element(capture_element(child))
    return image


def _decode_text_input(element: etree._Element) -> RssTextInput:
    text_input = RssTextInput()
    capture_attributes(element, text_input.extensions)
    for name, child in _plain_children(element):
        if name in ("title", "description", "name", "link"):
            setattr(text_input, name, text_of(child))
        else:
            text_input.extensions.add_element(capture_element(child))
    return text_input


def _decode_cloud(element: etree._Element) -> RssCloud:
    cloud = RssCloud(
        domain=element.get("domain", ""),
        port=int_or_none(element.get("port")),
        path=element.get("path", ""),
        register_procedure=element.get("registerProcedure", ""),
        protocol=element.get("protocol", ""),
    )
    capture_attributes(element, cloud.extensions, _CLOUD_ATTRIBUTES)
    for child in child_elements(element):
        cloud.extensions.add_element(capture_element(child))
    return cloud


def _decode_enclosure(element: etree._Element) -> RssEnclosure:
    enclosure = RssEnclosure(
        url=element.get("url", ""),
        length=int_or_none(element.get("length")) or 0,
        type=element.get("type", ""),
    )
    capture_attributes(element, enclosure.extensions, ("url", "length", "type"))
    for child in child_elements(element):
        enclosure.extensions.add_element(capture_element(child))
    return enclosure


def _decode_guid(element: etree._Element) -> RssGuid:
    guid = RssGuid(is_permalink=element.get("isPermaLink", "true").strip().lower() != "false")
    guid.value = _value_of(element, guid.extensions, ("isPermaLink",))
    return guid


def _decode_source(element: etree._Element) -> RssSource:
    source = RssSource(url=element.get("url", ""))
    source.value = _value_of(element, source.extensions, ("url",))
    return source


def _decode_item(element: etree._Element) -> RssItem:
    item = RssItem()
    capture_attributes(element, item.extensions)
    for name, child in _plain_children(element):
        if name == "title":
            item.title = text_of(child)
        elif name == "link":
            item.link = text_of(child)
        elif name == "description":
            item.description = text_of(child)
        elif name == "author":
            item.author = RssPerson.parse(text_of(child))
        elif name == "category":
            item.categories.append(_decode_category(child))
        elif name == "comments":
            item.comments = text_of(child)
        elif name == "enclosure":
            item.enclosure = _decode_enclosure(child)
        elif name == "guid":
            item.guid = _decode_guid(child)
        elif name == "pubDate":
            item.pub_date = FeedDate.parse(text_of(child))
        elif name == "source":
            item.source = _decode_source(child)
        else:
            item.extensions.add_element(capture_element(child))
    return item


def _decode_channel(element: etree._Element) -> RssChannel:
    channel = RssChannel()
    capture_attributes(element, channel.extensions)
    for name, child in _plain_children(element):
        if name == "title":
            channel.title = text_of(child)
        elif name == "link":
            channel.link = text_of(child)
        elif name == "description":
            channel.description = text_of(child)
        elif name == "language":
            channel.language = text_of(child)
        elif name == "copyright":
            channel.copyright = text_of(child)
        elif name == "managingEditor":
            channel.managing_editor = RssPerson.parse(text_of(child))
        elif name == "webMaster":
            channel.web_master = RssPerson.parse(text_of(child))
        elif name == "pubDate":
            channel.pub_date = FeedDate.parse(text_of(child))
        elif name == "lastBuildDate":
            channel.last_build_date = FeedDate.parse(text_of(child))
        elif name == "category":
            channel.categories.append(_decode_category(child))
        elif name == "generator":
            channel.generator = text_of(child)
        elif name == "docs":
            channel.docs = text_of(child)
        elif name == "cloud":
            channel.cloud = _decode_cloud(child)
        elif name == "ttl" and int_or_none(text_of(child)) is not None:
            channel.ttl = int_or_none(text_of(child))
        elif name == "image":
            channel.image = _decode_image(child)
        elif name == "rating":
            channel.rating = text_of(child)
        elif name == "textInput":
            channel.text_input = _decode_text_input(child)
        elif name == "skipHours":
            for _, hour in _plain_children(child):
                value = int_or_none(text_of(hour))
                if value is not None and 0 <= value <= 23:
                    channel.skip_hours.append(value)
        elif name == "skipDays":
            for _, day in _plain_children(child):
                value = _DAY_NAMES.get(text_of(day).strip().lower())
                if value is not None:
                    channel.skip_days.append(value)
        elif name == "item":
            channel.items.append(_decode_item(child))
        else:
            channel.extensions.add_element(capture_element(child))
    return channel


def decode_rss(root: etree._Element, document_type=RssFeed) -> RssFeed:
    feed = document_type(version=root.get("version", "2.0"))
    capture_attributes(root, feed.extensions, ("version",))
    for name, child in _plain_children(root):
        if name == "channel":
            feed.channel = _decode_channel(child)
        else:
            feed.extensions.add_element(capture_element(child))
    return feed


# Encoding


def _write_person(parent: etree._Element, tag: str, person: Optional[RssPerson]) -> None:
    if person is not None and not person.is_empty:
        add_text(parent, tag, person.value)


def _write_date(parent: etree._Element, tag: str, value: FeedDate) -> None:
    add_text(parent, tag, value.to_rfc822())


def _write_categories(parent: etree._Element, categories) -> None:
    for category in categories:
        element = add_text(parent, "category", category.value, required=True)
        set_attribute(element, "domain", category.domain)
        write_extensions(element, category.extensions)


def _write_item(parent: etree._Element, item: RssItem) -> None:
    element = etree.SubElement(parent, "item")
    add_text(element, "title", item.title)
    add_text(element, "link", item.link)
    add_text(element, "description", item.description)
    _write_person(element, "author", item.author)
    _write_categories(element, item.categories)
    add_text(element, "comments", item.comments)

    if item.enclosure is not None and not item.enclosure.is_empty:
        enclosure = etree.SubElement(element, "enclosure")
        enclosure.set("url", item.enclosure.url)
        enclosure.set("length", str(max(item.enclosure.length or 0, 0)))
        enclosure.set("type", item.enclosure.type or "")
        write_extensions(enclosure, item.enclosure.extensions)

    if item.guid is not None:
        guid = add_text(element, "guid", item.guid.value, required=True)
        if not item.guid.permalink:
            guid.set("isPermaLink", "false")
        write_extensions(guid, item.guid.extensions)

    _write_date(element, "pubDate", item.pub_date)

    if item.source is not None:
        source = add_text(element, "source", item.source.value, required=True)
        source.set("url", item.source.url or "")
        write_extensions(source, item.source.extensions)

    write_extensions(element, item.extensions)


def _write_image(parent: etree._Element, image: Optional[RssImage]) -> None:
    if image is None or image.is_empty:
        return
    element = etree.SubElement(parent, "image")
    add_text(element, "url", image.url, required=True)
    add_text(element, "title", image.title, required=True)
    add_text(element, "link", image.link, required=True)
    if image.width is not None and image.width > 0:
        add_text(element, "width", str(image.width))
    if image.height is not None and image.height > 0:
        add_text(element, "height", str(image.height))
    add_text(element, "description", image.description)
    write_extensions(element, image.extensions)


def _write_cloud(parent: etree._Element, cloud: Optional[RssCloud]) -> None:
    if cloud is None or cloud.is_empty:
        return
    element = etree.SubElement(parent, "cloud")
    element.set("domain", cloud.domain)
    if cloud.port is not None and cloud.port > 0:
        element.set("port", str(cloud.port))
    element.set("path", cloud.path or "")
    element.set("registerProcedure", cloud.register_procedure or "")
    element.set("protocol", cloud.protocol or "")
    write_extensions(element, cloud.extensions)


def _write_text_input(parent: etree._Element, text_input: Optional[RssTextInput]) -> None:
    if text_input is None or text_input.is_empty:
        return
    element = etree.SubElement(parent, "textInput")
    for name in ("title", "description", "name", "link"):
        add_text(element, name, getattr(text_input, name), required=True)
    write_extensions(element, text_input.extensions)


def _write_channel(parent: etree._Element, channel: RssChannel) -> None:
    element = etree.SubElement(parent, "channel")
    add_text(element, "title", channel.title, required=True)
    add_text(element, "link", channel.link, required=True)
    add_text(element, "description", channel.description, required=True)
    add_text(element, "language", channel.language)
    add_text(element, "copyright", channel.copyright)
    _write_person(element, "managingEditor", channel.managing_editor)
    _write_person(element, "webMaster", channel.web_master)
    _write_date(element, "pubDate", channel.pub_date)
    _write_date(element, "lastBuildDate", channel.last_build_date)
    _write_categories(element, channel.categories)
    add_text(element, "generator", channel.generator)
    add_text(element, "docs", channel.docs)
    _write_cloud(element, channel.cloud)
    if channel.ttl is not None and channel.ttl >= 0:
        add_text(element, "ttl", str(channel.ttl))
    _write_image(element, channel.image)
    add_text(element, "rating", channel.rating)
    _write_text_input(element, channel.text_input)

    hours = [hour for hour in channel.skip_hours if 0 <= hour <= 23]
    if hours:
        skip_hours = etree.SubElement(element, "skipHours")
        for hour in hours:
            add_text(skip_hours, "hour", str(hour))

    days = [_DAY_NAMES[day.lower()] for day in channel.skip_days if day.lower() in _DAY_NAMES]
    if days:
        skip_days = etree.SubElement(element, "skipDays")
        for day in days:
            add_text(skip_days, "day", day)

    write_extensions(element, channel.extensions)
    for item in channel.items:
        _write_item(element, item)


def encode_rss(feed: RssFeed, namespaces: Dict[Optional[str], str]) -> etree._Element:
    nsmap = {prefix: uri for prefix, uri in namespaces.items() if prefix}
    root = etree.Element("rss", nsmap=nsmap)
    root.set("version", feed.version or "2.0")
    write_extensions(root, feed.extensions)
    _write_channel(root, feed.channel)
    return root
