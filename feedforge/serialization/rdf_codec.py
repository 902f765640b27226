"""
RDF Site Summary (RSS 1.0) codec.

The channel's ``items``/``image``/``textinput`` references are derived from
the document on encode and ignored on decode.
"""

from typing import Dict, Optional

from lxml import etree

from ..model.namespaces import RDF_NS, RSS10_NS
from ..model.rdf import RdfChannel, RdfFeed, RdfImage, RdfItem, RdfTextInput
from .xml_support import (
    add_text,
    capture_attributes,
    capture_element,
    child_elements,
    qualified,
    split_tag,
    text_of,
    write_extensions,
)

RDF_ABOUT = qualified(RDF_NS, "about")
RDF_RESOURCE = qualified(RDF_NS, "resource")


def root_namespaces(feed: RdfFeed) -> Dict[Optional[str], str]:
    return {None: RSS10_NS, "rdf": RDF_NS}


def _rss(name: str) -> str:
    return qualified(RSS10_NS, name)


# Decoding


def _decode_fields(element: etree._Element, target, fields) -> None:
    """Copy RSS 1.0 child elements named in ``fields``; capture the rest."""
    target.about = element.get(RDF_ABOUT)
    capture_attributes(element, target.extensions, (RDF_ABOUT,))
    for child in child_elements(element):
        namespace, name = split_tag(child)
        if namespace == RSS10_NS and name in fields:
            setattr(target, name, text_of(child))
        elif isinstance(target, RdfChannel) and namespace == RSS10_NS and name in (
            "items",
            "image",
            "textinput",
        ):
            continue
        else:
            target.extensions.add_element(capture_element(child))


def decode_rdf(root: etree._Element, document_type=RdfFeed) -> RdfFeed:
    feed = document_type()
    capture_attributes(root, feed.extensions)
    for child in child_elements(root):
        namespace, name = split_tag(child)
        if namespace != RSS10_NS:
            feed.extensions.add_element(capture_element(child))
        elif name == "channel":
            feed.channel = RdfChannel()
            _decode_fields(child, feed.channel, ("title", "link", "description"))
        elif name == "item":
            item = RdfItem()
            _decode_fields(child, item, ("title", "link", "description"))
            feed.items.append(item)
        elif name == "image":
            feed.image = RdfImage()
            _decode_fields(child, feed.image, ("title", "url", "link"))
        elif name == "textinput":
            feed.text_input = RdfTextInput()
            _decode_fields(child, feed.text_input, ("title", "description", "name", "link"))
        else:
            feed.extensions.add_element(capture_element(child))
    return feed


# Encoding


def _reference(parent: etree._Element, name: str, resource: str) -> None:
    element = etree.SubElement(parent, _rss(name))
    element.set(RDF_RESOURCE, resource or "")


def _write_channel(root: etree._Element, feed: RdfFeed) -> None:
    channel = feed.channel
    element = etree.SubElement(root, _rss("channel"))
    element.set(RDF_ABOUT, channel.resource or "")
    add_text(element, _rss("title"), channel.title, required=True)
    add_text(element, _rss("link"), channel.link, required=True)
    add_text(element, _rss("description"), channel.description, required=True)

    if feed.image is not None:
        _reference(element, "image", feed.image.resource)

    items = etree.SubElement(element, _rss("items"))
    sequence = etree.SubElement(items, qualified(RDF_NS, "Seq"))
    for item in feed.items:
        entry = etree.SubElement(sequence, qualified(RDF_NS, "li"))
        entry.set(RDF_RESOURCE, item.resource or "")

    if feed.text_input is not None:
        _reference(element, "textinput", feed.text_input.resource)

    write_extensions(element, channel.extensions)


def _write_image(root: etree._Element, image: RdfImage) -> None:
    element = etree.SubElement(root, _rss("image"))
    element.set(RDF_ABOUT, image.resource or "")
    add_text(element, _rss("title"), image.title, required=True)
    add_text(element, _rss("url"), image.url, required=True)
    add_text(element, _rss("link"), image.link, required=True)
    write_extensions(element, image.extensions)


def _write_item(root: etree._Element, item: RdfItem) -> None:
    element = etree.SubElement(root, _rss("item"))
    element.set(RDF_ABOUT, item.resource or "")
    add_text(element, _rss("title"), item.title, required=True)
    add_text(element, _rss("link"), item.link, required=True)
    add_text(element, _rss("description"), item.description)
    write_extensions(element, item.extensions)


def _write_text_input(root: etree._Element, text_input: RdfTextInput) -> None:
    element = etree.SubElement(root, _rss("textinput"))
    element.set(RDF_ABOUT, text_input.resource or "")
    for name in ("title", "description", "name", "link"):
        add_text(element, _rss(name), getattr(text_input, name), required=True)
    write_extensions(element, text_input.extensions)


def encode_rdf(feed: RdfFeed, namespaces: Dict[Optional[str], str]) -> etree._Element:
    root = etree.Element(qualified(RDF_NS, "RDF"), nsmap=namespaces)
    _write_channel(root, feed)
    if feed.image is not None:
        _write_image(root, feed.image)
    for item in feed.items:
        _write_item(root, item)
    if feed.text_input is not None:
        _write_text_input(root, feed.text_input)
    write_extensions(root, feed.extensions)
    return root
