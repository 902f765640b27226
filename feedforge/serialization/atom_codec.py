"""
Atom 1.0 / 0.3 codec.

Both versions share one code path; a vocabulary record supplies the
element names that differ between them.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Type, Union

from lxml import etree

from ..model.atom import (
    AtomCategory,
    AtomContent,
    AtomEntry,
    AtomFeed03,
    AtomFeed10,
    AtomGenerator,
    AtomInReplyTo,
    AtomLink,
    AtomPerson,
    AtomSource,
    AtomText,
    AtomTextType,
)
from ..model.dates import FeedDate
from ..model.namespaces import ATOM03_NS, ATOM10_NS, THREADING_NS
from .xml_support import (
    XML_BASE,
    XML_LANG,
    add_text,
    append_markup,
    capture_attributes,
    capture_element,
    child_elements,
    inner_markup,
    int_or_none,
    qualified,
    set_attribute,
    split_tag,
    text_of,
    write_extensions,
)

AtomFeed = Union[AtomFeed10, AtomFeed03]


@dataclass(frozen=True)
class AtomVocabulary:
    namespace: str
    updated: str
    published: str
    subtitle: str
    rights: str
    person_uri: str
    generator_uri: str
    updated_required: bool


ATOM10 = AtomVocabulary(
    namespace=ATOM10_NS,
    updated="updated",
    published="published",
    subtitle="subtitle",
    rights="rights",
    person_uri="uri",
    generator_uri="uri",
    updated_required=True,
)

ATOM03 = AtomVocabulary(
    namespace=ATOM03_NS,
    updated="modified",
    published="issued",
    subtitle="tagline",
    rights="copyright",
    person_uri="url",
    generator_uri="url",
    updated_required=False,
)

_TEXT_TYPES = {t.value: t for t in AtomTextType}
_THR_COUNT = qualified(THREADING_NS, "count")
_THR_UPDATED = qualified(THREADING_NS, "updated")


def vocabulary_for(document_type: Type) -> AtomVocabulary:
    return ATOM03 if document_type is AtomFeed03 else ATOM10


def root_namespaces(feed: AtomFeed) -> Dict[Optional[str], str]:
    return {None: vocabulary_for(type(feed)).namespace}


# Decoding


def _read_common(element: etree._Element, target, known=()) -> None:
    target.xml_lang = element.get(XML_LANG)
    target.xml_base = element.get(XML_BASE)
    capture_attributes(element, target.extensions, known)


def _decode_text(element: etree._Element, text_type: Type[AtomText] = AtomText) -> AtomText:
    text = text_type()
    known = ("type", "src") if text_type is AtomContent else ("type",)
    _read_common(element, text, known)

    raw_type = element.get("type")
    if raw_type is not None:
        parsed = _TEXT_TYPES.get(raw_type.strip().lower())
        if parsed is None:
            text.media_type = raw_type
        else:
            text.type = parsed

    if isinstance(text, AtomContent):
        text.src = element.get("src")

    if text.is_markup or next(child_elements(element), None) is not None:
        text.markup = True
        text.value = inner_markup(element)
    else:
        text.value = text_of(element)
    return text


def _decode_person(element: etree._Element, vocab: AtomVocabulary) -> AtomPerson:
    person = AtomPerson()
    _read_common(element, person)
    for child in child_elements(element):
        namespace, name = split_tag(child)
        if namespace == vocab.namespace and name == "name":
            person.name = text_of(child)
        elif namespace == vocab.namespace and name == vocab.person_uri:
            person.uri = text_of(child)
        elif namespace == vocab.namespace and name == "email":
            person.email = text_of(child)
        else:
            person.extensions.add_element(capture_element(child))
    return person


def _decode_link(element: etree._Element) -> AtomLink:
    link = AtomLink(
        href=element.get("href", ""),
        rel=element.get("rel"),
        type=element.get("type"),
        hreflang=element.get("hreflang"),
        title=element.get("title"),
        length=element.get("length"),
    )
    known = ["href", "rel", "type", "hreflang", "title", "length", _THR_UPDATED]
    count = int_or_none(element.get(_THR_COUNT))
    if count is not None:
        link.thread_count = count
        known.append(_THR_COUNT)
    link.thread_updated = FeedDate.parse(element.get(_THR_UPDATED))
    _read_common(element, link, known)
    for child in child_elements(element):
        link.extensions.add_element(capture_element(child))
    return link


def _decode_category(element: etree._Element) -> AtomCategory:
    category = AtomCategory(
        term=element.get("term", ""),
        scheme=element.get("scheme"),
        label=element.get("label"),
    )
    _read_common(element, category, ("term", "scheme", "label"))
    for child in child_elements(element):
        category.extensions.add_element(capture_element(child))
    return category


def _decode_generator(element: etree._Element, vocab: AtomVocabulary) -> AtomGenerator:
    generator = AtomGenerator(
        value=text_of(element),
        uri=element.get(vocab.generator_uri),
        version=element.get("version"),
    )
    _read_common(element, generator, (vocab.generator_uri, "version"))
    return generator


def _decode_in_reply_to(element: etree._Element) -> AtomInReplyTo:
    reply = AtomInReplyTo(
        ref=element.get("ref", ""),
        href=element.get("href"),
        source=element.get("source"),
        type=element.get("type"),
    )
    _read_common(element, reply, ("ref", "href", "source", "type"))
    return reply


def _decode_source_field(
    child: etree._Element, target: AtomSource, vocab: AtomVocabulary
) -> bool:
    """Decode one feed-level metadata element into ``target``.

    Returns False when the element is not feed metadata.
    """
    namespace, name = split_tag(child)
    if namespace != vocab.namespace:
        return False

    if name == "id":
        target.id = text_of(child)
    elif name == "title":
        target.title = _decode_text(child)
    elif name == vocab.subtitle:
        target.subtitle = _decode_text(child)
    elif name == vocab.updated:
        target.updated = FeedDate.parse(text_of(child))
    elif name == "author":
        target.authors.append(_decode_person(child, vocab))
    elif name == "contributor":
        target.contributors.append(_decode_person(child, vocab))
    elif name == "category":
        target.categories.append(_decode_category(child))
    elif name == "link":
        target.links.append(_decode_link(child))
    elif name == vocab.rights:
        target.rights = _decode_text(child)
    elif name == "generator":
        target.generator = _decode_generator(child, vocab)
    elif name == "icon":
        target.icon = text_of(child)
    elif name == "logo":
        target.logo = text_of(child)
    else:
        return False
    return True


def _decode_source(element: etree._Element, vocab: AtomVocabulary) -> AtomSource:
    source = AtomSource()
    _read_common(element, source)
    for child in child_elements(element):
        if not _decode_source_field(child, source, vocab):
            source.extensions.add_element(capture_element(child))
    return source


def _decode_entry(element: etree._Element, vocab: AtomVocabulary) -> AtomEntry:
    entry = AtomEntry()
    _read_common(element, entry)
    for child in child_elements(element):
        namespace, name = split_tag(child)
        if namespace == vocab.namespace:
            if name == "id":
                entry.id = text_of(child)
            elif name == "title":
                entry.title = _decode_text(child)
            elif name == vocab.updated:
                entry.updated = FeedDate.parse(text_of(child))
            elif name == vocab.published:
                entry.published = FeedDate.parse(text_of(child))
            elif name == "author":
                entry.authors.append(_decode_person(child, vocab))
            elif name == "contributor":
                entry.contributors.append(_decode_person(child, vocab))
            elif name == "category":
                entry.categories.append(_decode_category(child))
            elif name == "link":
                entry.links.append(_decode_link(child))
            elif name == vocab.rights:
                entry.rights = _decode_text(child)
            elif name == "summary":
                entry.summary = _decode_text(child)
            elif name == "content":
                entry.content = _decode_text(child, AtomContent)
            elif name == "source":
                entry.source = _decode_source(child, vocab)
            else:
                entry.extensions.add_element(capture_element(child))
        elif namespace == THREADING_NS and name == "in-reply-to":
            entry.in_reply_to.append(_decode_in_reply_to(child))
        elif namespace == THREADING_NS and name == "total":
            total = int_or_none(text_of(child))
            if total is None:
                entry.extensions.add_element(capture_element(child))
            else:
                entry.thread_total = total
        else:
            entry.extensions.add_element(capture_element(child))
    return entry


def decode_atom(root: etree._Element, document_type: Type) -> AtomFeed:
    vocab = vocabulary_for(document_type)
    feed = document_type()
    if document_type is AtomFeed03:
        feed.version = root.get("version", "0.3")
        _read_common(root, feed, ("version",))
    else:
        _read_common(root, feed)

    for child in child_elements(root):
        namespace, name = split_tag(child)
        if namespace == vocab.namespace and name == "entry":
            feed.entries.append(_decode_entry(child, vocab))
        elif not _decode_source_field(child, feed, vocab):
            feed.extensions.add_element(capture_element(child))
    return feed


# Encoding


def _write_common(element: etree._Element, source) -> None:
    set_attribute(element, XML_LANG, source.xml_lang)
    set_attribute(element, XML_BASE, source.xml_base)


def _write_text(
    parent: etree._Element, tag: str, text: Optional[AtomText], required: bool = False
) -> None:
    if text is None:
        if required:
            etree.SubElement(parent, tag)
        return

    element = etree.SubElement(parent, tag)
    _write_common(element, text)
    set_attribute(element, "type", text.type_attribute)

    if isinstance(text, AtomContent) and text.src:
        element.set("src", text.src)
    elif text.value and text.is_markup:
        append_markup(element, text.value)
    elif text.value:
        element.text = text.value
    write_extensions(element, text.extensions)


def _write_date(
    parent: etree._Element, tag: str, value: FeedDate, required: bool = False
) -> None:
    add_text(parent, tag, value.to_iso8601(), required=required)


def _write_person(
    parent: etree._Element, tag: str, person: AtomPerson, vocab: AtomVocabulary
) -> None:
    element = etree.SubElement(parent, tag)
    _write_common(element, person)
    ns = vocab.namespace
    add_text(element, qualified(ns, "name"), person.name, required=True)
    add_text(element, qualified(ns, vocab.person_uri), person.uri)
    add_text(element, qualified(ns, "email"), person.email)
    write_extensions(element, person.extensions)


def _write_link(parent: etree._Element, link: AtomLink, vocab: AtomVocabulary) -> None:
    element = etree.SubElement(parent, qualified(vocab.namespace, "link"))
    _write_common(element, link)
    element.set("href", link.href or "")
    set_attribute(element, "rel", link.rel)
    set_attribute(element, "type", link.type)
    set_attribute(element, "hreflang", link.hreflang)
    set_attribute(element, "title", link.title)
    set_attribute(element, "length", link.length)
    set_attribute(element, _THR_COUNT, link.thread_count)
    set_attribute(element, _THR_UPDATED, link.thread_updated.to_iso8601())
    write_extensions(element, link.extensions)


def _write_category(parent: etree._Element, category: AtomCategory, vocab: AtomVocabulary) -> None:
    element = etree.SubElement(parent, qualified(vocab.namespace, "category"))
    _write_common(element, category)
    element.set("term", category.term or "")
    set_attribute(element, "scheme", category.scheme)
    set_attribute(element, "label", category.label)
    write_extensions(element, category.extensions)


def _write_source_fields(
    element: etree._Element, source: AtomSource, vocab: AtomVocabulary, required: bool
) -> None:
    ns = vocab.namespace
    add_text(element, qualified(ns, "id"), source.id or None, required=required)
    _write_text(element, qualified(ns, "title"), source.title, required=required)
    _write_text(element, qualified(ns, vocab.subtitle), source.subtitle)
    _write_date(
        element,
        qualified(ns, vocab.updated),
        source.updated,
        required=required and vocab.updated_required,
    )
    for person in source.authors:
        _write_person(element, qualified(ns, "author"), person, vocab)
    for person in source.contributors:
        _write_person(element, qualified(ns, "contributor"), person, vocab)
    for category in source.categories:
        _write_category(element, category, vocab)
    for link in source.links:
        _write_link(element, link, vocab)
    _write_text(element, qualified(ns, vocab.rights), source.rights)
    if source.generator is not None:
        generator = add_text(
            element, qualified(ns, "generator"), source.generator.value, required=True
        )
        _write_common(generator, source.generator)
        set_attribute(generator, vocab.generator_uri, source.generator.uri)
        set_attribute(generator, "version", source.generator.version)
        write_extensions(generator, source.generator.extensions)
    add_text(element, qualified(ns, "icon"), source.icon)
    add_text(element, qualified(ns, "logo"), source.logo)


def _write_entry(parent: etree._Element, entry: AtomEntry, vocab: AtomVocabulary) -> None:
    ns = vocab.namespace
    element = etree.SubElement(parent, qualified(ns, "entry"))
    _write_common(element, entry)

    add_text(element, qualified(ns, "id"), entry.id, required=True)
    _write_text(element, qualified(ns, "title"), entry.title, required=True)
    _write_date(element, qualified(ns, vocab.updated), entry.updated, required=vocab.updated_required)
    _write_date(element, qualified(ns, vocab.published), entry.published)
    for person in entry.authors:
        _write_person(element, qualified(ns, "author"), person, vocab)
    for person in entry.contributors:
        _write_person(element, qualified(ns, "contributor"), person, vocab)
    for category in entry.categories:
        _write_category(element, category, vocab)
    for link in entry.links:
        _write_link(element, link, vocab)
    _write_text(element, qualified(ns, vocab.rights), entry.rights)
    _write_text(element, qualified(ns, "summary"), entry.summary)
    _write_text(element, qualified(ns, "content"), entry.content)

    if entry.source is not None:
        source = etree.SubElement(element, qualified(ns, "source"))
        _write_common(source, entry.source)
        _write_source_fields(source, entry.source, vocab, required=False)
        write_extensions(source, entry.source.extensions)

    for reply in entry.in_reply_to:
        reply_element = etree.SubElement(element, qualified(THREADING_NS, "in-reply-to"))
        _write_common(reply_element, reply)
        reply_element.set("ref", reply.ref or "")
        set_attribute(reply_element, "href", reply.href)
        set_attribute(reply_element, "source", reply.source)
        set_attribute(reply_element, "type", reply.type)
        write_extensions(reply_element, reply.extensions)

    if entry.thread_total > 0:
        add_text(element, qualified(THREADING_NS, "total"), str(entry.thread_total))

    write_extensions(element, entry.extensions)


def encode_atom(feed: AtomFeed, namespaces: Dict[Optional[str], str]) -> etree._Element:
    vocab = vocabulary_for(type(feed))
    root = etree.Element(qualified(vocab.namespace, "feed"), nsmap=namespaces)
    if isinstance(feed, AtomFeed03):
        root.set("version", feed.version or "0.3")
    _write_common(root, feed)

    _write_source_fields(root, feed, vocab, required=True)
    write_extensions(root, feed.extensions)
    for entry in feed.entries:
        _write_entry(root, entry, vocab)
    return root
