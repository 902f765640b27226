"""
lxml helpers shared by the dialect codecs: parsing with comments,
processing instructions and blank text stripped, extension capture and
replay, and final document output.
"""

import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

from lxml import etree

from ..model.extensions import ExtensionAttribute, ExtensionBag, ExtensionElement
from ..model.namespaces import XML_NS

XML_LANG = f"{{{XML_NS}}}lang"
XML_BASE = f"{{{XML_NS}}}base"

FeedSource = Union[bytes, bytearray, str, os.PathLike]


def _make_parser(encoding: Optional[str] = None) -> etree.XMLParser:
    # lxml parsers are not shareable across threads; build one per call
    return etree.XMLParser(
        remove_comments=True,
        remove_pis=True,
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
        collect_ids=False,
        encoding=encoding,
    )


def parse_root(source) -> etree._Element:
    """Parse XML from bytes, text, a path or a binary stream.

    Raises:
        etree.XMLSyntaxError: If the document is not well-formed
    """
    if isinstance(source, os.PathLike):
        data = Path(source).read_bytes()
    elif hasattr(source, "read"):
        data = source.read()
    else:
        data = source

    if isinstance(data, str):
        return etree.fromstring(data.encode("utf-8"), _make_parser("utf-8"))
    return etree.fromstring(bytes(data), _make_parser())


def qualified(namespace: Optional[str], name: str) -> str:
    return f"{{{namespace}}}{name}" if namespace else name


def split_tag(element: etree._Element) -> Tuple[str, str]:
    """Return (namespace or "", local name) of an element."""
    qname = etree.QName(element)
    return qname.namespace or "", qname.localname


def child_elements(element: etree._Element) -> Iterator[etree._Element]:
    for child in element:
        if isinstance(child.tag, str):
            yield child


def text_of(element: etree._Element) -> str:
    return "".join(element.itertext())


def int_or_none(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


def _prefix_for(element: etree._Element, namespace: str) -> Optional[str]:
    for prefix, uri in element.nsmap.items():
        if uri == namespace and prefix:
            return prefix
    return None


def capture_element(element: etree._Element) -> ExtensionElement:
    """Copy an unrecognized element and its subtree into an ExtensionElement."""
    namespace, name = split_tag(element)
    return ExtensionElement(
        namespace=namespace,
        name=name,
        text=element.text or "",
        prefix=element.prefix,
        attributes=dict(element.attrib),
        children=[capture_element(child) for child in child_elements(element)],
        tail=element.tail or "",
    )


def capture_attributes(
    element: etree._Element, bag: ExtensionBag, known: Iterable[str] = ()
) -> None:
    """Store every attribute not named in ``known`` (Clark keys) in ``bag``."""
    known = set(known) | {XML_LANG, XML_BASE}
    for key, value in element.attrib.items():
        if key in known:
            continue
        qname = etree.QName(key)
        namespace = qname.namespace or ""
        bag.add_attribute(
            ExtensionAttribute(
                namespace=namespace,
                name=qname.localname,
                value=value,
                prefix=_prefix_for(element, namespace) if namespace else None,
            )
        )


def append_extension(parent: etree._Element, extension: ExtensionElement) -> etree._Element:
    element = etree.SubElement(parent, extension.tag, attrib=extension.attributes)
    if extension.text:
        element.text = extension.text
    for child in extension.children:
        append_extension(element, child)
    if extension.tail:
        element.tail = extension.tail
    return element


def write_extensions(element: etree._Element, bag: ExtensionBag) -> None:
    for attribute in bag.attributes:
        element.set(attribute.key, attribute.value)
    for extension in bag.elements:
        append_extension(element, extension)


def add_text(
    parent: etree._Element, tag: str, text: Optional[str], required: bool = False
) -> Optional[etree._Element]:
    """Append ``<tag>text</tag>``.

    None is omitted unless ``required``, in which case an empty element is
    written.
    """
    if text is None and not required:
        return None
    element = etree.SubElement(parent, tag)
    if text:
        element.text = text
    return element


def set_attribute(element: etree._Element, name: str, value) -> None:
    if value is not None:
        element.set(name, str(value))


def inner_markup(element: etree._Element) -> str:
    """Serialized children of ``element`` including interleaved text."""
    parts = [element.text or ""]
    for child in element:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts)


def append_markup(element: etree._Element, markup: str) -> None:
    """Parse an XML fragment and append it to ``element``; plain text if it won't parse."""
    try:
        wrapper = etree.fromstring(f"<wrapper>{markup}</wrapper>", _make_parser())
    except etree.XMLSyntaxError:
        element.text = markup
        return
    element.text = wrapper.text
    for child in list(wrapper):
        element.append(child)


def serialize_document(
    root: etree._Element, xslt_url: Optional[str] = None, pretty_print: bool = False
) -> bytes:
    """Render a root element as UTF-8 bytes with an XML declaration."""
    if xslt_url:
        href = xslt_url.replace("&", "&amp;").replace('"', "&quot;")
        root.addprevious(
            etree.ProcessingInstruction(
                "xml-stylesheet", f'type="text/xsl" href="{href}" version="1.0"'
            )
        )
    if pretty_print:
        etree.indent(root, space="\t")
    return etree.tostring(root.getroottree(), xml_declaration=True, encoding="utf-8")
