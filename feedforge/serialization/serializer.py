"""
Feed Serializer
===============

Reads any supported dialect into its document model and writes document
models back to XML. The dialect is chosen from the root element; each
dialect has an explicit codec module.
"""

from typing import Any, BinaryIO, Callable, Dict, Optional, Type

from lxml import etree

from ..model.atom import AtomFeed03, AtomFeed10
from ..model.interfaces import Feed
from ..model.rdf import RdfFeed
from ..model.rss import RssFeed
from ..utils.exceptions import DecodeError, ErrorCode, RenderError
from ..utils.logging import PerformanceLogger, get_serializer_logger
from . import atom_codec, rdf_codec, rss_codec
from .resolver import resolve_feed_type
from .xml_support import parse_root, serialize_document, split_tag


class _Codec:
    """Decode/encode entry points for one document type."""

    def __init__(self, decode: Callable, encode: Callable, root_namespaces: Callable):
        self.decode = decode
        self.encode = encode
        self.root_namespaces = root_namespaces


_CODECS: Dict[Type, _Codec] = {
    AtomFeed10: _Codec(atom_codec.decode_atom, atom_codec.encode_atom, atom_codec.root_namespaces),
    AtomFeed03: _Codec(atom_codec.decode_atom, atom_codec.encode_atom, atom_codec.root_namespaces),
    RssFeed: _Codec(rss_codec.decode_rss, rss_codec.encode_rss, rss_codec.root_namespaces),
    RdfFeed: _Codec(rdf_codec.decode_rdf, rdf_codec.encode_rdf, rdf_codec.root_namespaces),
}


def _document_of(feed: Any) -> Any:
    return feed.document if isinstance(feed, Feed) else feed


class FeedSerializer:
    """Decode XML into feed documents and encode documents into XML."""

    def __init__(self):
        self.logger = get_serializer_logger()

    def decode_document(self, source, source_name: Optional[str] = None):
        """Parse XML and return the dialect document model.

        Args:
            source: XML bytes or text, a path, or a binary stream
            source_name: Label for error messages (file path or URL)

        Raises:
            DecodeError: If the XML is malformed or its dialect is unknown
        """
        try:
            root = parse_root(source)
        except etree.XMLSyntaxError as e:
            raise DecodeError(
                f"Malformed XML: {e}",
                source=source_name,
                error_code=ErrorCode.DECODE_MALFORMED_XML,
            ) from e

        namespace, name = split_tag(root)
        document_type = resolve_feed_type(namespace, name)
        if document_type is None:
            root_name = f"{{{namespace}}}{name}" if namespace else name
            raise DecodeError(
                f"Unrecognized feed root element {root_name}",
                root=root_name,
                source=source_name,
                error_code=ErrorCode.DECODE_UNKNOWN_DIALECT,
            )

        codec = _CODECS[document_type]
        try:
            document = codec.decode(root, document_type)
        except (ValueError, TypeError) as e:
            raise DecodeError(
                f"Invalid {document_type.__name__} document: {e}",
                source=source_name,
                error_code=ErrorCode.DECODE_INVALID_DOCUMENT,
            ) from e

        self.logger.debug(
            f"Decoded {document_type.__name__}",
            extra={"dialect": document_type.dialect, "source": source_name},
        )
        return document

    def decode(self, source, source_name: Optional[str] = None) -> Feed:
        """Parse XML and return its normalized ``Feed`` view."""
        return self.decode_document(source, source_name).as_feed()

    def collect_namespaces(self, feed: Any) -> Dict[Optional[str], str]:
        """Namespace declarations for the root element of ``feed``.

        Starts from the dialect's own namespaces and adds every extension
        namespace found by walking the document.
        """
        document = _document_of(feed)
        codec = self._codec_for(document)
        namespaces = dict(codec.root_namespaces(document))
        document.add_namespaces(namespaces)
        return namespaces

    def encode(
        self,
        feed: Any,
        output: Optional[BinaryIO] = None,
        xslt_url: Optional[str] = None,
        pretty_print: bool = False,
    ) -> bytes:
        """Serialize a feed to UTF-8 XML.

        Args:
            feed: A ``Feed`` view or a dialect document model
            output: Binary stream to write to (optional)
            xslt_url: Stylesheet to reference in an xml-stylesheet PI
            pretty_print: Indent with tabs, one element per line

        Returns:
            The serialized document

        Raises:
            RenderError: If the document type has no codec
        """
        document = _document_of(feed)
        codec = self._codec_for(document)

        with PerformanceLogger(self.logger, "encode", dialect=document.dialect):
            namespaces = self.collect_namespaces(document)
            root = codec.encode(document, namespaces)
            data = serialize_document(root, xslt_url=xslt_url, pretty_print=pretty_print)

        if output is not None:
            output.write(data)
        return data

    def _codec_for(self, document: Any) -> _Codec:
        codec = _CODECS.get(type(document))
        if codec is None:
            raise RenderError(
                f"Cannot encode object of type {type(document).__name__}",
                document_type=type(document).__name__,
                error_code=ErrorCode.RENDER_UNSUPPORTED_DOCUMENT,
            )
        return codec


_default_serializer: Optional[FeedSerializer] = None


def get_serializer() -> FeedSerializer:
    global _default_serializer
    if _default_serializer is None:
        _default_serializer = FeedSerializer()
    return _default_serializer


def decode(source, source_name: Optional[str] = None) -> Feed:
    """Decode XML with the shared serializer."""
    return get_serializer().decode(source, source_name)


def encode(feed: Any, output: Optional[BinaryIO] = None, xslt_url: Optional[str] = None,
           pretty_print: bool = False) -> bytes:
    """Encode a feed with the shared serializer."""
    return get_serializer().encode(feed, output=output, xslt_url=xslt_url, pretty_print=pretty_print)
