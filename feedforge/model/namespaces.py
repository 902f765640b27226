"""Namespace URIs, preferred prefixes and MIME types for the supported dialects."""

from typing import Dict, Optional

ATOM10_NS = "http://www.w3.org/2005/Atom"
ATOM03_NS = "http://purl.org/atom/ns#"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RSS10_NS = "http://purl.org/rss/1.0/"
DC_NS = "http://purl.org/dc/elements/1.1/"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
THREADING_NS = "http://purl.org/syndication/thread/1.0"
WFW_NS = "http://wellformedweb.org/CommentAPI/"
SLASH_NS = "http://purl.org/rss/1.0/modules/slash/"
XML_NS = "http://www.w3.org/XML/1998/namespace"

ATOM_MIME_TYPE = "application/atom+xml"
RSS_MIME_TYPE = "application/rss+xml"

PREFERRED_PREFIXES = {
    DC_NS: "dc",
    CONTENT_NS: "content",
    THREADING_NS: "thr",
    WFW_NS: "wfw",
    SLASH_NS: "slash",
    RDF_NS: "rdf",
}


def register_namespace(
    namespaces: Dict[str, str], uri: str, prefix: Optional[str] = None
) -> None:
    """Add ``uri`` to a prefix -> URI map, picking a free prefix if needed.

    The implicit xml namespace and the empty namespace are never declared.
    A URI already present keeps its existing prefix.
    """
    if not uri or uri == XML_NS or uri in namespaces.values():
        return

    candidate = prefix or PREFERRED_PREFIXES.get(uri)
    if candidate and candidate != "xml" and candidate not in namespaces:
        namespaces[candidate] = uri
        return

    index = 0
    while f"ns{index}" in namespaces:
        index += 1
    namespaces[f"ns{index}"] = uri
