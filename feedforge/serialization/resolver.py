"""Map a document's root element to the model type that decodes it."""

from typing import Dict, Optional, Tuple, Type

from ..model.atom import AtomFeed03, AtomFeed10
from ..model.namespaces import ATOM03_NS, ATOM10_NS, RDF_NS
from ..model.rdf import RdfFeed
from ..model.rss import RssFeed

_ROOT_TYPES: Dict[Tuple[str, str], Type] = {
    (ATOM10_NS, "feed"): AtomFeed10,
    (ATOM03_NS, "feed"): AtomFeed03,
    ("", "rss"): RssFeed,
    (RDF_NS, "RDF"): RdfFeed,
}


def resolve_feed_type(namespace_uri: Optional[str], local_name: str) -> Optional[Type]:
    """Return the document class for a root element, or None when unknown."""
    return _ROOT_TYPES.get((namespace_uri or "", local_name))
