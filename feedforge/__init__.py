"""
FeedForge - Syndication Feed Toolkit
====================================

Read, model and write Atom 1.0, Atom 0.3, RSS 2.0 and RDF/RSS 1.0 feeds,
and serve generated feeds under a deadline.

Main Components:
- Model: Dialect dataclasses, tri-state dates, extension bags, normalized views
- Serialization: Dialect resolution and lxml codecs with namespace collection
- Handlers: Timeout-bounded generation, error feeds, single-render responses
- Web: aiohttp routes for Atom, RSS and RDF endpoints
"""

__version__ = "1.0.0"
__author__ = "FeedForge Development Team"
__description__ = "Multi-dialect syndication feed toolkit"

# Core imports for easy access
from .config.settings import get_settings
from .serialization import decode, encode, get_serializer, resolve_feed_type
from .handlers import AtomFeedHandler, FeedContext, FeedHandler, RdfFeedHandler, RssFeedHandler
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import FeedForgeError

__all__ = [
    "get_settings",
    "decode",
    "encode",
    "get_serializer",
    "resolve_feed_type",
    "AtomFeedHandler",
    "FeedContext",
    "FeedHandler",
    "RdfFeedHandler",
    "RssFeedHandler",
    "configure_application_logging",
    "get_logger_for_component",
    "FeedForgeError",
]
