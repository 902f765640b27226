"""
FeedForge Handlers
==================

Timeout-bounded feed generation, error feeds and single-render responses.
"""

from .context import FeedContext, FeedResponse
from .fetcher import FeedFetcher
from .pipeline import FeedHandler, GenerationOutcome, GenerationState
from .feed_handlers import (
    ERROR_FEED_DESCRIPTION,
    ERROR_FEED_TITLE,
    HANDLER_TYPES,
    AtomFeedHandler,
    RdfFeedHandler,
    RssFeedHandler,
)

__all__ = [
    "FeedContext",
    "FeedResponse",
    "FeedFetcher",
    "FeedHandler",
    "GenerationOutcome",
    "GenerationState",
    "ERROR_FEED_DESCRIPTION",
    "ERROR_FEED_TITLE",
    "HANDLER_TYPES",
    "AtomFeedHandler",
    "RdfFeedHandler",
    "RssFeedHandler",
]
