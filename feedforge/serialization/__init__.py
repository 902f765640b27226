"""
FeedForge Serialization
=======================

Dialect resolution and XML decode/encode for every supported feed format.
"""

from .resolver import resolve_feed_type
from .serializer import FeedSerializer, decode, encode, get_serializer

__all__ = ["resolve_feed_type", "FeedSerializer", "decode", "encode", "get_serializer"]
