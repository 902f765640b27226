"""
FeedForge Configuration
=======================
"""

from .settings import FeedForgeSettings, get_settings, load_settings

__all__ = ["FeedForgeSettings", "get_settings", "load_settings"]
