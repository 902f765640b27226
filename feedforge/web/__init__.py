"""HTTP transport for FeedForge handlers."""

from .app import ROUTES, AiohttpFeedContext, create_app, run_app

__all__ = ["ROUTES", "AiohttpFeedContext", "create_app", "run_app"]
