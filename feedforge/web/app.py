"""
aiohttp Web Adapter
===================

Binds the dialect handlers to HTTP routes. Each request gets its own
``FeedContext``; the handler fills it and the adapter turns the buffered
response into an ``aiohttp.web.Response``.
"""

import uuid
from typing import Dict, Optional

from aiohttp import web

from ..config.settings import FeedForgeSettings, get_settings
from ..handlers import HANDLER_TYPES, FeedContext, FeedHandler
from ..utils.logging import get_logger_for_component

ROUTES = {
    "/atom.xml": "atom",
    "/rss.xml": "rss",
    "/rdf.xml": "rdf",
}

SETTINGS_KEY = web.AppKey("feedforge_settings", FeedForgeSettings)
HANDLERS_KEY = web.AppKey("feedforge_handlers", dict)


class AiohttpFeedContext(FeedContext):
    """FeedContext built from an aiohttp request."""

    @classmethod
    def from_request(cls, request: web.Request) -> "AiohttpFeedContext":
        return cls(
            query=dict(request.query),
            url=str(request.url),
            request_id=request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12],
        )

    def to_web_response(self) -> web.Response:
        response = self.response
        headers = {k: v for k, v in response.headers.items() if k.lower() != "content-type"}
        return web.Response(
            body=bytes(response.body),
            status=response.status,
            content_type=response.content_type or "application/octet-stream",
            charset=response.charset,
            headers=headers,
        )


def _feed_view(handler: FeedHandler):
    logger = get_logger_for_component("web", dialect=handler.dialect)

    async def view(request: web.Request) -> web.Response:
        context = AiohttpFeedContext.from_request(request)
        outcome = await handler.process_request(context)
        logger.bind(request_id=context.request_id).info(
            f"{request.method} {request.path} -> {outcome.result_state.value} "
            f"in {outcome.elapsed:.3f}s"
        )
        return context.to_web_response()

    return view


async def health(request: web.Request) -> web.Response:
    settings = request.app[SETTINGS_KEY]
    return web.json_response(
        {
            "status": "ok",
            "app": settings.app_name,
            "version": settings.version,
            "dialects": sorted(request.app[HANDLERS_KEY]),
        }
    )


def create_app(
    settings: Optional[FeedForgeSettings] = None,
    handlers: Optional[Dict[str, FeedHandler]] = None,
) -> web.Application:
    """Build the web application.

    Args:
        settings: Application settings (default: global settings)
        handlers: Handler per dialect; missing dialects get the default
            handler, which round-trips ``?url=``

    Returns:
        Configured aiohttp application
    """
    settings = settings or get_settings()
    handlers = dict(handlers or {})
    for dialect, handler_type in HANDLER_TYPES.items():
        handlers.setdefault(dialect, handler_type(settings=settings))

    app = web.Application()
    app[SETTINGS_KEY] = settings
    app[HANDLERS_KEY] = handlers

    for path, dialect in ROUTES.items():
        app.router.add_get(path, _feed_view(handlers[dialect]))
    app.router.add_get("/health", health)
    return app


def run_app(settings: Optional[FeedForgeSettings] = None, host: Optional[str] = None,
            port: Optional[int] = None) -> None:
    """Serve the application until interrupted."""
    settings = settings or get_settings()
    web.run_app(
        create_app(settings),
        host=host or settings.server.host,
        port=port or settings.server.port,
        print=None,
    )
