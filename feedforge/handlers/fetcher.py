"""
Remote Feed Fetcher
===================

Downloads a feed document for the ``?url=`` round-trip path. The body is
returned as raw bytes so the XML parser can honour the document's own
encoding declaration.
"""

import asyncio
import ssl
from contextlib import asynccontextmanager
from typing import Optional

import aiohttp
import certifi

from ..config.settings import FeedForgeSettings, get_settings
from ..utils.exceptions import ErrorCode, FeedFetchError, ValidationError
from ..utils.logging import get_logger_for_component
from ..utils.validators import URLValidator

ACCEPT_HEADER = "application/atom+xml, application/rss+xml, application/rdf+xml, application/xml, text/xml, */*"


class FeedFetcher:
    """Single-document HTTP fetcher with size and time limits."""

    def __init__(self, settings: Optional[FeedForgeSettings] = None, timeout: Optional[int] = None):
        """Limits come from ``settings.fetch``.

        Args:
            settings: Defaults to the shared settings
            timeout: Total request budget in seconds; overrides ``fetch.request_timeout``
        """
        self.settings = settings or get_settings()
        fetch_settings = self.settings.fetch
        self.timeout = timeout or fetch_settings.request_timeout
        self.max_content_bytes = fetch_settings.max_content_bytes
        self.allow_private_hosts = fetch_settings.allow_private_hosts
        self.user_agent = fetch_settings.user_agent
        self.logger = get_logger_for_component("fetcher")

        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @asynccontextmanager
    async def get_session(self):
        """Session with the certifi CA bundle, fetch timeout and feed Accept headers."""
        connector = aiohttp.TCPConnector(ssl=self.ssl_context, limit_per_host=5)
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        headers = {
            "User-Agent": self.user_agent,
            "Accept": ACCEPT_HEADER,
            "Accept-Encoding": "gzip, deflate",
        }

        async with aiohttp.ClientSession(
            connector=connector, timeout=timeout, headers=headers
        ) as session:
            yield session

    async def fetch(self, feed_url: str) -> bytes:
        """Fetch a feed document.

        Args:
            feed_url: Absolute http(s) URL

        Returns:
            Response body

        Raises:
            FeedFetchError: On invalid URL, timeout, network or HTTP failure,
                or a body larger than ``max_content_bytes``
        """
        try:
            url = URLValidator.validate_feed_url(feed_url, allow_private=self.allow_private_hosts)
        except ValidationError as e:
            raise FeedFetchError(
                e.message, feed_url=feed_url, error_code=ErrorCode.FEED_INVALID_URL, recoverable=False
            ) from e

        self.logger.debug(f"Fetching feed: {url}")

        try:
            async with self.get_session() as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise FeedFetchError(
                            f"HTTP {response.status}: {response.reason}",
                            feed_url=url,
                            error_code=ErrorCode.FEED_HTTP_ERROR,
                            context={"status": response.status},
                        )
                    data = await self._read_limited(response, url)

        except asyncio.TimeoutError as e:
            raise FeedFetchError(
                f"Request timeout after {self.timeout}s",
                feed_url=url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e

        except aiohttp.ClientError as e:
            raise FeedFetchError(
                f"Network error: {e}", feed_url=url, error_code=ErrorCode.FEED_NETWORK_ERROR
            ) from e

        self.logger.info(f"Fetched {len(data)} bytes from {url}")
        return data

    async def _read_limited(self, response: aiohttp.ClientResponse, url: str) -> bytes:
        declared = response.content_length
        if declared is not None and declared > self.max_content_bytes:
            raise self._too_large(url)

        body = bytearray()
        async for chunk in response.content.iter_chunked(64 * 1024):
            body.extend(chunk)
            if len(body) > self.max_content_bytes:
                raise self._too_large(url)
        return bytes(body)

    def _too_large(self, url: str) -> FeedFetchError:
        return FeedFetchError(
            f"Feed exceeds {self.max_content_bytes} bytes",
            feed_url=url,
            error_code=ErrorCode.FEED_TOO_LARGE,
            recoverable=False,
        )
