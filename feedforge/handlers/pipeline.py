"""
Feed Generation Pipeline
========================

``FeedHandler`` runs a feed generator under a deadline and renders exactly
one response per request. Failures and timeouts become an error feed
instead of a broken response.

The generator runs on its own execution unit: coroutine functions as an
asyncio task, plain functions on a daemon thread. A generator that misses
the deadline is abandoned rather than cancelled (unless
``cancel_on_timeout`` is set); whatever it produces later is discarded.
"""

import asyncio
import html
import inspect
import threading
import time
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Set
from urllib.parse import urljoin

from ..config.settings import FeedForgeSettings, get_settings
from ..model import DOCUMENT_TYPES
from ..model.interfaces import Feed
from ..serialization.serializer import FeedSerializer, get_serializer
from ..utils.exceptions import (
    ErrorCode,
    GenerationError,
    GenerationTimeoutError,
    RenderError,
    is_retryable_error,
    iter_exception_chain,
)
from ..utils.logging import PerformanceLogger, get_handler_logger
from .context import FeedContext
from .fetcher import FeedFetcher

CONTENT_DISPOSITION = "inline;filename=feed.xml"


class GenerationState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    RENDERED = "rendered"


_RESULT_STATES = (GenerationState.COMPLETED, GenerationState.TIMED_OUT, GenerationState.ERRORED)


@dataclass
class GenerationOutcome:
    """What happened to one request, for logging and tests."""

    states: List[GenerationState] = field(default_factory=lambda: [GenerationState.IDLE])
    feed: Any = None
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    def transition(self, state: GenerationState) -> None:
        self.states.append(state)

    @property
    def state(self) -> GenerationState:
        return self.states[-1]

    @property
    def result_state(self) -> Optional[GenerationState]:
        for state in self.states:
            if state in _RESULT_STATES:
                return state
        return None


class FeedHandler(ABC):
    """Base class for feed endpoints.

    Subclasses pick a dialect and build that dialect's error feed. The feed
    itself comes from ``generator`` when one is given, otherwise from
    ``generate_feed``, which by default round-trips the document named by
    the ``url`` query parameter.
    """

    dialect: str = ""
    mime_type: str = ""

    def __init__(
        self,
        generator: Optional[Callable[[FeedContext], Any]] = None,
        settings: Optional[FeedForgeSettings] = None,
        serializer: Optional[FeedSerializer] = None,
        fetcher: Optional[FeedFetcher] = None,
        timeout_ms: Optional[int] = None,
        cancel_on_timeout: Optional[bool] = None,
        debug: Optional[bool] = None,
        pretty_print: Optional[bool] = None,
    ):
        self.settings = settings or get_settings()
        self.serializer = serializer or get_serializer()
        self._fetcher = fetcher
        self._generator = generator or self.generate_feed

        handler_settings = self.settings.handler
        self.timeout_ms = timeout_ms if timeout_ms is not None else handler_settings.timeout_ms
        self.cancel_on_timeout = (
            cancel_on_timeout if cancel_on_timeout is not None else handler_settings.cancel_on_timeout
        )
        self.debug = self.settings.debug if debug is None else debug
        self.pretty_print = (
            self.settings.effective_pretty_print if pretty_print is None else pretty_print
        )
        self.allow_url_fetch = (
            self.debug if handler_settings.allow_url_fetch is None else handler_settings.allow_url_fetch
        )

        self.logger = get_handler_logger(self.dialect)
        # Workers that missed the deadline; held until they finish
        self._abandoned: Set[asyncio.Future] = set()

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def fetcher(self) -> FeedFetcher:
        if self._fetcher is None:
            self._fetcher = FeedFetcher(settings=self.settings)
        return self._fetcher

    @property
    def abandoned_count(self) -> int:
        return len(self._abandoned)

    async def generate_feed(self, context: FeedContext) -> Any:
        """Round-trip the feed at ``?url=`` (debug mode by default); otherwise no content."""
        url = context.query.get("url")
        if not url or not self.allow_url_fetch:
            return None
        data = await self.fetcher.fetch(url)
        return self.serializer.decode_document(data, source_name=url)

    @abstractmethod
    def build_error_feed(self, context: FeedContext, exception: BaseException) -> Any:
        """Build a document describing ``exception`` and its causes."""

    def handle_error(self, context: FeedContext, exception: BaseException) -> Any:
        """Error feed for ``exception``, or None if building it fails."""
        try:
            return self.build_error_feed(context, exception)
        except Exception:
            self.logger.exception(
                "Building the error feed failed; responding without content",
                extra={"original_error": repr(exception)},
            )
            return None

    def describe_exception(self, exception: BaseException) -> str:
        """Traceback in debug mode, message only otherwise."""
        if self.debug:
            details = "".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__, chain=False
                )
            )
            return f"<pre>{html.escape(details)}</pre>"
        return str(exception)

    def exception_chain(self, exception: BaseException) -> List[BaseException]:
        return list(iter_exception_chain(exception))

    async def process_request(self, context: FeedContext) -> GenerationOutcome:
        """Generate, fall back to an error feed if needed, and render once."""
        outcome = GenerationOutcome()
        started = time.monotonic()
        feed = None

        try:
            outcome.transition(GenerationState.GENERATING)
            with PerformanceLogger(self.logger, "generate", request_id=context.request_id):
                worker = self._start_worker(context)
                done, _ = await asyncio.wait({worker}, timeout=self.timeout_seconds)

            if worker in done:
                error = self._worker_error(worker)
                if error is None:
                    feed = worker.result()
                    error = self._check_result(feed)
                outcome.transition(
                    GenerationState.COMPLETED if error is None else GenerationState.ERRORED
                )
            else:
                self._abandon(worker)
                error = GenerationTimeoutError("Timeout exceeded.", timeout_ms=self.timeout_ms)
                outcome.transition(GenerationState.TIMED_OUT)

            if error is not None:
                outcome.error = error
                self.logger.warning(
                    f"Feed generation failed: {type(error).__name__}: {error}",
                    extra={
                        "request_id": context.request_id,
                        "state": outcome.result_state,
                        "retryable": is_retryable_error(error),
                    },
                )
                feed = self.handle_error(context, error)

        except Exception as e:
            outcome.error = e
            outcome.transition(GenerationState.ERRORED)
            self.logger.exception("Feed pipeline failed before generation finished")
            feed = self.handle_error(context, e)

        finally:
            outcome.feed = feed
            self.render(context, feed)
            outcome.transition(GenerationState.RENDERED)
            outcome.elapsed = time.monotonic() - started

        return outcome

    def render(self, context: FeedContext, feed: Any) -> None:
        """Write ``feed`` (or nothing) to the response and complete it."""
        if context.is_complete:
            self.logger.warning("Response already completed; render skipped")
            return

        response = context.response
        try:
            response.clear()
            response.content_type = feed.mime_type if feed is not None else self.mime_type
            response.charset = "utf-8"
            response.headers["Content-Disposition"] = CONTENT_DISPOSITION
            if feed is None:
                return

            data = self.serializer.encode(
                feed,
                xslt_url=self.xslt_url(context, feed),
                pretty_print=self.pretty_print,
            )
            response.write(data)

        except Exception as e:
            error = e if isinstance(e, RenderError) else RenderError(f"Feed rendering failed: {e}")
            self.logger.error(str(error), exc_info=True)
            response.body.clear()
            response.status = 500
            response.content_type = "text/plain"
            response.write(error.message)

        finally:
            context.complete()

    def xslt_url(self, context: FeedContext, feed: Any) -> Optional[str]:
        """Configured stylesheet for the feed's dialect, made absolute when possible."""
        document = feed.document if isinstance(feed, Feed) else feed
        stylesheet = self.settings.xslt.for_dialect(getattr(document, "dialect", self.dialect))
        if not stylesheet:
            return None
        base = context.url or self.settings.site.base_url
        return urljoin(base, stylesheet) if base else stylesheet

    # Worker management

    def _start_worker(self, context: FeedContext) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        if inspect.iscoroutinefunction(self._generator):
            return loop.create_task(self._generator(context))

        future = loop.create_future()
        thread = threading.Thread(
            target=self._run_generator_thread,
            args=(loop, future, context),
            name=f"feedforge-{self.dialect or 'feed'}-generator",
            daemon=True,
        )
        thread.start()
        return future

    def _run_generator_thread(
        self, loop: asyncio.AbstractEventLoop, future: asyncio.Future, context: FeedContext
    ) -> None:
        result, error = None, None
        try:
            result = self._generator(context)
        except Exception as e:
            error = e

        try:
            loop.call_soon_threadsafe(self._resolve_future, future, result, error)
        except RuntimeError:
            self.logger.debug("Event loop closed before an abandoned generator finished")

    @staticmethod
    def _resolve_future(future: asyncio.Future, result: Any, error: Optional[BaseException]) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _worker_error(self, worker: asyncio.Future) -> Optional[BaseException]:
        if worker.cancelled():
            return GenerationError("Feed generation was cancelled", handler=type(self).__name__)
        return worker.exception()

    def _check_result(self, feed: Any) -> Optional[GenerationError]:
        if feed is None or isinstance(feed, Feed) or isinstance(feed, DOCUMENT_TYPES):
            return None
        return GenerationError(
            f"Generator returned {type(feed).__name__}, not a feed",
            handler=type(self).__name__,
            error_code=ErrorCode.GENERATION_INVALID_RESULT,
        )

    def _abandon(self, worker: asyncio.Future) -> None:
        if self.cancel_on_timeout:
            worker.cancel()
        self._abandoned.add(worker)
        worker.add_done_callback(self._discard_abandoned)

    def _discard_abandoned(self, worker: asyncio.Future) -> None:
        self._abandoned.discard(worker)
        if worker.cancelled():
            return
        late_error = worker.exception()
        if late_error is not None:
            self.logger.debug(f"Abandoned generator later failed: {late_error!r}")
        else:
            self.logger.debug("Abandoned generator finished; result discarded")
