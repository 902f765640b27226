"""
Unit Tests for the Feed Generation Pipeline
===========================================

Tests for FeedHandler.process_request: generation on tasks and threads,
deadlines, error feeds, rendering and single completion.
"""

import asyncio
import logging
import threading
import time
from unittest.mock import AsyncMock, Mock

import pytest

from feedforge.config.settings import FeedForgeSettings, HandlerSettings, SiteSettings, XsltSettings
from feedforge.handlers import (
    AtomFeedHandler,
    FeedContext,
    GenerationState,
    RssFeedHandler,
)
from feedforge.handlers.pipeline import CONTENT_DISPOSITION
from feedforge.model import AtomFeed10, AtomText, RssChannel, RssFeed
from feedforge.model.namespaces import ATOM_MIME_TYPE, RSS_MIME_TYPE
from feedforge.serialization.serializer import FeedSerializer
from feedforge.utils.exceptions import (
    ErrorCode,
    GenerationError,
    GenerationTimeoutError,
)


def raise_chain():
    try:
        try:
            raise KeyError("innermost")
        except KeyError as e:
            raise ValueError("middle") from e
    except ValueError as e:
        raise RuntimeError("outer") from e


async def wait_for_abandoned(handler, attempts=50):
    for _ in range(attempts):
        if handler.abandoned_count == 0:
            return
        await asyncio.sleep(0.01)


class TestSuccessfulGeneration:
    """Generators that return in time."""

    @pytest.mark.asyncio
    async def test_async_generator_renders_feed(self, test_settings, serializer):
        async def generator(context):
            return AtomFeed10(id="urn:test", title=AtomText(value="Generated"))

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        outcome = await handler.process_request(context)

        assert outcome.states == [
            GenerationState.IDLE,
            GenerationState.GENERATING,
            GenerationState.COMPLETED,
            GenerationState.RENDERED,
        ]
        assert outcome.error is None
        assert context.completion_count == 1

        response = context.response
        assert response.status == 200
        assert response.content_type == ATOM_MIME_TYPE
        assert response.charset == "utf-8"
        assert response.headers["Content-Disposition"] == CONTENT_DISPOSITION
        assert response.write_count == 1
        assert serializer.decode(bytes(response.body)).title == "Generated"

    @pytest.mark.asyncio
    async def test_sync_generator_runs_on_thread(self, test_settings, rss_xml):
        thread_names = []

        def generator(context):
            thread_names.append(threading.current_thread().name)
            return FeedSerializer().decode(rss_xml)

        handler = RssFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        outcome = await handler.process_request(context)

        assert outcome.result_state == GenerationState.COMPLETED
        assert thread_names == ["feedforge-rss-generator"]
        assert context.response.content_type == RSS_MIME_TYPE
        assert b"Test RSS Feed" in context.response.body

    @pytest.mark.asyncio
    async def test_generation_is_timed(self, test_settings, caplog):
        async def generator(context):
            return AtomFeed10(id="urn:test")

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext(request_id="req-1")
        with caplog.at_level(logging.DEBUG, logger="feedforge.handler"):
            await handler.process_request(context)

        timed = [r for r in caplog.records if r.getMessage().startswith("Completed generate in")]
        assert len(timed) == 1
        assert timed[0].success is True
        assert timed[0].request_id == "req-1"
        assert timed[0].duration_seconds >= 0

    @pytest.mark.asyncio
    async def test_content_type_follows_document(self, test_settings):
        async def generator(context):
            return RssFeed(channel=RssChannel(title="Served by the Atom endpoint"))

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        await handler.process_request(context)

        assert context.response.content_type == RSS_MIME_TYPE

    @pytest.mark.asyncio
    async def test_none_result_writes_no_body(self, test_settings):
        async def generator(context):
            return None

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        outcome = await handler.process_request(context)

        assert outcome.result_state == GenerationState.COMPLETED
        assert context.completion_count == 1
        assert not context.response.has_content
        assert context.response.content_type == ATOM_MIME_TYPE
        assert context.response.headers["Content-Disposition"] == CONTENT_DISPOSITION


class TestGenerationFailures:
    """Generators that raise or return the wrong thing."""

    @pytest.mark.asyncio
    async def test_exception_chain_becomes_error_feed(self, test_settings, serializer):
        async def generator(context):
            raise_chain()

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        outcome = await handler.process_request(context)

        assert outcome.result_state == GenerationState.ERRORED
        assert isinstance(outcome.error, RuntimeError)
        assert context.completion_count == 1

        document = serializer.decode_document(bytes(context.response.body))
        assert document.title.value == "Server Error"
        assert [entry.title.value for entry in document.entries] == [
            "RuntimeError",
            "ValueError",
            "KeyError",
        ]
        assert document.entries[1].summary.value == "middle"

    @pytest.mark.asyncio
    async def test_sync_generator_error(self, test_settings, serializer):
        def generator(context):
            raise GenerationError("No data for this feed")

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        outcome = await handler.process_request(context)

        assert outcome.result_state == GenerationState.ERRORED
        document = serializer.decode_document(bytes(context.response.body))
        assert len(document.entries) == 1
        assert document.entries[0].title.value == "GenerationError"
        assert document.entries[0].summary.value == "[G001] No data for this feed"

    @pytest.mark.asyncio
    async def test_invalid_result(self, test_settings, serializer):
        async def generator(context):
            return "<rss/>"

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        outcome = await handler.process_request(context)

        assert outcome.result_state == GenerationState.ERRORED
        assert outcome.error.error_code == ErrorCode.GENERATION_INVALID_RESULT
        document = serializer.decode_document(bytes(context.response.body))
        assert [entry.title.value for entry in document.entries] == ["GenerationError"]

    @pytest.mark.asyncio
    async def test_failing_error_feed_gives_empty_response(self, test_settings):
        class BrokenHandler(AtomFeedHandler):
            def build_error_feed(self, context, exception):
                raise RuntimeError("cannot describe")

        async def generator(context):
            raise ValueError("original")

        handler = BrokenHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        outcome = await handler.process_request(context)

        assert outcome.result_state == GenerationState.ERRORED
        assert outcome.feed is None
        assert context.completion_count == 1
        assert context.response.status == 200
        assert not context.response.has_content


class TestTimeouts:
    """Generators that miss the deadline."""

    @pytest.mark.asyncio
    async def test_blocked_thread_is_abandoned(self, test_settings, serializer):
        release = threading.Event()

        def generator(context):
            release.wait(5)
            return RssFeed()

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        context = FeedContext()
        started = time.monotonic()
        try:
            outcome = await handler.process_request(context)
            elapsed = time.monotonic() - started

            assert outcome.result_state == GenerationState.TIMED_OUT
            assert isinstance(outcome.error, GenerationTimeoutError)
            assert 0.25 <= elapsed < 1.5
            assert handler.abandoned_count == 1
            assert context.completion_count == 1

            document = serializer.decode_document(bytes(context.response.body))
            assert len(document.entries) == 1
            assert document.entries[0].title.value == "GenerationTimeoutError"
            assert document.entries[0].summary.value == "Timeout exceeded."
        finally:
            release.set()

        await wait_for_abandoned(handler)
        assert handler.abandoned_count == 0
        # The late result must not touch the finished response
        assert context.completion_count == 1

    @pytest.mark.asyncio
    async def test_async_generator_left_running_by_default(self, test_settings):
        release = asyncio.Event()
        finished = []

        async def generator(context):
            await release.wait()
            finished.append(True)
            return None

        handler = AtomFeedHandler(generator=generator, settings=test_settings)
        outcome = await handler.process_request(FeedContext())

        assert outcome.result_state == GenerationState.TIMED_OUT
        assert handler.abandoned_count == 1

        release.set()
        await wait_for_abandoned(handler)
        assert finished == [True]
        assert handler.abandoned_count == 0

    @pytest.mark.asyncio
    async def test_cancel_on_timeout(self, test_settings):
        never = asyncio.Event()
        cancelled = []

        async def generator(context):
            try:
                await never.wait()
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        handler = AtomFeedHandler(generator=generator, settings=test_settings, cancel_on_timeout=True)
        outcome = await handler.process_request(FeedContext())

        assert outcome.result_state == GenerationState.TIMED_OUT
        await wait_for_abandoned(handler)
        assert cancelled == [True]
        assert handler.abandoned_count == 0

    def test_timeout_comes_from_settings(self, test_settings):
        handler = AtomFeedHandler(settings=test_settings)
        assert handler.timeout_ms == 300
        assert handler.timeout_seconds == 0.3
        assert AtomFeedHandler(settings=test_settings, timeout_ms=50).timeout_seconds == 0.05


class TestRender:
    """Test render and the stylesheet URL."""

    @pytest.mark.asyncio
    async def test_render_failure_gives_plain_text_500(self, test_settings):
        serializer = Mock(spec=FeedSerializer)
        serializer.encode.side_effect = ValueError("bad tree")

        async def generator(context):
            return AtomFeed10()

        handler = AtomFeedHandler(generator=generator, settings=test_settings, serializer=serializer)
        context = FeedContext()
        outcome = await handler.process_request(context)

        assert outcome.result_state == GenerationState.COMPLETED
        assert outcome.state == GenerationState.RENDERED
        assert context.completion_count == 1
        assert context.response.status == 500
        assert context.response.content_type == "text/plain"
        assert bytes(context.response.body) == b"Feed rendering failed: bad tree"

    def test_render_skips_completed_context(self, test_settings):
        handler = AtomFeedHandler(settings=test_settings)
        context = FeedContext()
        context.complete()

        handler.render(context, AtomFeed10())

        assert context.completion_count == 1
        assert not context.response.has_content

    def test_pretty_print_follows_handler(self, test_settings):
        handler = AtomFeedHandler(settings=test_settings, pretty_print=True)
        context = FeedContext()
        handler.render(context, AtomFeed10())
        assert b"\n\t<id" in context.response.body

    def test_xslt_url_resolution(self, test_settings):
        settings = test_settings.model_copy(
            update={"xslt": XsltSettings(atom_url="/styles/atom.xsl", rss_url="rss.xsl")}
        )
        handler = AtomFeedHandler(settings=settings)

        request_context = FeedContext(url="http://host.example.com/feeds/atom.xml?x=1")
        assert handler.xslt_url(request_context, AtomFeed10()) == "http://host.example.com/styles/atom.xsl"
        assert handler.xslt_url(request_context, RssFeed()) == "http://host.example.com/feeds/rss.xsl"

        assert handler.xslt_url(FeedContext(), AtomFeed10()) == "http://feeds.example.com/styles/atom.xsl"
        assert handler.xslt_url(FeedContext(), AtomFeed10().as_feed()) == "http://feeds.example.com/styles/atom.xsl"

    def test_xslt_url_unconfigured(self, test_settings):
        handler = AtomFeedHandler(settings=test_settings)
        assert handler.xslt_url(FeedContext(), AtomFeed10()) is None

    def test_relative_xslt_without_base(self):
        settings = FeedForgeSettings(xslt=XsltSettings(rss_url="/rss.xsl"), site=SiteSettings())
        handler = RssFeedHandler(settings=settings)
        assert handler.xslt_url(FeedContext(), RssFeed()) == "/rss.xsl"

    @pytest.mark.asyncio
    async def test_stylesheet_in_rendered_feed(self, test_settings):
        settings = test_settings.model_copy(update={"xslt": XsltSettings(atom_url="/atom.xsl")})

        async def generator(context):
            return AtomFeed10()

        handler = AtomFeedHandler(generator=generator, settings=settings)
        context = FeedContext(url="http://host.example.com/atom.xml")
        await handler.process_request(context)
        assert b'href="http://host.example.com/atom.xsl"' in context.response.body


class TestDefaultGenerator:
    """Test the ?url= round-trip generator."""

    @pytest.mark.asyncio
    async def test_no_url_means_no_content(self, test_settings):
        handler = RssFeedHandler(settings=test_settings)
        assert await handler.generate_feed(FeedContext()) is None

    @pytest.mark.asyncio
    async def test_url_is_fetched_and_decoded(self, test_settings, rss_xml):
        fetcher = Mock()
        fetcher.fetch = AsyncMock(return_value=rss_xml.encode("utf-8"))
        handler = RssFeedHandler(settings=test_settings, fetcher=fetcher, debug=True)

        context = FeedContext(query={"url": "http://example.com/feed.xml"})
        outcome = await handler.process_request(context)

        fetcher.fetch.assert_awaited_once_with("http://example.com/feed.xml")
        assert outcome.result_state == GenerationState.COMPLETED
        assert isinstance(outcome.feed, RssFeed)
        assert b"Test Article 1" in context.response.body

    @pytest.mark.asyncio
    async def test_url_fetch_can_be_disabled(self, test_settings):
        settings = test_settings.model_copy(update={"handler": HandlerSettings(allow_url_fetch=False)})
        fetcher = Mock()
        fetcher.fetch = AsyncMock()
        handler = RssFeedHandler(settings=settings, fetcher=fetcher, debug=True)

        assert await handler.generate_feed(FeedContext(query={"url": "http://example.com/"})) is None
        fetcher.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_url_fetch_follows_debug_by_default(self, test_settings):
        fetcher = Mock()
        fetcher.fetch = AsyncMock()
        handler = RssFeedHandler(settings=test_settings, fetcher=fetcher)

        assert handler.allow_url_fetch is False
        assert await handler.generate_feed(FeedContext(query={"url": "http://example.com/"})) is None
        fetcher.fetch.assert_not_awaited()
