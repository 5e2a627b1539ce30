import asyncio
from typing import Callable, List

import httpx

from config.settings import COLLECTION_CONFIG
from newsdesk_fixtures import StubModuleLogger, make_feed, rss_document, rss_item
from src.collectors import FeedFetcher
from src.storage import ArticleStore, FeedCache, FeedCacheEntry
from src.utils.metrics import MetricsLog

FEED = make_feed("https://example.com/feed.xml", source="Example")
ETAG = 'W/"v1"'
LAST_MODIFIED = "Wed, 12 Mar 2025 12:00:00 GMT"


def _build_fetcher(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    request_timeout: float = 15.0,
):
    store = ArticleStore()
    cache = FeedCache()
    metrics = MetricsLog(module_logger=StubModuleLogger())
    wakeups: List[int] = []
    logger = StubModuleLogger()
    fetcher = FeedFetcher(
        store,
        cache,
        metrics,
        on_new_articles=lambda: wakeups.append(1),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        request_timeout=request_timeout,
        module_logger=logger,
    )
    return fetcher, store, cache, metrics, wakeups, logger


def _three_items() -> bytes:
    return rss_document(rss_item("g-1"), rss_item("g-2"), rss_item("g-3"))


def test_new_items_then_not_modified() -> None:
    seen_headers: List[httpx.Headers] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers.append(request.headers)
        if len(seen_headers) == 1:
            return httpx.Response(
                200,
                content=_three_items(),
                headers={"ETag": ETAG, "Last-Modified": LAST_MODIFIED},
            )
        return httpx.Response(304)

    fetcher, store, cache, metrics, wakeups, _ = _build_fetcher(handler)

    async def _run():
        first = await fetcher.fetch_and_store(FEED)
        second = await fetcher.fetch_and_store(FEED)
        return first, second

    first, second = asyncio.run(_run())

    assert first.articles_added == 3
    assert first.total_articles_in_feed == 3
    assert not first.skipped_304
    assert store.count() == 3
    assert wakeups == [1]

    assert second.skipped_304 is True
    assert second.articles_added == 0
    assert second.error is None
    assert store.count() == 3
    assert cache.get(FEED.url) == FeedCacheEntry(etag=ETAG, last_modified=LAST_MODIFIED)

    assert "if-none-match" not in seen_headers[0]
    assert seen_headers[1]["if-none-match"] == ETAG
    assert seen_headers[1]["if-modified-since"] == LAST_MODIFIED
    assert len(metrics) == 2


def test_repeat_poll_adds_nothing_and_does_not_wake_queue() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=_three_items())

    fetcher, store, cache, metrics, wakeups, _ = _build_fetcher(handler)

    async def _run():
        await fetcher.fetch_and_store(FEED)
        return await fetcher.fetch_and_store(FEED)

    second = asyncio.run(_run())

    assert second.articles_added == 0
    assert second.total_articles_in_feed == 3
    assert store.count() == 3
    assert wakeups == [1]
    assert cache.get(FEED.url) is None


def test_default_client_sends_user_agent_and_accept() -> None:
    fetcher = FeedFetcher(
        ArticleStore(),
        FeedCache(),
        MetricsLog(module_logger=StubModuleLogger()),
        module_logger=StubModuleLogger(),
    )

    client = fetcher._get_client()

    assert client.headers["user-agent"] == COLLECTION_CONFIG["user_agent"]
    assert "application/rss+xml" in client.headers["accept"]
    asyncio.run(fetcher.aclose())


def test_items_are_sanitized_before_storage() -> None:
    item = rss_item(
        "g-html",
        title="<![CDATA[<b>Bold</b>   news]]>",
        description="<![CDATA[<p>Fish&nbsp;&amp; chips</p>]]>",
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=rss_document(item))

    fetcher, store, *_ = _build_fetcher(handler)
    asyncio.run(fetcher.fetch_and_store(FEED))

    article = store.get("g-html")
    assert article.title == "Bold news"
    assert article.description == "Fish & chips"
    assert article.category == FEED.category
    assert article.source_locale == "en"


def test_error_status_records_failure_without_raising() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    fetcher, store, cache, metrics, wakeups, logger = _build_fetcher(handler)

    metric = asyncio.run(fetcher.fetch_and_store(FEED))

    assert metric.error == "HTTP 503: Service Unavailable"
    assert metric.articles_added == 0
    assert metric.total_articles_in_feed == 0
    assert store.count() == 0
    assert cache.get(FEED.url) is None
    assert wakeups == []
    assert metrics.summary()["total_failures"] == 1
    assert "collector.feed.fetch_failed" in logger.events()


def test_transport_timeout_is_reported_as_fetch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    fetcher, *_ = _build_fetcher(handler)

    metric = asyncio.run(fetcher.fetch_and_store(FEED))

    assert metric.error == "Request timed out after 15s"


def test_hard_timeout_cuts_slow_responses() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, content=_three_items())

    fetcher, store, *_ = _build_fetcher(handler, request_timeout=0.05)

    metric = asyncio.run(fetcher.fetch_and_store(FEED))

    assert metric.error == "Request timed out after 0.05s"
    assert store.count() == 0


def test_connection_error_becomes_failed_metric() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fetcher, *_ = _build_fetcher(handler)

    metric = asyncio.run(fetcher.fetch_and_store(FEED))

    assert metric.failed
    assert "connection refused" in metric.error


def test_unparseable_body_counts_as_success_with_no_items() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>maintenance</html>", headers={"ETag": ETAG})

    fetcher, store, cache, metrics, wakeups, _ = _build_fetcher(handler)

    metric = asyncio.run(fetcher.fetch_and_store(FEED))

    assert metric.error is None
    assert metric.total_articles_in_feed == 0
    assert cache.get(FEED.url).etag == ETAG


def test_malformed_feed_records_failure_and_stores_nothing() -> None:
    broken = (
        b'<rss version="2.0"><channel><title>Fish & chips</title>'
        b"<item><guid>m-1</guid><title>Broken</title></item></channel>"
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=broken)

    fetcher, store, _, metrics, wakeups, logger = _build_fetcher(handler)

    metric = asyncio.run(fetcher.fetch_and_store(FEED))

    assert metric.failed
    assert metric.error.startswith("Malformed feed")
    assert store.count() == 0
    assert wakeups == []
    assert "collector.feed.fetch_failed" in logger.events()
