# src/collectors/feed_fetcher.py
# Conditional fetch and store pipeline for a single feed
# ======================================================

"""
Fetch-and-store pipeline run by the scheduler for one feed descriptor.

A run sends a validator-aware GET, parses the payload, sanitizes and
deduplicates its items into the article store, wakes the translation queue
when something new arrived, and always leaves exactly one entry in the
metrics log. Nothing raised inside a run escapes it.
"""

import asyncio
import time
from typing import Any, Callable, Dict, Optional

import httpx

from config.settings import COLLECTION_CONFIG, TEXT_PROCESSING_CONFIG
from src.contracts import FeedDescriptor
from src.storage import Article, ArticleStore, FeedCache, FeedCacheEntry
from src.utils.dedupe import generate_article_id
from src.utils.logger import get_logger
from src.utils.metrics import FetchMetric, MetricsLog
from src.utils.text_cleaner import sanitize_text

from .feed_parser import FeedItem, parse_feed


class FeedFetchError(RuntimeError):
    """Transport-level failure: timeout or non-success HTTP status."""


class FeedFetcher:
    """Runs the fetch, parse, dedup and record steps for one feed at a time."""

    def __init__(
        self,
        store: ArticleStore,
        feed_cache: FeedCache,
        metrics: MetricsLog,
        *,
        on_new_articles: Optional[Callable[[], None]] = None,
        client: Optional[httpx.AsyncClient] = None,
        request_timeout: Optional[float] = None,
        max_text_length: Optional[int] = None,
        module_logger: Any = None,
    ) -> None:
        self.store = store
        self.feed_cache = feed_cache
        self.metrics = metrics
        self.on_new_articles = on_new_articles
        self.request_timeout = float(
            request_timeout or COLLECTION_CONFIG["request_timeout"]
        )
        self.max_text_length = int(
            max_text_length or TEXT_PROCESSING_CONFIG["max_length"]
        )
        self._client = client
        self._owns_client = client is None
        self.module_logger = module_logger or get_logger().create_module_logger(
            "collectors.fetcher"
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def fetch_and_store(self, feed: FeedDescriptor) -> Optional[FetchMetric]:
        """Run the whole pipeline for ``feed`` and return the recorded metric."""

        start = time.perf_counter()
        try:
            response = await self._request(feed)

            if response.status_code == 304:
                return self._record(feed, start, skipped_304=True)

            if not response.is_success:
                raise FeedFetchError(
                    f"HTTP {response.status_code}: {response.reason_phrase}"
                )

            self._remember_validators(feed, response)

            items = parse_feed(response.content)
            articles_added = 0
            for item in items:
                if self.store.upsert(self._build_article(item, feed)):
                    articles_added += 1

            if articles_added > 0 and self.on_new_articles is not None:
                self.on_new_articles()

            return self._record(
                feed,
                start,
                articles_added=articles_added,
                total_articles_in_feed=len(items),
            )
        except Exception as exc:
            message = self._describe_error(exc)
            self._emit_log(
                "warning",
                "collector.feed.fetch_failed",
                feed=feed,
                details={"error": message, "error_type": type(exc).__name__},
            )
            return self._record(feed, start, error=message)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------
    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "User-Agent": COLLECTION_CONFIG["user_agent"],
                    "Accept": COLLECTION_CONFIG["accept"],
                },
                follow_redirects=COLLECTION_CONFIG["follow_redirects"],
            )
        return self._client

    def _build_headers(self, feed: FeedDescriptor) -> Dict[str, str]:
        cached = self.feed_cache.get(feed.url)
        return cached.conditional_headers() if cached else {}

    async def _request(self, feed: FeedDescriptor) -> httpx.Response:
        client = self._get_client()
        try:
            return await asyncio.wait_for(
                client.get(
                    feed.url,
                    headers=self._build_headers(feed),
                    timeout=self.request_timeout,
                ),
                timeout=self.request_timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise FeedFetchError(
                f"Request timed out after {self.request_timeout:g}s"
            ) from exc

    def _remember_validators(self, feed: FeedDescriptor, response: httpx.Response) -> None:
        etag = response.headers.get("etag") or None
        last_modified = response.headers.get("last-modified") or None
        if etag or last_modified:
            self.feed_cache.set(
                feed.url, FeedCacheEntry(etag=etag, last_modified=last_modified)
            )

    def _build_article(self, item: FeedItem, feed: FeedDescriptor) -> Article:
        return Article(
            id=generate_article_id(item.guid, item.link),
            guid=item.guid,
            title=sanitize_text(item.title, self.max_text_length),
            description=sanitize_text(item.description, self.max_text_length),
            link=item.link,
            pub_date=item.pub_date,
            category=feed.category,
            subcategory=feed.subcategory,
            source=feed.source,
            source_locale=feed.source_locale,
        )

    def _record(
        self,
        feed: FeedDescriptor,
        start: float,
        *,
        articles_added: int = 0,
        total_articles_in_feed: int = 0,
        skipped_304: bool = False,
        error: Optional[str] = None,
    ) -> Optional[FetchMetric]:
        try:
            return self.metrics.record_fetch(
                feed_url=feed.url,
                source=feed.source,
                duration_ms=round((time.perf_counter() - start) * 1000),
                articles_added=articles_added,
                total_articles_in_feed=total_articles_in_feed,
                skipped_304=skipped_304,
                error=error,
            )
        except Exception as exc:  # pragma: no cover
            self._emit_log(
                "error",
                "collector.feed.metric_failed",
                feed=feed,
                details={"error": str(exc)},
            )
            return None

    # ------------------------------------------------------------------
    # Logging helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _describe_error(exc: BaseException) -> str:
        text = str(exc)
        return text if text else type(exc).__name__

    def _emit_log(
        self,
        level: str,
        event: str,
        *,
        feed: Optional[FeedDescriptor] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload: Dict[str, Any] = {"event": event}
        if feed is not None:
            payload["source"] = feed.source
            payload["feed_url"] = feed.url
        payload["details"] = details or {}
        log_method = getattr(self.module_logger, level, None)
        if callable(log_method):
            log_method(payload)
        else:  # pragma: no cover
            self.module_logger.info(payload)
