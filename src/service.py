# src/service.py
# Aggregator service facade
# =========================

"""
Single entry point that wires the aggregator components together.

``create_service()`` builds the store, feed cache, metrics log, fetcher,
scheduler and translation queue exactly once and injects them into a
``NewsService``. Outer surfaces (the CLI, an HTTP layer) only talk to the
service.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from config.settings import SCHEDULER_CONFIG, TRANSLATION_CONFIG
from src.collectors import FeedFetcher
from src.contracts import FeedDescriptor, load_feed_catalog
from src.scheduling import FeedScheduler
from src.storage import Article, ArticleStore, FeedCache
from src.translation import (
    TranslationEngine,
    TranslationQueue,
    create_translation_engine,
)
from src.utils.logger import get_logger
from src.utils.metrics import MetricsLog


class NewsService:
    """Facade over ingestion, storage, translation and metrics."""

    def __init__(
        self,
        *,
        feeds: Sequence[FeedDescriptor],
        store: ArticleStore,
        feed_cache: FeedCache,
        metrics: MetricsLog,
        fetcher: FeedFetcher,
        scheduler: FeedScheduler,
        translation_queue: TranslationQueue,
        translation_client: Optional[httpx.AsyncClient] = None,
        module_logger: Any = None,
    ) -> None:
        self.feeds = list(feeds)
        self.store = store
        self.feed_cache = feed_cache
        self.metrics = metrics
        self.fetcher = fetcher
        self.scheduler = scheduler
        self.translation_queue = translation_queue
        self.translation_client = translation_client
        self.module_logger = module_logger or get_logger().create_module_logger(
            "service"
        )

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------
    def get_all_articles(self) -> List[Article]:
        return self.store.all()

    def get_article(self, article_id: str) -> Optional[Article]:
        return self.store.get(article_id)

    def get_article_count(self) -> int:
        return self.store.count()

    def get_untranslated_articles(self, locale: str) -> List[Article]:
        return self.store.get_untranslated(locale)

    def store_translation(
        self, article_id: str, locale: str, title: str, description: str
    ) -> bool:
        return self.store.store_translation(article_id, locale, title, description)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------
    def get_metrics(self) -> Dict[str, Any]:
        return self.metrics.snapshot()

    # ------------------------------------------------------------------
    # Scheduler
    # ------------------------------------------------------------------
    def start_scheduler(self) -> None:
        self.scheduler.start()

    def stop_scheduler(self) -> None:
        self.scheduler.stop()

    async def fetch_all_feeds(self) -> Dict[str, int]:
        return await self.scheduler.fetch_all_feeds()

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------
    def configure_translation_engine(self, credential: Optional[str]) -> bool:
        """Install the engine built from ``credential``; return whether it is live.

        Once an engine is live, later calls keep it and return True.
        """
        if self.translation_queue.engine.enabled:
            return True
        engine: TranslationEngine = create_translation_engine(
            credential,
            api_url=TRANSLATION_CONFIG["api_url"],
            timeout=TRANSLATION_CONFIG["request_timeout_seconds"],
            client=self.translation_client,
        )
        self.translation_queue.set_engine(engine)
        if not engine.enabled:
            self._emit_log(
                "warning",
                "translation.disabled",
                details={"reason": "no provider API key configured"},
            )
        return engine.enabled

    def init_translation_queue(self, credential: Optional[str] = None) -> bool:
        """Create the engine from ``credential`` and start the queue.

        Without a credential the queue stays stopped, on-demand translation
        raises, and ingestion keeps running. Returns whether the queue
        started.
        """
        if not self.configure_translation_engine(credential):
            return False
        self.translation_queue.start()
        return True

    def stop_translation_queue(self) -> None:
        self.translation_queue.stop()

    def trigger_queue_processing(self) -> None:
        self.translation_queue.trigger()

    async def translate_on_demand(
        self,
        texts: Mapping[str, str],
        source_locale: str,
        target_locale: str,
    ) -> Dict[str, str]:
        return await self.translation_queue.translate_on_demand(
            texts, source_locale, target_locale
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def shutdown(self) -> None:
        """Stop both subsystems and release HTTP clients."""
        self.stop_scheduler()
        self.stop_translation_queue()
        await self.fetcher.aclose()
        await self.translation_queue.engine.aclose()
        self._emit_log("info", "service.shutdown")

    def _emit_log(
        self,
        level: str,
        event: str,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload = {"event": event, "details": details or {}}
        log_method = getattr(self.module_logger, level, None)
        if callable(log_method):
            log_method(payload)
        else:  # pragma: no cover
            self.module_logger.info(payload)


def create_service(
    *,
    feeds: Optional[Sequence[FeedDescriptor]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    translation_client: Optional[httpx.AsyncClient] = None,
    skip_if_in_flight: Optional[bool] = None,
    enabled_locales: Optional[Sequence[str]] = None,
) -> NewsService:
    """Build every component once and return the wired service."""

    catalog = list(feeds) if feeds is not None else load_feed_catalog()
    store = ArticleStore()
    feed_cache = FeedCache()
    metrics = MetricsLog()
    queue = TranslationQueue(store, enabled_locales=enabled_locales)
    fetcher = FeedFetcher(
        store,
        feed_cache,
        metrics,
        on_new_articles=queue.trigger,
        client=http_client,
    )
    scheduler = FeedScheduler(
        catalog,
        fetcher,
        startup_pass=SCHEDULER_CONFIG["startup_pass"],
        skip_if_in_flight=skip_if_in_flight,
    )
    return NewsService(
        feeds=catalog,
        store=store,
        feed_cache=feed_cache,
        metrics=metrics,
        fetcher=fetcher,
        scheduler=scheduler,
        translation_queue=queue,
        translation_client=translation_client,
    )


__all__ = ["NewsService", "create_service"]
