# src/translation/queue.py
# Background translation queue
# ============================

"""
Background queue that keeps stored articles translated into every enabled
locale.

The queue is a two-state machine (``IDLE`` / ``PROCESSING``). Two drivers try
to enter ``PROCESSING``: a periodic timer and a debounced wake signal raised
by the ingestion pipeline whenever new articles land. Entry is single-flight,
so an attempt made while a cycle is running returns immediately; articles it
would have handled stay untranslated and are picked up by the next cycle.

A cycle walks the enabled locales in order. For each locale it takes the
articles lacking that translation (skipping articles already written in that
locale), splits them into fixed-size batches and sends each batch as one
provider call, pausing between batches to stay under provider rate limits.
A failed batch writes nothing and does not stop the cycle.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from config.settings import TRANSLATION_CONFIG
from src.storage import Article, ArticleStore
from src.utils.logger import get_logger

from .engine import (
    DisabledTranslationEngine,
    TranslationEngine,
    TranslationError,
    TranslationNotConfiguredError,
)

TITLE_KEY_SUFFIX = "__title"
DESCRIPTION_KEY_SUFFIX = "__desc"
DEFAULT_SOURCE_LOCALE = "en"

SleepFunc = Callable[[float], Awaitable[Any]]


class QueueState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"


class TranslationQueue:
    """Batches untranslated articles to the translation engine."""

    def __init__(
        self,
        store: ArticleStore,
        engine: Optional[TranslationEngine] = None,
        *,
        enabled_locales: Optional[Sequence[str]] = None,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
        cycle_interval: Optional[float] = None,
        initial_delay: Optional[float] = None,
        wake_debounce: Optional[float] = None,
        sleep: Optional[SleepFunc] = None,
        module_logger: Any = None,
    ) -> None:
        self.store = store
        self.engine: TranslationEngine = engine or DisabledTranslationEngine()
        self.enabled_locales: List[str] = list(
            enabled_locales
            if enabled_locales is not None
            else TRANSLATION_CONFIG["enabled_locales"]
        )
        self.batch_size = int(batch_size or TRANSLATION_CONFIG["batch_size"])
        self.batch_delay = float(
            TRANSLATION_CONFIG["batch_delay_seconds"] if batch_delay is None else batch_delay
        )
        self.cycle_interval = float(
            cycle_interval or TRANSLATION_CONFIG["cycle_interval_seconds"]
        )
        self.initial_delay = float(
            TRANSLATION_CONFIG["initial_delay_seconds"]
            if initial_delay is None
            else initial_delay
        )
        self.wake_debounce = float(
            TRANSLATION_CONFIG["wake_debounce_seconds"]
            if wake_debounce is None
            else wake_debounce
        )
        self._sleep_func = sleep
        self.module_logger = module_logger or get_logger().create_module_logger(
            "translation.queue"
        )

        self._state = QueueState.IDLE
        self._wake_event: Optional[asyncio.Event] = None
        self._tasks: List[asyncio.Task] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    def set_engine(self, engine: TranslationEngine) -> None:
        self.engine = engine

    def start(self) -> None:
        """Start the periodic timer and the wake listener.

        Must be called from inside a running event loop. Calling it again
        while running is a no-op.
        """
        if self._tasks:
            return
        loop = asyncio.get_running_loop()
        self._wake_event = asyncio.Event()
        self._tasks = [
            loop.create_task(self._periodic_loop(), name="translation-periodic"),
            loop.create_task(self._wake_loop(), name="translation-wake"),
        ]
        self._emit_log(
            "info",
            "translation.queue.started",
            details={
                "locales": self.enabled_locales,
                "batch_size": self.batch_size,
                "cycle_interval": self.cycle_interval,
            },
        )

    def stop(self) -> None:
        """Cancel the timer and wake listener. Safe to call repeatedly."""
        if not self._tasks:
            return
        for task in self._tasks:
            task.cancel()
        self._tasks = []
        self._wake_event = None
        self._emit_log("info", "translation.queue.stopped")

    def trigger(self) -> None:
        """Request a cycle soon. Never blocks; bursts collapse into one cycle."""
        if self._wake_event is not None:
            self._wake_event.set()

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------
    async def process_now(self) -> Optional[Dict[str, int]]:
        """Run one cycle unless one is already in progress.

        Returns the cycle report, or None when the attempt was a no-op
        (cycle already running or translation disabled).
        """
        if self._state is QueueState.PROCESSING or not self.engine.enabled:
            return None
        self._state = QueueState.PROCESSING

        report = {"locales": 0, "batches": 0, "failed_batches": 0, "translated": 0}
        try:
            for locale in self.enabled_locales:
                pending = [
                    article
                    for article in self.store.get_untranslated(locale)
                    if article.source_locale != locale
                ]
                if not pending:
                    continue

                report["locales"] += 1
                self._emit_log(
                    "info",
                    "translation.locale.started",
                    details={"locale": locale, "articles": len(pending)},
                )
                for index, batch in enumerate(self._batched(pending)):
                    if index > 0:
                        await self._sleep(self.batch_delay)
                    report["batches"] += 1
                    if await self._translate_batch(batch, locale):
                        report["translated"] += len(batch)
                    else:
                        report["failed_batches"] += 1
        finally:
            self._state = QueueState.IDLE

        if report["batches"]:
            self._emit_log("info", "translation.cycle.completed", details=report)
        return report

    async def translate_on_demand(
        self,
        texts: Mapping[str, str],
        source_locale: str,
        target_locale: str,
    ) -> Dict[str, str]:
        """Forward ``texts`` straight to the engine, bypassing store and batching."""
        if not self.engine.enabled:
            raise TranslationNotConfiguredError("Translation engine not initialized")
        return await self.engine.batch_translate(texts, source_locale, target_locale)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _batched(self, articles: List[Article]) -> List[List[Article]]:
        return [
            articles[start : start + self.batch_size]
            for start in range(0, len(articles), self.batch_size)
        ]

    async def _translate_batch(self, batch: List[Article], locale: str) -> bool:
        texts: Dict[str, str] = {}
        for article in batch:
            texts[f"{article.id}{TITLE_KEY_SUFFIX}"] = article.title
            texts[f"{article.id}{DESCRIPTION_KEY_SUFFIX}"] = article.description

        # Mixed-locale batches are sent with the first article's locale.
        source_locale = batch[0].source_locale or DEFAULT_SOURCE_LOCALE

        try:
            translated = await self.engine.batch_translate(texts, source_locale, locale)
            if not isinstance(translated, Mapping):
                raise TranslationError(
                    f"Engine returned {type(translated).__name__}, expected a mapping"
                )
        except Exception as exc:
            self._emit_log(
                "error",
                "translation.batch.failed",
                details={
                    "locale": locale,
                    "source_locale": source_locale,
                    "articles": len(batch),
                    "error": str(exc) or type(exc).__name__,
                },
            )
            return False

        for article in batch:
            title = translated.get(f"{article.id}{TITLE_KEY_SUFFIX}")
            description = translated.get(f"{article.id}{DESCRIPTION_KEY_SUFFIX}")
            self.store.store_translation(
                article.id,
                locale,
                title if isinstance(title, str) and title else article.title,
                description
                if isinstance(description, str) and description
                else article.description,
            )

        self._emit_log(
            "info",
            "translation.batch.completed",
            details={"locale": locale, "articles": len(batch)},
        )
        return True

    async def _run_cycle_safely(self) -> None:
        try:
            await self.process_now()
        except Exception as exc:
            self._emit_log(
                "error",
                "translation.cycle.failed",
                details={"error": str(exc) or type(exc).__name__},
            )

    async def _periodic_loop(self) -> None:
        await self._sleep(self.initial_delay)
        while True:
            await self._run_cycle_safely()
            await self._sleep(self.cycle_interval)

    async def _wake_loop(self) -> None:
        event = self._wake_event
        if event is None:  # pragma: no cover
            return
        while True:
            await event.wait()
            await self._sleep(self.wake_debounce)
            event.clear()
            await self._run_cycle_safely()

    async def _sleep(self, seconds: float) -> None:
        sleeper = self._sleep_func or asyncio.sleep
        await sleeper(seconds)

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
