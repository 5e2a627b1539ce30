# src/scheduling/scheduler.py
# Per-feed polling scheduler
# ==========================

"""
Drives the fetch pipeline for every catalog feed.

``start()`` registers one independent periodic task per feed and launches a
startup pass over the whole catalog. Each tick spawns its own fetch task, so
a slow feed never delays another feed or its own timer. ``stop()`` cancels the
timers only; fetches already running finish or time out by themselves.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set

from config.settings import SCHEDULER_CONFIG
from src.collectors import FeedFetcher
from src.contracts import FeedDescriptor
from src.utils.logger import get_logger

SleepFunc = Callable[[float], Awaitable[Any]]


class FeedScheduler:
    """Owns the periodic polling tasks for a fixed list of feeds."""

    def __init__(
        self,
        feeds: Sequence[FeedDescriptor],
        fetcher: FeedFetcher,
        *,
        startup_pass: Optional[bool] = None,
        skip_if_in_flight: Optional[bool] = None,
        sleep: Optional[SleepFunc] = None,
        module_logger: Any = None,
    ) -> None:
        self.feeds: List[FeedDescriptor] = list(feeds)
        self.fetcher = fetcher
        self.startup_pass = (
            SCHEDULER_CONFIG["startup_pass"] if startup_pass is None else startup_pass
        )
        self.skip_if_in_flight = (
            SCHEDULER_CONFIG["skip_if_in_flight"]
            if skip_if_in_flight is None
            else skip_if_in_flight
        )
        self._sleep_func = sleep
        self.module_logger = module_logger or get_logger().create_module_logger(
            "scheduling.scheduler"
        )

        self._periodic_tasks: List[asyncio.Task] = []
        self._fetch_tasks: Set[asyncio.Task] = set()
        self._in_flight: Set[str] = set()

    @property
    def is_running(self) -> bool:
        return bool(self._periodic_tasks)

    def start(self) -> None:
        """Register every feed and kick off the startup pass.

        Must be called from inside a running event loop. A second call while
        running is ignored.
        """
        if self._periodic_tasks:
            self._emit_log("debug", "scheduler.already_running")
            return

        loop = asyncio.get_running_loop()
        self._emit_log("info", "scheduler.starting", details={"feeds": len(self.feeds)})
        for feed in self.feeds:
            self._periodic_tasks.append(
                loop.create_task(self._poll_forever(feed), name=f"poll:{feed.url}")
            )
            self._emit_log(
                "info",
                "scheduler.feed.registered",
                feed=feed,
                details={"every_minutes": feed.poll_interval_minutes},
            )

        if self.startup_pass:
            self._track(loop.create_task(self.fetch_all_feeds(), name="startup-pass"))

    def stop(self) -> None:
        """Cancel all periodic tasks. Safe to call when never started."""
        if not self._periodic_tasks:
            return
        for task in self._periodic_tasks:
            task.cancel()
        self._periodic_tasks = []
        self._emit_log("info", "scheduler.stopped")

    async def fetch_all_feeds(self) -> Dict[str, int]:
        """Run the pipeline for every feed concurrently and summarize."""

        results = await asyncio.gather(
            *(self.fetcher.fetch_and_store(feed) for feed in self.feeds),
            return_exceptions=True,
        )
        failed = sum(
            1
            for result in results
            if isinstance(result, BaseException) or getattr(result, "failed", False)
        )
        summary = {"ok": len(results) - failed, "failed": failed}
        self._emit_log("info", "scheduler.fetch_all.completed", details=summary)
        return summary

    async def run_feed(self, feed: FeedDescriptor) -> None:
        """One tick for ``feed``, honoring the in-flight guard when enabled."""

        if self.skip_if_in_flight:
            if feed.url in self._in_flight:
                self._emit_log("info", "scheduler.tick.skipped_in_flight", feed=feed)
                return
            self._in_flight.add(feed.url)
        try:
            await self.fetcher.fetch_and_store(feed)
        except Exception as exc:
            self._emit_log(
                "error",
                "scheduler.tick.failed",
                feed=feed,
                details={"error": str(exc) or type(exc).__name__},
            )
        finally:
            self._in_flight.discard(feed.url)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _poll_forever(self, feed: FeedDescriptor) -> None:
        loop = asyncio.get_running_loop()
        while True:
            await self._sleep(feed.poll_interval_seconds)
            self._track(loop.create_task(self.run_feed(feed), name=f"fetch:{feed.url}"))

    def _track(self, task: asyncio.Task) -> None:
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)

    async def _sleep(self, seconds: float) -> None:
        sleeper = self._sleep_func or asyncio.sleep
        await sleeper(seconds)

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
