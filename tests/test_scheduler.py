from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import List

from newsdesk_fixtures import StubModuleLogger, make_feed
from src.scheduling import FeedScheduler

FEED_A = make_feed("https://example.com/a.xml", source="A", poll_interval_minutes=2)
FEED_B = make_feed("https://example.com/b.xml", source="B", poll_interval_minutes=5)


class FakeFetcher:
    def __init__(self, failing: tuple = (), gate: asyncio.Event | None = None) -> None:
        self.calls: List[str] = []
        self.failing = failing
        self.gate = gate

    async def fetch_and_store(self, feed):
        self.calls.append(feed.url)
        if self.gate is not None:
            await self.gate.wait()
        if feed.url in self.failing:
            raise RuntimeError("boom")
        return SimpleNamespace(failed=False)


class BlockingSleep:
    """Lets ``free_ticks`` sleeps return at once, then blocks forever."""

    def __init__(self, free_ticks: int = 0) -> None:
        self.calls: List[float] = []
        self.free_ticks = free_ticks

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if len(self.calls) > self.free_ticks:
            await asyncio.Event().wait()


async def _drain(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


def test_start_runs_startup_pass_and_registers_each_feed() -> None:
    fetcher = FakeFetcher()
    sleep = BlockingSleep()
    logger = StubModuleLogger()
    scheduler = FeedScheduler(
        [FEED_A, FEED_B],
        fetcher,
        startup_pass=True,
        sleep=sleep,
        module_logger=logger,
    )

    async def _run():
        scheduler.start()
        await _drain()
        running = scheduler.is_running
        scheduler.stop()
        return running

    assert asyncio.run(_run()) is True
    assert sorted(fetcher.calls) == [FEED_A.url, FEED_B.url]
    assert sorted(sleep.calls) == [120.0, 300.0]
    assert len(logger.payloads("scheduler.feed.registered")) == 2
    assert logger.payloads("scheduler.fetch_all.completed")[0]["details"] == {
        "ok": 2,
        "failed": 0,
    }
    assert scheduler.is_running is False


def test_periodic_ticks_fetch_their_own_feed() -> None:
    fetcher = FakeFetcher()
    scheduler = FeedScheduler(
        [FEED_A],
        fetcher,
        startup_pass=False,
        sleep=BlockingSleep(free_ticks=2),
        module_logger=StubModuleLogger(),
    )

    async def _run():
        scheduler.start()
        await _drain()
        scheduler.stop()

    asyncio.run(_run())

    assert fetcher.calls == [FEED_A.url, FEED_A.url]


def test_stop_is_idempotent_and_safe_before_start() -> None:
    scheduler = FeedScheduler(
        [FEED_A], FakeFetcher(), sleep=BlockingSleep(), module_logger=StubModuleLogger()
    )
    scheduler.stop()

    async def _run():
        scheduler.start()
        scheduler.start()
        assert len(scheduler._periodic_tasks) == 1
        scheduler.stop()
        scheduler.stop()

    asyncio.run(_run())
    assert scheduler.is_running is False


def test_fetch_all_feeds_isolates_failures() -> None:
    fetcher = FakeFetcher(failing=(FEED_A.url,))
    scheduler = FeedScheduler(
        [FEED_A, FEED_B], fetcher, startup_pass=False, module_logger=StubModuleLogger()
    )

    summary = asyncio.run(scheduler.fetch_all_feeds())

    assert summary == {"ok": 1, "failed": 1}
    assert sorted(fetcher.calls) == [FEED_A.url, FEED_B.url]


def test_ticks_may_overlap_by_default() -> None:
    async def _run():
        gate = asyncio.Event()
        fetcher = FakeFetcher(gate=gate)
        scheduler = FeedScheduler(
            [FEED_A], fetcher, skip_if_in_flight=False, module_logger=StubModuleLogger()
        )
        first = asyncio.create_task(scheduler.run_feed(FEED_A))
        second = asyncio.create_task(scheduler.run_feed(FEED_A))
        await _drain()
        gate.set()
        await asyncio.gather(first, second)
        return fetcher.calls

    assert len(asyncio.run(_run())) == 2


def test_in_flight_guard_skips_overlapping_tick() -> None:
    logger = StubModuleLogger()

    async def _run():
        gate = asyncio.Event()
        fetcher = FakeFetcher(gate=gate)
        scheduler = FeedScheduler(
            [FEED_A], fetcher, skip_if_in_flight=True, module_logger=logger
        )
        first = asyncio.create_task(scheduler.run_feed(FEED_A))
        await _drain()
        await scheduler.run_feed(FEED_A)
        gate.set()
        await first
        await scheduler.run_feed(FEED_A)
        return fetcher.calls

    assert len(asyncio.run(_run())) == 2
    assert "scheduler.tick.skipped_in_flight" in logger.events()


def test_tick_failure_is_logged_not_raised() -> None:
    logger = StubModuleLogger()
    scheduler = FeedScheduler(
        [FEED_A], FakeFetcher(failing=(FEED_A.url,)), module_logger=logger
    )

    asyncio.run(scheduler.run_feed(FEED_A))

    assert "scheduler.tick.failed" in logger.events()
