#!/usr/bin/env python3
# main.py
# Entry point of the Newsdesk aggregator
# ======================================

"""
Command line entry point.

Usage:
    python main.py                      # Poll feeds and translate until Ctrl+C
    python main.py --once               # One pass over every feed, then report
    python main.py --duration 600       # Run for ten minutes
    python main.py --no-translate       # Ingest only
    python main.py --list-feeds         # Show the feed catalog
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional, Sequence

from config import (
    LOGGING_CONFIG,
    PROJECT_VERSION,
    get_translation_api_key,
    validate_config,
)
from config.feeds import ALL_FEEDS
from src import create_service, setup_logging
from src.service import NewsService


def print_banner(feed_count: int) -> None:
    print("=" * 70)
    print("📰 NEWSDESK - Multilingual News Aggregator")
    print("=" * 70)
    print(f"🔖 Version: {PROJECT_VERSION}")
    print(f"🎯 Configured feeds: {feed_count}")
    print("=" * 70)


def print_feed_list(feeds: List[Dict[str, Any]]) -> None:
    print("\n📚 CONFIGURED FEEDS:")
    print("-" * 50)

    by_category: Dict[str, List[Dict[str, Any]]] = {}
    for feed in feeds:
        by_category.setdefault(feed["category"], []).append(feed)

    for category, entries in by_category.items():
        print(f"\n🗂️  {category.upper()}:")
        for feed in entries:
            print(
                f"  • {feed['source']:<14} {feed['subcategory']:<18} "
                f"every {feed['poll_interval_minutes']}m [{feed['source_locale']}]"
            )
            print(f"    {feed['url']}")


def print_metrics_summary(service: NewsService) -> None:
    summary = service.get_metrics()["summary"]
    print("\n📈 FETCH SUMMARY:")
    print(f"  • Fetches: {summary['total_fetches']}")
    print(f"  • Articles added: {summary['total_articles_added']}")
    print(f"  • Failures: {summary['total_failures']}")
    print(f"  • 304 skips: {summary['total_304_skips']}")
    print(f"  • Avg duration: {summary['avg_duration_ms']}ms")
    print(f"  • Articles stored: {service.get_article_count()}")


async def run_once(service: NewsService, translate: bool) -> Dict[str, int]:
    """Fetch every feed once and, when enabled, run one translation cycle."""
    try:
        result = await service.fetch_all_feeds()
        if translate and service.configure_translation_engine(get_translation_api_key()):
            await service.translation_queue.process_now()
        return result
    finally:
        await service.shutdown()


async def run_forever(
    service: NewsService, translate: bool, duration: Optional[float]
) -> None:
    """Run the scheduler (and queue) until cancelled or ``duration`` elapses."""
    service.start_scheduler()
    if translate:
        service.init_translation_queue(get_translation_api_key())
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        await service.shutdown()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Newsdesk - multilingual news feed aggregator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch every feed once, print the metrics summary and exit",
    )
    parser.add_argument(
        "--list-feeds", action="store_true", help="List the configured feeds and exit"
    )
    parser.add_argument(
        "--no-translate",
        action="store_true",
        help="Disable the background translation queue",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Stop after this many seconds instead of running until interrupted",
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only print errors and the final summary"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.list_feeds:
        print_feed_list(ALL_FEEDS)
        return 0

    if args.duration is not None and args.duration <= 0:
        print("❌ --duration must be positive")
        return 2

    try:
        validate_config()
        logger_factory = setup_logging(
            {**LOGGING_CONFIG, "level": "WARNING"} if args.quiet else None
        )
        run_logger = logger_factory.create_module_logger("cli.run")
        service = create_service()

        if not args.quiet:
            print_banner(len(service.feeds))
            logger_factory.log_system_startup(
                version=PROJECT_VERSION,
                config_summary={
                    "feeds": len(service.feeds),
                    "translation": not args.no_translate,
                    "locales": service.translation_queue.enabled_locales,
                },
            )

        translate = not args.no_translate
        if args.once:
            result = asyncio.run(run_once(service, translate))
            run_logger.info({"event": "cli.once.completed", "details": result})
        else:
            asyncio.run(run_forever(service, translate, args.duration))

        print_metrics_summary(service)
        print("\n✅ Run completed")
        return 0

    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user")
        return 130
    except Exception as exc:
        print(f"\n❌ Run failed: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
