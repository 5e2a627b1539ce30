"""
Newsdesk collectors package.

Conditional feed fetching and RSS/Atom parsing.
"""

from .feed_fetcher import FeedFetcher, FeedFetchError
from .feed_parser import FeedItem, FeedParseError, normalize_entry, parse_feed

__all__ = [
    "FeedFetcher",
    "FeedFetchError",
    "FeedItem",
    "FeedParseError",
    "normalize_entry",
    "parse_feed",
]
