"""Validated contracts shared across Newsdesk components."""

from .feed import (
    FeedCatalogError,
    FeedDescriptor,
    build_feed_descriptors,
    load_feed_catalog,
)

__all__ = [
    "FeedCatalogError",
    "FeedDescriptor",
    "build_feed_descriptors",
    "load_feed_catalog",
]
