"""
Newsdesk storage package.

In-memory article store, feed validator cache and their records.
"""

from .article_store import ArticleStore, FeedCache
from .models import Article, ArticleTranslation, FeedCacheEntry

__all__ = [
    "Article",
    "ArticleStore",
    "ArticleTranslation",
    "FeedCache",
    "FeedCacheEntry",
]
