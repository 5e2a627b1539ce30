"""Process-lifetime article store and conditional-request cache.

Both classes are plain dict wrappers. They are mutated only from coroutines
running on a single event loop and never await, so each call is atomic with
respect to other tasks. Code that drives them from worker threads must add
its own lock.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from .models import Article, ArticleTranslation, FeedCacheEntry, utc_now_iso


class ArticleStore:
    """Deduplicating map of canonical articles keyed by dedup id."""

    def __init__(self) -> None:
        self._articles: Dict[str, Article] = {}

    def upsert(self, article: Article) -> bool:
        """Insert ``article`` unless its id is known.

        Returns True for a new insertion, False when the id already existed.
        Existing articles are never overwritten.
        """
        if article.id in self._articles:
            return False
        self._articles[article.id] = article
        return True

    def get(self, article_id: str) -> Optional[Article]:
        return self._articles.get(article_id)

    def all(self) -> List[Article]:
        return list(self._articles.values())

    def count(self) -> int:
        return len(self._articles)

    def get_untranslated(self, locale: str) -> List[Article]:
        """Articles that have no translation entry for ``locale``."""
        return [
            article
            for article in self._articles.values()
            if not article.has_translation(locale)
        ]

    def store_translation(
        self, article_id: str, locale: str, title: str, description: str
    ) -> bool:
        """Set the ``locale`` translation of an article.

        Unknown ids are ignored. Returns whether an article was updated.
        """
        article = self._articles.get(article_id)
        if article is None:
            return False
        article.translations[locale] = ArticleTranslation(
            title=title,
            description=description,
            translated_at=utc_now_iso(),
        )
        return True

    def __len__(self) -> int:
        return len(self._articles)

    def __contains__(self, article_id: object) -> bool:
        return article_id in self._articles

    def __iter__(self) -> Iterator[Article]:
        return iter(list(self._articles.values()))


class FeedCache:
    """Last seen validator headers per feed URL (last write wins)."""

    def __init__(self) -> None:
        self._entries: Dict[str, FeedCacheEntry] = {}

    def get(self, feed_url: str) -> Optional[FeedCacheEntry]:
        return self._entries.get(feed_url)

    def set(self, feed_url: str, entry: FeedCacheEntry) -> None:
        self._entries[feed_url] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, feed_url: object) -> bool:
        return feed_url in self._entries
