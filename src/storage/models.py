# src/storage/models.py
# In-memory records held by the article store
# ===========================================

"""
Records owned by the storage layer.

Articles are frozen once built: only their ``translations`` mapping changes
after insertion, and only through ``ArticleStore.store_translation``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ArticleTranslation:
    title: str
    description: str
    translated_at: str = field(default_factory=utc_now_iso)


@dataclass(frozen=True)
class Article:
    """Canonical article keyed by its dedup id."""

    id: str
    title: str
    description: str
    link: str
    pub_date: str
    category: str
    subcategory: str
    source: str
    source_locale: str
    guid: Optional[str] = None
    ingested_at: str = field(default_factory=utc_now_iso)
    translations: Dict[str, ArticleTranslation] = field(default_factory=dict)

    def has_translation(self, locale: str) -> bool:
        return locale in self.translations

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["translations"] = {
            locale: asdict(translation)
            for locale, translation in self.translations.items()
        }
        return data


@dataclass(frozen=True)
class FeedCacheEntry:
    """Validator headers remembered for one feed URL."""

    etag: Optional[str] = None
    last_modified: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.etag or self.last_modified)

    def conditional_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.etag:
            headers["If-None-Match"] = self.etag
        if self.last_modified:
            headers["If-Modified-Since"] = self.last_modified
        return headers
