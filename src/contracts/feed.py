"""Contracts for feed catalog entries."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class FeedCatalogError(ValueError):
    """Raised when a catalog entry cannot be turned into a feed descriptor."""


class FeedDescriptor(BaseModel):
    """Immutable description of one polled feed.

    The poll interval is trusted as-is by the scheduler; the 2 to 5 minute
    range is checked by ``config.feeds.validate_feeds`` when the catalog is
    loaded.
    """

    url: str = Field(min_length=1)
    category: str = Field(min_length=1)
    subcategory: str = Field(min_length=1)
    source: str = Field(min_length=1)
    poll_interval_minutes: float = Field(gt=0)
    source_locale: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    @field_validator("url")
    @classmethod
    def ensure_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return value

    @property
    def poll_interval_seconds(self) -> float:
        return float(self.poll_interval_minutes) * 60.0

    @property
    def label(self) -> str:
        return f"{self.source} [{self.category}/{self.subcategory}]"


def build_feed_descriptors(entries: Iterable[Mapping[str, Any]]) -> List[FeedDescriptor]:
    """Validate raw catalog mappings into ordered descriptors."""

    descriptors: List[FeedDescriptor] = []
    for position, entry in enumerate(entries):
        try:
            descriptors.append(FeedDescriptor.model_validate(dict(entry)))
        except ValidationError as exc:
            raise FeedCatalogError(f"Invalid feed entry #{position}: {exc}") from exc
    return descriptors


def load_feed_catalog(
    entries: Optional[Iterable[Mapping[str, Any]]] = None,
) -> List[FeedDescriptor]:
    """Return the configured catalog as validated descriptors."""

    from config.feeds import ALL_FEEDS, validate_feeds

    raw = list(ALL_FEEDS if entries is None else entries)
    try:
        validate_feeds(raw)
    except ValueError as exc:
        raise FeedCatalogError(str(exc)) from exc
    return build_feed_descriptors(raw)
