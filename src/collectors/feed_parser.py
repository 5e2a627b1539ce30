"""RSS 2.0 / Atom parsing into normalized feed items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import feedparser

# feedparser version tags for documents rooted at <rss><channel> or <feed>.
# RDF-based RSS 0.90/1.0 documents are not accepted.
RSS_CHANNEL_VERSIONS = frozenset(
    {"rss", "rss091n", "rss091u", "rss092", "rss093", "rss094", "rss20"}
)

# bozo exceptions that leave the document well-formed
ACCEPTABLE_BOZO_EXCEPTIONS = frozenset(
    {"CharacterEncodingOverride", "NonXMLContentType", "UndeclaredNamespace"}
)


class FeedParseError(ValueError):
    """A recognized feed document that is not well-formed XML."""


@dataclass(frozen=True)
class FeedItem:
    """Raw (unsanitized) fields extracted from one feed entry."""

    guid: Optional[str]
    link: str
    title: str
    description: str
    pub_date: str


def is_supported_version(version: str) -> bool:
    return version in RSS_CHANNEL_VERSIONS or version.startswith("atom")


def is_acceptable_bozo(parsed: Mapping[str, Any]) -> bool:
    """Return True unless feedparser had to recover from broken markup."""
    if not parsed.get("bozo"):
        return True
    exception = parsed.get("bozo_exception")
    return type(exception).__name__ in ACCEPTABLE_BOZO_EXCEPTIONS


def parse_feed(content: bytes | str) -> List[FeedItem]:
    """Parse a feed payload into items.

    Documents that are not RSS or Atom yield an empty list. An RSS or Atom
    document with broken markup raises ``FeedParseError``.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    if not content:
        return []

    parsed = feedparser.parse(content)
    if not is_supported_version(parsed.get("version", "") or ""):
        return []
    if not is_acceptable_bozo(parsed):
        raise FeedParseError(f"Malformed feed: {parsed.get('bozo_exception')}")

    return [normalize_entry(entry) for entry in parsed.get("entries", [])]


def normalize_entry(entry: Mapping[str, Any]) -> FeedItem:
    return FeedItem(
        guid=_extract_guid(entry),
        link=_extract_link(entry),
        title=_text_value(entry.get("title")),
        description=_extract_description(entry),
        pub_date=_first_text(entry, "published", "updated"),
    )


def _extract_guid(entry: Mapping[str, Any]) -> Optional[str]:
    # feedparser exposes both RSS <guid> and Atom <id> as "id"
    guid = _text_value(entry.get("id"))
    return guid or None


def _extract_link(entry: Mapping[str, Any]) -> str:
    link = entry.get("link")
    # feedparser copies a permalink <guid> into "link" when <link> is absent
    if entry.get("guidislink") and link == entry.get("id"):
        link = None
    if isinstance(link, str) and link:
        return link
    if isinstance(link, Mapping) and link.get("href"):
        return str(link["href"])
    for candidate in entry.get("links", []) or []:
        href = candidate.get("href") if isinstance(candidate, Mapping) else None
        if href:
            return str(href)
    return ""


def _extract_description(entry: Mapping[str, Any]) -> str:
    for key in ("description", "summary"):
        value = _text_value(entry.get(key))
        if value:
            return value
    for block in entry.get("content", []) or []:
        value = _text_value(block)
        if value:
            return value
    return ""


def _first_text(entry: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = _text_value(entry.get(key))
        if value:
            return value
    return ""


def _text_value(value: Any) -> str:
    """Return the text of a plain string or of a structured text node."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        inner = value.get("value")
        return inner if isinstance(inner, str) else ""
    return ""
