"""Article identity derivation used for deduplication."""

from __future__ import annotations

import hashlib
from typing import Optional


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def generate_article_id(guid: Optional[str], link: Optional[str]) -> str:
    """Return the dedup key for a feed item.

    A non-blank guid is used verbatim (trimmed). Otherwise the key is the
    SHA-256 digest of the link, so guid-less items stay stable across polls.
    """

    if isinstance(guid, str) and guid.strip():
        return guid.strip()
    return sha256_hex(link or "")
