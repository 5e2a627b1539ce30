from __future__ import annotations

import re
from typing import Optional, Tuple

DEFAULT_MAX_LENGTH = 1000

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

# Applied in sequence; other entities are left untouched.
_ENTITY_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def strip_tags(text: str) -> str:
    if not text:
        return ""
    return _TAG_RE.sub("", text)


def unescape_basic_entities(text: str) -> str:
    for entity, replacement in _ENTITY_REPLACEMENTS:
        text = text.replace(entity, replacement)
    return text


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_text(text: Optional[str], max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Turn a feed title or description into plain display text.

    Tags are removed before entities are decoded, so escaped markup such as
    ``&lt;b&gt;`` survives as literal ``<b>``.
    """
    if not text:
        return ""
    cleaned = strip_tags(str(text))
    cleaned = unescape_basic_entities(cleaned)
    cleaned = collapse_whitespace(cleaned)
    return cleaned[:max_length]
