"""
Newsdesk utilities.
"""

from .dedupe import generate_article_id, sha256_hex
from .logger import get_logger, setup_logging
from .metrics import FetchMetric, MetricsLog
from .text_cleaner import sanitize_text

__all__ = [
    "get_logger",
    "setup_logging",
    "FetchMetric",
    "MetricsLog",
    "generate_article_id",
    "sha256_hex",
    "sanitize_text",
]
