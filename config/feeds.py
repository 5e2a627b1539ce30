# config/feeds.py
# Feed catalog for the Newsdesk aggregator
# ========================================

"""
Static catalog of the syndicated feeds the scheduler polls.

Each entry carries:
- url: RSS 2.0 or Atom endpoint
- category / subcategory: labels surfaced to readers
- source: publisher label
- poll_interval_minutes: how often the feed is polled (2 to 5 minutes)
- source_locale: language the feed is published in, used as translation source
"""

from typing import Any, Dict, List

MIN_POLL_INTERVAL_MINUTES = 2
MAX_POLL_INTERVAL_MINUTES = 5

# Qatar News Agency
# =================

QNA_FEEDS: List[Dict[str, Any]] = [
    {
        "url": "https://qna.org.qa/en/Pages/RSS-Feeds/Economy-Local",
        "category": "Economy",
        "subcategory": "Local",
        "source": "QNA",
        "poll_interval_minutes": 3,
        "source_locale": "en",
    },
    {
        "url": "https://qna.org.qa/en/Pages/RSS-Feeds/Economy-International",
        "category": "Economy",
        "subcategory": "International",
        "source": "QNA",
        "poll_interval_minutes": 3,
        "source_locale": "en",
    },
    {
        "url": "https://qna.org.qa/en/Pages/RSS-Feeds/Sport-Local",
        "category": "Sport",
        "subcategory": "Local",
        "source": "QNA",
        "poll_interval_minutes": 3,
        "source_locale": "en",
    },
    {
        "url": "https://qna.org.qa/en/Pages/RSS-Feeds/Sport-International",
        "category": "Sport",
        "subcategory": "International",
        "source": "QNA",
        "poll_interval_minutes": 3,
        "source_locale": "en",
    },
    {
        "url": "https://qna.org.qa/en/Pages/RSS-Feeds/Miscellaneous-International",
        "category": "Miscellaneous",
        "subcategory": "International",
        "source": "QNA",
        "poll_interval_minutes": 4,
        "source_locale": "en",
    },
    {
        "url": "https://qna.org.qa/en/Pages/RSS-Feeds/Qatar",
        "category": "Qatar",
        "subcategory": "General",
        "source": "QNA",
        "poll_interval_minutes": 2,
        "source_locale": "en",
    },
]

# Local English-language media
# ============================

LOCAL_MEDIA_FEEDS: List[Dict[str, Any]] = [
    {
        "url": "https://dohanews.co/feed/",
        "category": "Qatar",
        "subcategory": "General",
        "source": "Doha News",
        "poll_interval_minutes": 3,
        "source_locale": "en",
    },
    {
        "url": "https://marhaba.qa/feed/",
        "category": "Qatar",
        "subcategory": "Lifestyle",
        "source": "Marhaba",
        "poll_interval_minutes": 5,
        "source_locale": "en",
    },
    {
        "url": "https://www.gulf-times.com/rssFeed/15",
        "category": "Qatar",
        "subcategory": "General",
        "source": "Gulf Times",
        "poll_interval_minutes": 2,
        "source_locale": "en",
    },
    {
        "url": "https://www.gulf-times.com/rssFeed/5",
        "category": "Economy",
        "subcategory": "Business",
        "source": "Gulf Times",
        "poll_interval_minutes": 3,
        "source_locale": "en",
    },
]

# Al Arab (Arabic)
# ================

ARABIC_FEEDS: List[Dict[str, Any]] = [
    {
        "url": "https://alarab.qa/category/%D9%82%D8%B7%D8%B1-%D8%A8%D8%B9%D9%8A%D9%88%D9%86-%D8%A7%D9%84%D8%B9%D8%B1%D8%A8/feed",
        "category": "Qatar",
        "subcategory": "Arab Eyes",
        "source": "Al Arab",
        "poll_interval_minutes": 3,
        "source_locale": "ar",
    },
    {
        "url": "https://alarab.qa/category/%D8%AA%D8%AD%D9%82%D9%8A%D9%82%D8%A7%D8%AA/feed",
        "category": "Investigations",
        "subcategory": "General",
        "source": "Al Arab",
        "poll_interval_minutes": 4,
        "source_locale": "ar",
    },
    {
        "url": "https://alarab.qa/category/%D9%86%D9%81%D8%AD%D8%A7%D8%AA-%D8%B1%D9%85%D8%B6%D8%A7%D9%86/feed",
        "category": "Culture",
        "subcategory": "Ramadan",
        "source": "Al Arab",
        "poll_interval_minutes": 5,
        "source_locale": "ar",
    },
    {
        "url": "https://alarab.qa/category/%D8%A7%D9%82%D8%AA%D8%B5%D8%A7%D8%AF-%D9%85%D8%AD%D9%84%D9%8A/feed",
        "category": "Economy",
        "subcategory": "Local",
        "source": "Al Arab",
        "poll_interval_minutes": 3,
        "source_locale": "ar",
    },
]

# Ordered catalog consumed by the scheduler
ALL_FEEDS: List[Dict[str, Any]] = [*QNA_FEEDS, *LOCAL_MEDIA_FEEDS, *ARABIC_FEEDS]

REQUIRED_FIELDS = (
    "url",
    "category",
    "subcategory",
    "source",
    "poll_interval_minutes",
    "source_locale",
)


def get_feeds_by_category(category: str) -> List[Dict[str, Any]]:
    """Return catalog entries whose category matches (case-insensitive)."""
    wanted = category.lower()
    return [feed for feed in ALL_FEEDS if feed["category"].lower() == wanted]


def get_feeds_by_source(source: str) -> List[Dict[str, Any]]:
    """Return catalog entries published by ``source`` (case-insensitive)."""
    wanted = source.lower()
    return [feed for feed in ALL_FEEDS if feed["source"].lower() == wanted]


def validate_feeds(feeds: List[Dict[str, Any]] | None = None) -> int:
    """Check every catalog entry and return the number of valid feeds."""
    entries = ALL_FEEDS if feeds is None else feeds
    seen_urls = set()

    for position, feed in enumerate(entries):
        for field in REQUIRED_FIELDS:
            if field not in feed or feed[field] in (None, ""):
                raise ValueError(f"Feed #{position} is missing field {field}")

        url = feed["url"]
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Feed #{position} has an invalid URL: {url}")
        if url in seen_urls:
            raise ValueError(f"Feed URL listed twice: {url}")
        seen_urls.add(url)

        interval = feed["poll_interval_minutes"]
        if not MIN_POLL_INTERVAL_MINUTES <= interval <= MAX_POLL_INTERVAL_MINUTES:
            raise ValueError(
                f"Feed {url} poll interval must be between "
                f"{MIN_POLL_INTERVAL_MINUTES} and {MAX_POLL_INTERVAL_MINUTES} minutes"
            )

    return len(entries)
