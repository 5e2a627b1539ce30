"""
Newsdesk scheduling package.

Per-feed periodic polling on the asyncio event loop.
"""

from .scheduler import FeedScheduler

__all__ = ["FeedScheduler"]
