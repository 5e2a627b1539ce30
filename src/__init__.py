"""
Main package of the Newsdesk aggregator.

Holds the functional modules: collectors, scheduling, storage, translation
and utilities.
"""

from config.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

from .service import NewsService, create_service
from .utils import get_logger, setup_logging

__version__ = PROJECT_VERSION
__description__ = "Multilingual news feed aggregator with background translation"

__package_info__ = {
    "name": "newsdesk-aggregator",
    "version": __version__,
    "description": __description__,
    "author": "Newsdesk Team",
    "license": "MIT",
    "python_requires": PYTHON_REQUIRES_SPECIFIER,
}

__all__ = [
    "NewsService",
    "create_service",
    "get_logger",
    "setup_logging",
]
