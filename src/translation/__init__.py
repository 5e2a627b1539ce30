"""
Newsdesk translation package.

Translation engine capability and the background batching queue.
"""

from .engine import (
    DisabledTranslationEngine,
    LingoTranslationEngine,
    TranslationEngine,
    TranslationError,
    TranslationNotConfiguredError,
    create_translation_engine,
)
from .queue import QueueState, TranslationQueue

__all__ = [
    "DisabledTranslationEngine",
    "LingoTranslationEngine",
    "QueueState",
    "TranslationEngine",
    "TranslationError",
    "TranslationNotConfiguredError",
    "TranslationQueue",
    "create_translation_engine",
]
