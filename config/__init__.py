"""Config package with lazy attribute loading to avoid heavy imports during packaging."""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Iterable

__all__ = [
    "COLLECTION_CONFIG",
    "SCHEDULER_CONFIG",
    "TRANSLATION_CONFIG",
    "METRICS_CONFIG",
    "TEXT_PROCESSING_CONFIG",
    "LOGGING_CONFIG",
    "ENVIRONMENT",
    "DEBUG",
    "get_translation_api_key",
    "validate_config",
    "ALL_FEEDS",
    "get_feeds_by_category",
    "get_feeds_by_source",
    "validate_feeds",
    "MIN_PYTHON_VERSION",
    "MIN_PYTHON_VERSION_STR",
    "PROJECT_VERSION",
    "PYTHON_REQUIRES_SPECIFIER",
    "__version__",
]

_MODULE_ATTRS: Dict[str, Iterable[str]] = {
    "config.settings": [
        "COLLECTION_CONFIG",
        "SCHEDULER_CONFIG",
        "TRANSLATION_CONFIG",
        "METRICS_CONFIG",
        "TEXT_PROCESSING_CONFIG",
        "LOGGING_CONFIG",
        "ENVIRONMENT",
        "DEBUG",
        "get_translation_api_key",
        "validate_config",
    ],
    "config.feeds": [
        "ALL_FEEDS",
        "get_feeds_by_category",
        "get_feeds_by_source",
        "validate_feeds",
    ],
    "config.version": [
        "MIN_PYTHON_VERSION",
        "MIN_PYTHON_VERSION_STR",
        "PROJECT_VERSION",
        "PYTHON_REQUIRES_SPECIFIER",
        "__version__",
    ],
}

_ATTR_TO_MODULE: Dict[str, str] = {
    attribute: module for module, attributes in _MODULE_ATTRS.items() for attribute in attributes
}


def __getattr__(name: str) -> Any:
    module_name = _ATTR_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module 'config' has no attribute {name!r}")
    module = import_module(module_name)
    for attribute in _MODULE_ATTRS[module_name]:
        globals()[attribute] = getattr(module, attribute)
    return globals()[name]


__author__ = "Newsdesk Team"
