"""Project configuration facade backed by newsdesk.config_manager."""
from __future__ import annotations

import os
from typing import Any, Dict, Optional

from newsdesk.config_manager import Config, check_consistency, load_config

CONFIG: Config = load_config()

ENVIRONMENT = CONFIG.app.environment
DEBUG = CONFIG.app.debug

COLLECTION_CONFIG: Dict[str, Any] = CONFIG.collection.model_dump(mode="python")
COLLECTION_CONFIG["request_timeout"] = COLLECTION_CONFIG["request_timeout_seconds"]

SCHEDULER_CONFIG: Dict[str, Any] = CONFIG.scheduler.model_dump(mode="python")

TRANSLATION_CONFIG: Dict[str, Any] = CONFIG.translation.model_dump(mode="python")
# Credentials never travel inside the shared dict.
TRANSLATION_CONFIG.pop("api_key", None)

METRICS_CONFIG: Dict[str, Any] = CONFIG.metrics.model_dump(mode="python")
TEXT_PROCESSING_CONFIG: Dict[str, Any] = CONFIG.text_processing.model_dump(mode="python")

LOGGING_CONFIG: Dict[str, Any] = {
    "level": CONFIG.logging.level,
    "file_path": str(CONFIG.logging.file_path) if CONFIG.logging.file_path else None,
    "max_file_size": f"{CONFIG.logging.max_file_size_mb} MB",
    "retention": f"{CONFIG.logging.retention_days} days",
}

TRANSLATION_API_KEY_ENV = "LINGODOTDEV_API_KEY"


def get_translation_api_key(config: Config | None = None) -> Optional[str]:
    """Return the provider credential from config, falling back to the legacy env var."""

    cfg = config or CONFIG
    if cfg.translation.api_key:
        return cfg.translation.api_key
    value = os.environ.get(TRANSLATION_API_KEY_ENV, "").strip()
    return value or None


def validate_config(config: Config | None = None) -> None:
    """Execute domain specific consistency checks."""

    check_consistency(config or CONFIG)


__all__ = [
    "CONFIG",
    "ENVIRONMENT",
    "DEBUG",
    "COLLECTION_CONFIG",
    "SCHEDULER_CONFIG",
    "TRANSLATION_CONFIG",
    "TRANSLATION_API_KEY_ENV",
    "METRICS_CONFIG",
    "TEXT_PROCESSING_CONFIG",
    "LOGGING_CONFIG",
    "get_translation_api_key",
    "validate_config",
]
