"""Declarative configuration schema for Newsdesk."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    PositiveInt,
    PrivateAttr,
    field_validator,
    model_validator,
)


class StrictModel(BaseModel):
    """Base model enforcing strict validation rules."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )


class AppSettings(StrictModel):
    """Top-level runtime metadata."""

    environment: str = Field(
        default="development",
        description="Normalized deployment environment name.",
        examples=["production"],
    )
    debug: bool = Field(
        default=False,
        description="When true, enables verbose logging and relaxed guards.",
    )

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"development", "production", "staging", "test"}:
            raise ValueError(
                "environment must be one of: development, staging, production, test"
            )
        return normalized


class CollectionConfig(StrictModel):
    """Feed fetching behaviour parameters."""

    request_timeout_seconds: PositiveFloat = Field(
        default=15.0,
        description="Hard timeout for a single feed request, body included.",
    )
    user_agent: str = Field(
        default="Newsdesk-Aggregator/1.0 (RSS Reader)",
        description="HTTP User-Agent header sent to feed providers.",
    )
    accept: str = Field(
        default="application/rss+xml, application/xml, text/xml, */*",
        description="HTTP Accept header sent with feed requests.",
    )
    follow_redirects: bool = Field(
        default=True, description="Follow HTTP redirects when fetching feeds."
    )


class SchedulerConfig(StrictModel):
    """Per-feed polling scheduler options."""

    startup_pass: bool = Field(
        default=True,
        description="Fetch every feed once immediately when the scheduler starts.",
    )
    skip_if_in_flight: bool = Field(
        default=False,
        description=(
            "Skip a periodic tick while the previous fetch of the same feed is "
            "still running."
        ),
    )


class TranslationConfig(StrictModel):
    """Background translation queue parameters."""

    enabled_locales: List[str] = Field(
        default_factory=lambda: ["en", "ar"],
        description="Target locales every article is translated into.",
        examples=[["en", "ar", "fr"]],
    )
    batch_size: PositiveInt = Field(
        default=20, description="Maximum articles per provider call."
    )
    batch_delay_seconds: NonNegativeFloat = Field(
        default=2.0,
        description="Pause between consecutive batches of the same locale.",
    )
    cycle_interval_seconds: PositiveFloat = Field(
        default=30.0, description="Interval between periodic queue cycles."
    )
    initial_delay_seconds: NonNegativeFloat = Field(
        default=5.0,
        description="Delay before the first cycle after the queue starts.",
    )
    wake_debounce_seconds: NonNegativeFloat = Field(
        default=1.0,
        description="Window used to coalesce wake signals from ingestion.",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Translation provider credential; translation is disabled when unset.",
    )
    api_url: str = Field(
        default="https://engine.lingo.dev",
        description="Base URL of the translation provider.",
    )
    request_timeout_seconds: PositiveFloat = Field(
        default=60.0, description="Timeout applied to each provider call."
    )

    @field_validator("enabled_locales")
    @classmethod
    def _normalize_locales(cls, value: List[str]) -> List[str]:
        normalized: List[str] = []
        for locale in value:
            code = str(locale).strip()
            if not code:
                raise ValueError("enabled_locales entries must be non-empty")
            if code not in normalized:
                normalized.append(code)
        return normalized

    @field_validator("api_key")
    @classmethod
    def _blank_key_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class MetricsConfig(StrictModel):
    """Fetch metrics history settings."""

    history_limit: PositiveInt = Field(
        default=500, description="Number of fetch attempts retained in memory."
    )
    recent_limit: PositiveInt = Field(
        default=50, description="Number of fetch attempts exposed as recent."
    )

    @model_validator(mode="after")
    def _recent_within_history(self) -> "MetricsConfig":
        if self.recent_limit > self.history_limit:
            raise ValueError("recent_limit cannot exceed history_limit")
        return self


class TextProcessingConfig(StrictModel):
    """Text sanitization options."""

    max_length: PositiveInt = Field(
        default=1000,
        description="Maximum characters kept for titles and descriptions.",
    )


class LoggingConfig(StrictModel):
    """Logging subsystem configuration."""

    level: str = Field(
        default="INFO",
        description="Minimum log level captured by the logger.",
        examples=["DEBUG"],
    )
    file_path: Optional[Path] = Field(
        default=None,
        description="Path of the rotating log file; console only when unset.",
        examples=["data/logs/newsdesk.log"],
    )
    max_file_size_mb: PositiveInt = Field(
        default=10,
        description="Maximum size per log file before rotation (MiB).",
    )
    retention_days: PositiveInt = Field(
        default=14,
        description="Number of days to keep rotated log files.",
    )

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return normalized

    @model_validator(mode="after")
    def _resolve_path(self) -> "LoggingConfig":
        if self.file_path is not None and not self.file_path.is_absolute():
            object.__setattr__(self, "file_path", self.file_path.resolve())
        return self


class Config(StrictModel):
    """Complete Newsdesk configuration model."""

    app: AppSettings = Field(default_factory=AppSettings)
    collection: CollectionConfig = Field(default_factory=CollectionConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    text_processing: TextProcessingConfig = Field(default_factory=TextProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    _sources: Dict[str, str] = PrivateAttr(default_factory=dict)


DEFAULT_CONFIG = Config()


__all__ = [
    "Config",
    "DEFAULT_CONFIG",
]
