# src/utils/logger.py
# Logging setup for Newsdesk
# ==========================

"""
Central loguru configuration for the aggregator.

Every component gets a module logger bound with its name and emits structured
payloads (``{"event": ..., "details": ...}``) so that fetch, schedule and
translation activity can be followed in one stream.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from config.settings import DEBUG, ENVIRONMENT, LOGGING_CONFIG


class NewsdeskLogger:
    """
    Centralized logging configurator for the whole process.

    Console output is always on; a rotating file sink is added when the
    configuration names a log file.
    """

    def __init__(self):
        self.is_configured = False
        self.log_file_path: Optional[Path] = None

    def configure_logging(self, config: Optional[Dict[str, Any]] = None):
        """
        Install the console and file handlers.

        Args:
            config: Logging configuration. Defaults to ``LOGGING_CONFIG``
                    from settings.
        """
        if self.is_configured:
            logger.debug("Logger already configured, skipping reconfiguration")
            return

        config = config or LOGGING_CONFIG

        logger.remove()
        self._configure_console_handler(config)
        if config.get("file_path"):
            self._configure_file_handler(config)

        self.is_configured = True
        logger.debug(f"Logging configured: {config}")

    def _configure_console_handler(self, config: Dict[str, Any]):
        if DEBUG:
            console_format = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[module]}</cyan> | "
                "<level>{message}</level>"
            )
            console_level = "DEBUG"
        else:
            console_format = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"
            console_level = config.get("level", "INFO")

        logger.configure(extra={"module": "-"})
        logger.add(
            sys.stdout,
            format=console_format,
            level=console_level,
            colorize=True,
            backtrace=DEBUG,
            diagnose=DEBUG,
        )

    def _configure_file_handler(self, config: Dict[str, Any]):
        """Rotating, compressed file sink for later analysis."""
        self.log_file_path = Path(config["file_path"])
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{process.id: <6} | "
            "{extra[module]} | "
            "{message}"
        )

        logger.add(
            str(self.log_file_path),
            format=file_format,
            level=config.get("level", "INFO"),
            rotation=config.get("max_file_size", "10 MB"),
            retention=config.get("retention", "14 days"),
            compression="gz",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

    def create_module_logger(self, module_name: str) -> Any:
        """
        Return a logger bound to ``module_name`` (e.g. ``collectors.fetcher``).
        """
        if not self.is_configured:
            self.configure_logging()
        return logger.bind(module=module_name)

    def log_system_startup(
        self, version: str = "1.0", config_summary: Optional[Dict[str, Any]] = None
    ):
        """Mark the start of a process run in the log stream."""
        logger.info("=" * 60)
        logger.info("🚀 NEWSDESK AGGREGATOR STARTED")
        logger.info("=" * 60)
        logger.info(f"Version: {version}")
        logger.info(f"Environment: {ENVIRONMENT}")
        logger.info(f"Debug mode: {DEBUG}")

        if config_summary:
            logger.info("Main configuration:")
            for key, value in config_summary.items():
                logger.info(f"  {key}: {value}")

        if self.log_file_path:
            logger.info(f"Logs written to: {self.log_file_path}")

        logger.info("=" * 60)


_logger_instance: Optional[NewsdeskLogger] = None


def get_logger() -> NewsdeskLogger:
    """Return the process-wide logging configurator, configuring it on first use."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = NewsdeskLogger()
        _logger_instance.configure_logging()
    return _logger_instance


def setup_logging(config: Optional[Dict[str, Any]] = None) -> NewsdeskLogger:
    """
    Configure logging at process start.

    Args:
        config: Optional logging configuration overriding settings.
    """
    global _logger_instance
    if config and (_logger_instance is None or not _logger_instance.is_configured):
        _logger_instance = NewsdeskLogger()
        _logger_instance.configure_logging(config)
        return _logger_instance
    return get_logger()
