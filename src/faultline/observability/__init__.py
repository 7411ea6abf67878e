"""Public observability primitives: structured JSON-lines logging."""

from faultline.observability.logging import (
    DEFAULT_LOGGER_NAME,
    JsonLineFormatter,
    LoggingConfig,
    LogRedactor,
    configure_from_options,
    default_log_redactor,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "DEFAULT_LOGGER_NAME",
    "JsonLineFormatter",
    "LogRedactor",
    "LoggingConfig",
    "configure_from_options",
    "default_log_redactor",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
