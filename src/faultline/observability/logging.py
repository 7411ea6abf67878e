"""
faultline - structured logging.

File: src/faultline/observability/logging.py

Purpose
- Emit faultline's own log records as one JSON object per line on a stream
  (stderr by default), with DSN credentials and secrets masked.

Functional requirements
- A single handler per logger name; installing again replaces the old one.
- Fields passed through ``extra=`` land under ``"fields"``.
- The client ``log_level`` option maps onto a stdlib level.
"""

from __future__ import annotations

import json
import logging
import math
import re
import sys
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import PurePath
from typing import IO, Final

from faultline.constants import LOG_LEVELS, REDACTED

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
LogRedactor = Callable[[JSONValue], JSONValue]

DEFAULT_LOGGER_NAME: Final[str] = "faultline"

_SECRET_KEY_FRAGMENTS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "passphrase",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "cookie",
    "private_key",
)

# scheme://public:secret@ -> keep the public key, mask the secret.
_DSN_USERINFO: Final[re.Pattern[str]] = re.compile(r"(?i)\b(https?://[^\s:/@]+):[^\s@/]+@")
_KEY_VALUE_SECRET: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(api[_-]?key|token|password|secret|authorization)\b(\s*[:=]\s*)[^\s,;]+"
)
_BEARER: Final[re.Pattern[str]] = re.compile(r"(?i)\bbearer\s+[\w.~+/-]+=*")

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    vars(logging.makeLogRecord({}))
) | {"message", "asctime", "taskName"}

_LEVEL_BY_OPTION: Final[Mapping[str, int]] = {
    name: logging.getLevelName(name.upper()) for name in LOG_LEVELS
}

_handlers_lock = threading.Lock()
_handlers: dict[str, logging.Handler] = {}


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Where and how verbosely faultline logs."""

    logger_name: str = DEFAULT_LOGGER_NAME
    level: int | str = "INFO"
    stream: IO[str] | None = None
    redactor: LogRedactor | None = None


class JsonLineFormatter(logging.Formatter):
    """Render a record as a compact, key-sorted JSON object."""

    def __init__(self, *, redactor: LogRedactor | None = None) -> None:
        super().__init__()
        self._redact = redactor or default_log_redactor

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, JSONValue] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": _as_text(self._redact(record.getMessage())),
        }
        fields = {
            key: _to_json(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if fields:
            payload["fields"] = self._redact(fields)
        if record.exc_info:
            payload["exception"] = _as_text(self._redact(self.formatException(record.exc_info)))
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def setup_logging(
    level: int | str = "INFO",
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    stream: IO[str] | None = None,
    redactor: LogRedactor | None = None,
) -> logging.Logger:
    """Install JSON-lines logging on ``logger_name`` and return the logger."""

    return setup_structured_logging(
        LoggingConfig(logger_name=logger_name, level=level, stream=stream, redactor=redactor)
    )


def setup_structured_logging(config: LoggingConfig) -> logging.Logger:
    name = config.logger_name.strip() if isinstance(config.logger_name, str) else ""
    if not name:
        raise ValueError("logger_name must not be empty")
    level = _resolve_level(config.level)

    handler = logging.StreamHandler(config.stream if config.stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JsonLineFormatter(redactor=config.redactor))

    logger = logging.getLogger(name)
    with _handlers_lock:
        for previous in list(logger.handlers):
            logger.removeHandler(previous)
            previous.close()
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
        _handlers[name] = handler
    return logger


def configure_from_options(
    options: Mapping[str, object],
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Install logging at the level named by the client ``log_level`` option."""

    option = str(options.get("log_level", "warning")).lower()
    return setup_logging(
        _LEVEL_BY_OPTION.get(option, logging.WARNING), logger_name=logger_name, stream=stream
    )


def shutdown_logging(logger_name: str = DEFAULT_LOGGER_NAME) -> None:
    """Flush, detach, and close the handler installed for ``logger_name``.

    Propagation to ancestor loggers is restored afterwards.
    """

    with _handlers_lock:
        handler = _handlers.pop(logger_name, None)
        if handler is None:
            return
        logger = logging.getLogger(logger_name)
        logger.removeHandler(handler)
        logger.propagate = True
    handler.flush()
    handler.close()


def default_log_redactor(value: JSONValue) -> JSONValue:
    """Mask values under secret-looking keys and credentials inside strings."""

    if isinstance(value, str):
        return _scrub(value)
    if isinstance(value, list):
        return [default_log_redactor(item) for item in value]
    if isinstance(value, dict):
        return {
            key: REDACTED if _is_secret_key(key) else default_log_redactor(item)
            for key, item in value.items()
        }
    return value


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if isinstance(resolved, int):
            return resolved
    raise ValueError(f"unsupported logging level {level!r}")


def _is_secret_key(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in _SECRET_KEY_FRAGMENTS)


def _scrub(text: str) -> str:
    text = _DSN_USERINFO.sub(rf"\1:{REDACTED}@", text)
    text = _KEY_VALUE_SECRET.sub(rf"\1\2{REDACTED}", text)
    return _BEARER.sub(f"Bearer {REDACTED}", text)


def _as_text(value: JSONValue) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _to_json(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_json(item) for item in value]
    return repr(value)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "JSONScalar",
    "JSONValue",
    "JsonLineFormatter",
    "LogRedactor",
    "LoggingConfig",
    "configure_from_options",
    "default_log_redactor",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
