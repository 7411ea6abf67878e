"""
faultline - configuration error taxonomy.

File: src/faultline/config/errors.py

Purpose
- Define the structured validation errors raised by the option validation pass.

Functional requirements
- Every error carries machine-readable issues (option key + message).
- Unknown keys are reported together; shape violations carry key, value, and
  expected shape.
- DSN query-string failures are distinguishable from generic DSN failures.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    key: str
    message: str


class ConfigValidationError(ValueError):
    """Base class for every configuration validation failure."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        elif len(self.issues) == 1:
            rendered = self.issues[0].message
        else:
            rendered = "invalid config:\n" + "\n".join(
                f"- {item.key}: {item.message}" for item in self.issues
            )
        super().__init__(rendered)


class UnknownOptionsError(ConfigValidationError):
    """Raised when one or more supplied keys are not recognized options."""

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = tuple(sorted(keys, key=str))
        listed = ", ".join(repr(key) for key in self.keys)
        super().__init__(
            (ConfigValidationIssue(key="<root>", message=f"unknown options [{listed}]"),)
        )


class InvalidOptionError(ConfigValidationError):
    """Raised when a single option value fails its declared shape."""

    def __init__(
        self,
        key: str,
        value: object,
        expected: str,
        *,
        message: str | None = None,
    ) -> None:
        self.key = key
        self.value = value
        self.expected = expected
        if message is None:
            message = f"invalid value for {key!r} option: expected {expected}, got: {value!r}"
        super().__init__((ConfigValidationIssue(key=key, message=message),))


class InvalidDsnError(InvalidOptionError):
    """Raised when the DSN is not a string or cannot be parsed."""

    def __init__(self, value: object, reason: str, *, key: str = "dsn") -> None:
        self.reason = reason
        super().__init__(
            key,
            value,
            "a DSN string such as https://public_key@host/project_id",
            message=f"invalid value for {key!r} option: {reason}, got: {value!r}",
        )


class DsnQueryParametersError(InvalidOptionError):
    """Raised when the DSN carries a query string (old-style transport options)."""

    def __init__(self, value: object, *, key: str = "dsn") -> None:
        super().__init__(
            key,
            value,
            "a DSN without query parameters",
            message=(
                "using a DSN with query parameters is not supported; transport options "
                "must be configured as regular options instead of in the DSN query "
                f"string, got: {value!r}"
            ),
        )


class ConflictingOptionsError(ConfigValidationError):
    """Raised when a deprecated alias and its replacement are both supplied."""

    def __init__(self, current: str, deprecated: str) -> None:
        self.current = current
        self.deprecated = deprecated
        super().__init__(
            (
                ConfigValidationIssue(
                    key=current,
                    message=(
                        f"you cannot configure both {current!r} and {deprecated!r}; "
                        f"{deprecated!r} is deprecated, use only {current!r}"
                    ),
                ),
            )
        )


class ConfigLoadError(ValueError):
    """Raised when an options file cannot be loaded."""


class DeprecatedOptionWarning(FutureWarning):
    """Advisory warning emitted for deprecated option keys."""


__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConflictingOptionsError",
    "DeprecatedOptionWarning",
    "DsnQueryParametersError",
    "InvalidDsnError",
    "InvalidOptionError",
    "UnknownOptionsError",
]
