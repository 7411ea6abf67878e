"""Stable constants shared across the faultline configuration layer."""

from __future__ import annotations

from typing import Final

# Environment variables consulted when the matching option is absent.
DSN_ENV_VAR: Final[str] = "FAULTLINE_DSN"
RELEASE_ENV_VAR: Final[str] = "FAULTLINE_RELEASE"
ENVIRONMENT_ENV_VAR: Final[str] = "FAULTLINE_ENVIRONMENT"

# Build identifiers exported by hosting/CI platforms, checked in order when no
# release is configured.
PLATFORM_RELEASE_ENV_VARS: Final[tuple[str, ...]] = (
    "HEROKU_SLUG_COMMIT",
    "SOURCE_VERSION",
    "CODEBUILD_RESOLVED_SOURCE_VERSION",
    "CIRCLE_SHA1",
    "GAE_DEPLOYMENT_ID",
)

DEFAULT_ENVIRONMENT_NAME: Final[str] = "production"
DEFAULT_SOURCE_CODE_PATH_PATTERN: Final[str] = "**/*.py"
DEFAULT_SOURCE_CODE_EXCLUDE_PATTERNS: Final[tuple[str, ...]] = (
    r"/build/",
    r"/site-packages/",
    r"/priv/",
    r"/tests/",
)

ALL_ENVIRONMENTS: Final[str] = "all"
LOG_LEVELS: Final[tuple[str, ...]] = ("debug", "info", "warning", "error", "critical")
SEND_RESULTS: Final[tuple[str, ...]] = ("none", "sync")

REDACTED: Final[str] = "<redacted>"

__all__ = [
    "ALL_ENVIRONMENTS",
    "DEFAULT_ENVIRONMENT_NAME",
    "DEFAULT_SOURCE_CODE_EXCLUDE_PATTERNS",
    "DEFAULT_SOURCE_CODE_PATH_PATTERN",
    "DSN_ENV_VAR",
    "ENVIRONMENT_ENV_VAR",
    "LOG_LEVELS",
    "PLATFORM_RELEASE_ENV_VARS",
    "REDACTED",
    "RELEASE_ENV_VAR",
    "SEND_RESULTS",
]
