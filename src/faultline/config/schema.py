"""
faultline - option table and validation pass.

File: src/faultline/config/schema.py

Purpose
- Define the authoritative option table (shape, default, env source, deprecation)
  and the validation pass that turns raw options into an immutable ``ClientConfig``.

What should be included in this file
- ``OptionSpec`` declarations, one per recognized key, in declaration order.
- Shape checks for strings, DSNs, enums, ranges, pattern lists, module
  capabilities, and callable references.
- Deprecated-alias resolution returning advisory diagnostics instead of writing
  to a global stream.
- Redaction rules for logs and CLI output.

Functional requirements
- Unknown keys are reported together; shape violations fail fast on the first key.
- Explicit options win over environment variables, which win over defaults.
- A deprecated alias and its replacement can never both be configured.

Non-functional requirements
- Validation is a pure, synchronous, in-memory computation.
"""

from __future__ import annotations

import importlib
import logging
import math
import os
import re
import warnings
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType, ModuleType
from typing import Any, Final

from faultline.config.dsn import Dsn
from faultline.config.errors import (
    ConfigValidationError,
    ConfigValidationIssue,
    ConflictingOptionsError,
    DeprecatedOptionWarning,
    InvalidOptionError,
    UnknownOptionsError,
)
from faultline.config.hooks import FunctionHook, ModuleFunctionHook, coerce_hook
from faultline.constants import (
    ALL_ENVIRONMENTS,
    DEFAULT_ENVIRONMENT_NAME,
    DEFAULT_SOURCE_CODE_EXCLUDE_PATTERNS,
    DEFAULT_SOURCE_CODE_PATH_PATTERN,
    DSN_ENV_VAR,
    ENVIRONMENT_ENV_VAR,
    LOG_LEVELS,
    PLATFORM_RELEASE_ENV_VARS,
    REDACTED,
    RELEASE_ENV_VAR,
    SEND_RESULTS,
)

logger = logging.getLogger(__name__)

ShapeCheck = Callable[[str, object], Any]
DefaultFactory = Callable[[Mapping[str, str]], Any]

_SENSITIVE_KEY_TOKENS: Final[frozenset[str]] = frozenset(
    {"secret", "token", "password", "passwd", "apikey", "credential", "credentials", "auth"}
)
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """Static declaration of one configuration key."""

    name: str
    shape: str
    check: ShapeCheck
    default: Any = None
    default_factory: DefaultFactory | None = None
    env_var: str | None = None
    replaced_by: str | None = None
    deprecation: str | None = None
    doc: str = ""

    @property
    def is_alias(self) -> bool:
        return self.replaced_by is not None

    def default_value(self, environ: Mapping[str, str]) -> Any:
        if self.default_factory is not None:
            return self.default_factory(environ)
        return self.default


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Advisory notice produced while validating (never fatal)."""

    key: str
    message: str
    replacement: str | None = None


def _detached(value: Any) -> Any:
    """Copy list and dict values so callers never hold the record's own containers."""

    if isinstance(value, list):
        return [_detached(item) for item in value]
    if isinstance(value, dict):
        return {key: _detached(item) for key, item in value.items()}
    return value


class ClientConfig(Mapping[str, Any]):
    """Immutable, fully validated set of option values."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values: Mapping[str, Any] = MappingProxyType(
            {key: _detached(value) for key, value in values.items()}
        )

    def __getitem__(self, key: str) -> Any:
        return _detached(self._values[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ClientConfig({redact_config(self)!r})"

    def replace(self, **changes: Any) -> ClientConfig:
        """Return a new record with ``changes`` applied; values must already be validated."""

        unknown = [key for key in changes if key not in self._values]
        if unknown:
            raise UnknownOptionsError(unknown)
        merged = dict(self._values)
        merged.update(changes)
        return ClientConfig(merged)

    def as_dict(self) -> dict[str, Any]:
        return {key: _detached(value) for key, value in self._values.items()}


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of a validation pass: the record plus advisory diagnostics."""

    config: ClientConfig
    diagnostics: tuple[Diagnostic, ...] = ()


# --------------------------------------------------------------------------- shape checks


def _check_any(key: str, value: object) -> object:
    return value


def _optional(check: ShapeCheck) -> ShapeCheck:
    def checked(key: str, value: object) -> object:
        if value is None:
            return None
        return check(key, value)

    return checked


def _check_str(key: str, value: object) -> str:
    if not isinstance(value, str):
        raise InvalidOptionError(key, value, "a string")
    return value


def _check_non_empty_str(key: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidOptionError(key, value, "a non-empty string")
    return value


def _check_dsn(key: str, value: object) -> str:
    Dsn.parse(value)
    assert isinstance(value, str)
    return value.strip()


def _check_bool(key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise InvalidOptionError(key, value, "a boolean")
    return value


def _int_check(*, minimum: int) -> ShapeCheck:
    def checked(key: str, value: object) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            raise InvalidOptionError(key, value, f"an integer >= {minimum}")
        return value

    return checked


def _float_range_check(*, minimum: float, maximum: float) -> ShapeCheck:
    def checked(key: str, value: object) -> float:
        expected = f"a float between {minimum} and {maximum}"
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidOptionError(key, value, expected)
        parsed = float(value)
        if not math.isfinite(parsed) or not minimum <= parsed <= maximum:
            raise InvalidOptionError(key, value, expected)
        return parsed

    return checked


def _enum_check(allowed_values: tuple[str, ...]) -> ShapeCheck:
    expected = "one of: " + ", ".join(allowed_values)

    def checked(key: str, value: object) -> str:
        if isinstance(value, Enum):
            value = value.value
        if not isinstance(value, str) or value.strip().lower() not in allowed_values:
            raise InvalidOptionError(key, value, expected)
        return value.strip().lower()

    return checked


def _check_str_mapping(key: str, value: object) -> dict[str, Any]:
    if not isinstance(value, Mapping) or not all(isinstance(item, str) for item in value):
        raise InvalidOptionError(key, value, "a mapping with string keys")
    return dict(value)


def _check_pattern_list(key: str, value: object) -> list[re.Pattern[str]]:
    if not isinstance(value, list) or not all(isinstance(item, re.Pattern) for item in value):
        raise InvalidOptionError(
            key,
            value,
            "a list of compiled regular expressions",
            message=(
                f"invalid list in {key!r} option: expected a list of compiled "
                f"regular expressions (re.compile(...)), got: {value!r}"
            ),
        )
    return list(value)


def _check_environment_list(key: str, value: object) -> list[str] | str:
    if value == ALL_ENVIRONMENTS:
        return ALL_ENVIRONMENTS
    expected = f"a list of environment names or {ALL_ENVIRONMENTS!r}"
    if not isinstance(value, list):
        raise InvalidOptionError(key, value, expected)
    normalized: list[str] = []
    for item in value:
        if isinstance(item, Enum):
            item = item.value
        if not isinstance(item, str):
            raise InvalidOptionError(key, value, expected)
        normalized.append(item)
    return normalized


def _check_path_list(key: str, value: object) -> list[str]:
    expected = "a non-empty list of paths"
    if not isinstance(value, list) or not value:
        raise InvalidOptionError(key, value, expected)
    normalized: list[str] = []
    for item in value:
        if not isinstance(item, (str, os.PathLike)):
            raise InvalidOptionError(key, value, expected)
        normalized.append(os.fspath(item))
    return normalized


def _hook_check(*, arity: int) -> ShapeCheck:
    def checked(key: str, value: object) -> FunctionHook | ModuleFunctionHook:
        return coerce_hook(value, arity=arity, key=key)

    return checked


def _module_check(*capabilities: str) -> ShapeCheck:
    expected = "a module exposing " + " and ".join(f"{name}()" for name in capabilities)

    def checked(key: str, value: object) -> object:
        target = value
        if isinstance(value, str):
            target = _import_reference(key, value, expected)
        if isinstance(target, (str, bytes, int, float, bool)) or target is None:
            raise InvalidOptionError(key, value, expected)
        if not all(callable(getattr(target, name, None)) for name in capabilities):
            raise InvalidOptionError(key, value, expected)
        return target

    return checked


def _import_reference(key: str, reference: str, expected: str) -> object:
    module_name, _, attribute = reference.strip().partition(":")
    try:
        target: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidOptionError(key, reference, expected) from exc
    if attribute:
        target = getattr(target, attribute, None)
        if target is None:
            raise InvalidOptionError(key, reference, expected)
    return target


# --------------------------------------------------------------------------- defaults


def _env_value(environ: Mapping[str, str], name: str) -> str | None:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _default_release(environ: Mapping[str, str]) -> str | None:
    for name in PLATFORM_RELEASE_ENV_VARS:
        value = _env_value(environ, name)
        if value is not None:
            return value
    return None


def _default_json_library(environ: Mapping[str, str]) -> ModuleType:
    return importlib.import_module("json")


def _default_exclude_patterns(environ: Mapping[str, str]) -> list[re.Pattern[str]]:
    return [re.compile(pattern) for pattern in DEFAULT_SOURCE_CODE_EXCLUDE_PATTERNS]


def _default_root_paths(environ: Mapping[str, str]) -> list[str]:
    return [os.getcwd()]


def _empty_dict(environ: Mapping[str, str]) -> dict[str, Any]:
    return {}


# --------------------------------------------------------------------------- option table

OPTION_SPECS: Final[tuple[OptionSpec, ...]] = (
    OptionSpec(
        name="dsn",
        shape="DSN string or None",
        check=_optional(_check_dsn),
        env_var=DSN_ENV_VAR,
        doc="Collector connection string; reporting is disabled when unset.",
    ),
    OptionSpec(
        name="environment_name",
        shape="non-empty string",
        check=_check_non_empty_str,
        default=DEFAULT_ENVIRONMENT_NAME,
        env_var=ENVIRONMENT_ENV_VAR,
        doc="Environment tag attached to every event.",
    ),
    OptionSpec(
        name="included_environments",
        shape=f"list of environment names or {ALL_ENVIRONMENTS!r}",
        check=_check_environment_list,
        default=ALL_ENVIRONMENTS,
        deprecation=(
            "'included_environments' option is deprecated; set 'dsn' only in the "
            "environments that should report events instead."
        ),
        doc="Deprecated allow-list of environments that report events.",
    ),
    OptionSpec(
        name="release",
        shape="string or None",
        check=_optional(_check_str),
        default_factory=_default_release,
        env_var=RELEASE_ENV_VAR,
        doc="Release identifier; falls back to platform build identifiers.",
    ),
    OptionSpec(
        name="server_name",
        shape="string or None",
        check=_optional(_check_str),
        doc="Host name reported with events.",
    ),
    OptionSpec(
        name="sample_rate",
        shape="float in [0.0, 1.0]",
        check=_float_range_check(minimum=0.0, maximum=1.0),
        default=1.0,
        doc="Fraction of events that are sent.",
    ),
    OptionSpec(
        name="send_result",
        shape="one of: " + ", ".join(SEND_RESULTS),
        check=_enum_check(SEND_RESULTS),
        default="none",
        doc="Whether sending waits for the collector response.",
    ),
    OptionSpec(
        name="send_max_attempts",
        shape="integer >= 1",
        check=_int_check(minimum=1),
        default=4,
        doc="Delivery attempts per event.",
    ),
    OptionSpec(
        name="max_breadcrumbs",
        shape="integer >= 0",
        check=_int_check(minimum=0),
        default=100,
        doc="Breadcrumbs kept per process.",
    ),
    OptionSpec(
        name="dedup_events",
        shape="boolean",
        check=_check_bool,
        default=True,
        doc="Drop events identical to one sent moments earlier.",
    ),
    OptionSpec(
        name="tags",
        shape="mapping with string keys",
        check=_check_str_mapping,
        default_factory=_empty_dict,
        doc="Global tags attached to every event.",
    ),
    OptionSpec(
        name="before_send",
        shape="function of arity 1 or (module, function_name) tuple, or None",
        check=_optional(_hook_check(arity=1)),
        doc="Hook that may rewrite or drop an event before it is sent.",
    ),
    OptionSpec(
        name="before_send_event",
        shape="function of arity 1 or (module, function_name) tuple",
        check=_optional(_hook_check(arity=1)),
        replaced_by="before_send",
        deprecation="'before_send_event' option is deprecated. Use 'before_send' instead.",
        doc="Deprecated alias of 'before_send'.",
    ),
    OptionSpec(
        name="after_send_event",
        shape="function of arity 2 or (module, function_name) tuple, or None",
        check=_optional(_hook_check(arity=2)),
        doc="Hook called with the event and the send result.",
    ),
    OptionSpec(
        name="filter",
        shape="object exposing exclude_exception(), or None",
        check=_optional(_module_check("exclude_exception")),
        doc="Decides which exceptions are never reported.",
    ),
    OptionSpec(
        name="json_library",
        shape="module exposing dumps() and loads()",
        check=_module_check("dumps", "loads"),
        default_factory=_default_json_library,
        doc="Codec used to encode event payloads.",
    ),
    OptionSpec(
        name="log_level",
        shape="one of: " + ", ".join(LOG_LEVELS),
        check=_enum_check(LOG_LEVELS),
        default="warning",
        doc="Level of the client's own log messages.",
    ),
    OptionSpec(
        name="context_lines",
        shape="integer >= 1",
        check=_int_check(minimum=1),
        default=3,
        doc="Source lines captured around each frame.",
    ),
    OptionSpec(
        name="enable_source_code_context",
        shape="boolean",
        check=_check_bool,
        default=False,
        doc="Attach source context to stack frames.",
    ),
    OptionSpec(
        name="root_source_code_paths",
        shape="non-empty list of paths",
        check=_check_path_list,
        default_factory=_default_root_paths,
        doc="Roots scanned for source files.",
    ),
    OptionSpec(
        name="source_code_path_pattern",
        shape="glob string",
        check=_check_str,
        default=DEFAULT_SOURCE_CODE_PATH_PATTERN,
        doc="Glob selecting source files under the roots.",
    ),
    OptionSpec(
        name="source_code_exclude_patterns",
        shape="list of compiled regular expressions",
        check=_check_pattern_list,
        default_factory=_default_exclude_patterns,
        doc="Paths matching any pattern are skipped.",
    ),
    OptionSpec(
        name="report_deps",
        shape="boolean",
        check=_check_bool,
        default=True,
        doc="Report installed distributions with events.",
    ),
    OptionSpec(
        name="test_mode",
        shape="boolean",
        check=_check_bool,
        default=False,
        doc="Collect events in memory instead of sending them.",
    ),
    OptionSpec(
        name="integrations",
        shape="any",
        check=_check_any,
        default_factory=_empty_dict,
        doc="Free-form settings for third-party integrations.",
    ),
)

_SPECS_BY_NAME: Final[Mapping[str, OptionSpec]] = MappingProxyType(
    {spec.name: spec for spec in OPTION_SPECS}
)


def option_specs() -> tuple[OptionSpec, ...]:
    """Return every declared option, deprecated aliases included."""

    return OPTION_SPECS


def get_option_spec(key: str) -> OptionSpec:
    spec = _SPECS_BY_NAME.get(key)
    if spec is None:
        raise UnknownOptionsError((key,))
    return spec


# --------------------------------------------------------------------------- validation


def validate(
    options: Mapping[str, object] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ValidationOutcome:
    """Validate ``options`` merged with environment values and defaults.

    Unknown keys are collected and reported together. Every other failure
    raises on the first offending key, in declaration order.
    """

    supplied = _as_options(options)
    env = os.environ if environ is None else environ

    unknown = [key for key in supplied if key not in _SPECS_BY_NAME]
    if unknown:
        raise UnknownOptionsError(unknown)

    diagnostics: list[Diagnostic] = []
    resolved = _resolve_aliases(supplied, diagnostics)

    values: dict[str, Any] = {}
    for spec in OPTION_SPECS:
        if spec.is_alias:
            continue
        if spec.name in resolved:
            raw = resolved[spec.name]
            if spec.deprecation is not None:
                diagnostics.append(Diagnostic(key=spec.name, message=spec.deprecation))
        elif spec.env_var is not None and _env_value(env, spec.env_var) is not None:
            raw = _env_value(env, spec.env_var)
        else:
            raw = spec.default_value(env)
        values[spec.name] = spec.check(spec.name, raw)

    config = ClientConfig(values)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("configuration validated", extra={"config": redact_config(config)})
    return ValidationOutcome(config=config, diagnostics=tuple(diagnostics))


def validate_and_warn(
    options: Mapping[str, object] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """Validate and surface diagnostics as ``DeprecatedOptionWarning``s."""

    outcome = validate(options, environ=environ)
    surface_diagnostics(outcome.diagnostics, stacklevel=3)
    return outcome.config


def validate_option(key: str, value: object) -> tuple[str, Any, tuple[Diagnostic, ...]]:
    """Validate a single option; aliases are resolved to their current key."""

    spec = get_option_spec(key)
    diagnostics: list[Diagnostic] = []
    if spec.replaced_by is not None:
        assert spec.deprecation is not None
        diagnostics.append(
            Diagnostic(key=spec.name, message=spec.deprecation, replacement=spec.replaced_by)
        )
        spec = get_option_spec(spec.replaced_by)
    elif spec.deprecation is not None:
        diagnostics.append(Diagnostic(key=spec.name, message=spec.deprecation))
    return spec.name, spec.check(spec.name, value), tuple(diagnostics)


def surface_diagnostics(diagnostics: tuple[Diagnostic, ...], *, stacklevel: int = 2) -> None:
    """Emit diagnostics through ``warnings`` and the config logger."""

    for item in diagnostics:
        logger.warning(item.message, extra={"option": item.key})
        warnings.warn(item.message, DeprecatedOptionWarning, stacklevel=stacklevel)


def default_options(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return the defaults as a plain dict (environment applied)."""

    return validate({}, environ=environ).config.as_dict()


def _as_options(options: Mapping[str, object] | None) -> dict[str, object]:
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise ConfigValidationError(
            (
                ConfigValidationIssue(
                    key="<root>",
                    message=f"options must be a mapping, got {type(options).__name__}",
                ),
            )
        )
    return dict(options)


def _resolve_aliases(
    supplied: Mapping[str, object], diagnostics: list[Diagnostic]
) -> dict[str, object]:
    resolved = dict(supplied)
    for spec in OPTION_SPECS:
        if spec.replaced_by is None or spec.name not in resolved:
            continue
        if spec.replaced_by in resolved:
            raise ConflictingOptionsError(spec.replaced_by, spec.name)
        resolved[spec.replaced_by] = resolved.pop(spec.name)
        assert spec.deprecation is not None
        diagnostics.append(
            Diagnostic(key=spec.name, message=spec.deprecation, replacement=spec.replaced_by)
        )
    return resolved


# --------------------------------------------------------------------------- redaction


def redact_config(config: Mapping[str, object]) -> dict[str, Any]:
    """Return a deterministic, JSON-friendly representation safe for logs."""

    out: dict[str, Any] = {}
    for key, value in config.items():
        if key == "dsn" and isinstance(value, str):
            out[key] = Dsn.parse(value).redacted()
        else:
            out[key] = _redact_value(value, parent_key=key)
    return out


def _redact_value(value: object, parent_key: str | None) -> object:
    if parent_key is not None and _looks_sensitive_key(parent_key):
        return REDACTED
    if isinstance(value, (FunctionHook, ModuleFunctionHook)):
        return value.describe()
    if isinstance(value, ModuleType):
        return value.__name__
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, Mapping):
        ordered = sorted(value.items(), key=lambda pair: str(pair[0]))
        return {str(key): _redact_value(item, str(key)) for key, item in ordered}
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, None) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


def _looks_sensitive_key(key: str) -> bool:
    tokens = tuple(token for token in _NON_ALNUM.split(key.lower()) if token)
    return any(token in _SENSITIVE_KEY_TOKENS for token in tokens) or "api_key" in key.lower()


__all__ = [
    "ClientConfig",
    "Diagnostic",
    "OPTION_SPECS",
    "OptionSpec",
    "ValidationOutcome",
    "default_options",
    "get_option_spec",
    "option_specs",
    "redact_config",
    "surface_diagnostics",
    "validate",
    "validate_and_warn",
    "validate_option",
]
