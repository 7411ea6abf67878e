"""
faultline - option sources.

File: src/faultline/config/loader.py

Purpose
- Load client options from an options file and merge them with explicit
  overrides before running the validation pass.

What should be included in this file
- Precedence logic: explicit overrides > file > environment (FAULTLINE_) > defaults.
- TOML loading via ``tomllib`` and YAML loading via ``yaml.safe_load``.
- Coercion of textual spellings used in files and on the command line
  (pattern strings, hook references) into the in-process shapes the validator
  expects.
- Redacted deterministic dump of the effective config.

Functional requirements
- An explicitly named file must exist; the implicit ``faultline.toml`` is optional.
- Overriding a key also overrides its deprecated alias coming from the file.
"""

from __future__ import annotations

import json
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

import yaml

from faultline.config.errors import ConfigLoadError
from faultline.config.schema import (
    ClientConfig,
    ValidationOutcome,
    option_specs,
    redact_config,
    surface_diagnostics,
    validate,
)

DEFAULT_CONFIG_FILE: Final[str] = "faultline.toml"
OPTIONS_SECTION: Final[str] = "faultline"

_YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})
_HOOK_KEYS: Final[frozenset[str]] = frozenset(
    {"before_send", "before_send_event", "after_send_event"}
)
_PATTERN_KEYS: Final[frozenset[str]] = frozenset({"source_code_exclude_patterns"})


def load_config(
    config_path: str | Path | None = None,
    *,
    overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """Load the effective config: overrides > file > environment > defaults."""

    outcome = load_outcome(config_path, overrides=overrides, environ=environ)
    surface_diagnostics(outcome.diagnostics, stacklevel=3)
    return outcome.config


def load_outcome(
    config_path: str | Path | None = None,
    *,
    overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ValidationOutcome:
    """Like ``load_config`` but returns diagnostics instead of emitting them."""

    explicit_path = config_path is not None
    resolved_path = _resolve_config_path(config_path)
    file_options: dict[str, Any] = {}
    if explicit_path or resolved_path.exists():
        file_options = load_options_file(resolved_path)

    coerced = {key: _coerce_file_value(key, value) for key, value in (overrides or {}).items()}
    merged = _merge_sources(file_options, coerced)
    return validate(merged, environ=environ)


def load_options_file(path: str | Path) -> dict[str, Any]:
    """Read the options section of a TOML or YAML file."""

    resolved = Path(path)
    if not resolved.exists():
        raise ConfigLoadError(f"config file not found: {resolved}")

    if resolved.suffix.lower() in _YAML_SUFFIXES:
        parsed = _load_yaml_file(resolved)
    else:
        parsed = _load_toml_file(resolved)

    section = _select_section(parsed, resolved)
    return {key: _coerce_file_value(key, value) for key, value in section.items()}


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return deterministic JSON dump of the redacted effective config."""

    return json.dumps(
        redact_config(config), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path) -> object:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _load_yaml_file(path: Path) -> object:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"invalid YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _select_section(parsed: object, path: Path) -> Mapping[str, object]:
    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise ConfigLoadError(f"config root must be an object: {path}")

    if path.name == "pyproject.toml":
        tool = parsed.get("tool")
        section = tool.get(OPTIONS_SECTION, {}) if isinstance(tool, Mapping) else {}
    else:
        section = parsed.get(OPTIONS_SECTION, parsed)

    if not isinstance(section, Mapping):
        raise ConfigLoadError(f"[{OPTIONS_SECTION}] section must be an object: {path}")
    for key in section:
        if not isinstance(key, str):
            raise ConfigLoadError(f"option names must be strings, got {key!r} in {path}")
    return section


def _coerce_file_value(key: str, value: object) -> object:
    if key in _HOOK_KEYS:
        if isinstance(value, str) and ":" in value:
            module, _, function = value.partition(":")
            return (module, function)
        if isinstance(value, list) and len(value) == 2:
            return tuple(value)
    if key in _PATTERN_KEYS and isinstance(value, list):
        try:
            return [re.compile(item) if isinstance(item, str) else item for item in value]
        except re.error as exc:
            raise ConfigLoadError(f"invalid regular expression in {key!r}: {exc}") from exc
    return value


def _merge_sources(
    file_options: Mapping[str, object], overrides: Mapping[str, object]
) -> dict[str, object]:
    merged = dict(file_options)
    for spec in option_specs():
        if spec.replaced_by is None:
            continue
        if spec.name in overrides or spec.replaced_by in overrides:
            merged.pop(spec.name, None)
            merged.pop(spec.replaced_by, None)
    merged.update(overrides)
    return merged


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "OPTIONS_SECTION",
    "dump_effective_config",
    "load_config",
    "load_options_file",
    "load_outcome",
]
