"""
faultline config package public API.

File: src/faultline/config/__init__.py

Purpose
- Export the option table, validation entrypoints, the config store, and the
  public error types.

Non-functional requirements
- Keep import-time surface small and deterministic (no env reads at import).
"""

from faultline.config.dsn import Dsn, parse_dsn
from faultline.config.errors import (
    ConfigLoadError,
    ConfigValidationError,
    ConfigValidationIssue,
    ConflictingOptionsError,
    DeprecatedOptionWarning,
    DsnQueryParametersError,
    InvalidDsnError,
    InvalidOptionError,
    UnknownOptionsError,
)
from faultline.config.hooks import FunctionHook, Hook, ModuleFunctionHook, coerce_hook
from faultline.config.loader import (
    DEFAULT_CONFIG_FILE,
    OPTIONS_SECTION,
    dump_effective_config,
    load_config,
    load_options_file,
    load_outcome,
)
from faultline.config.schema import (
    OPTION_SPECS,
    ClientConfig,
    Diagnostic,
    OptionSpec,
    ValidationOutcome,
    default_options,
    get_option_spec,
    option_specs,
    redact_config,
    surface_diagnostics,
    validate,
    validate_and_warn,
    validate_option,
)
from faultline.config.store import ConfigStore

__all__ = [
    "ClientConfig",
    "ConfigLoadError",
    "ConfigStore",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConflictingOptionsError",
    "DEFAULT_CONFIG_FILE",
    "DeprecatedOptionWarning",
    "Diagnostic",
    "Dsn",
    "DsnQueryParametersError",
    "FunctionHook",
    "Hook",
    "InvalidDsnError",
    "InvalidOptionError",
    "ModuleFunctionHook",
    "OPTIONS_SECTION",
    "OPTION_SPECS",
    "OptionSpec",
    "UnknownOptionsError",
    "ValidationOutcome",
    "coerce_hook",
    "default_options",
    "dump_effective_config",
    "get_option_spec",
    "load_config",
    "load_options_file",
    "load_outcome",
    "option_specs",
    "parse_dsn",
    "redact_config",
    "surface_diagnostics",
    "validate",
    "validate_and_warn",
    "validate_option",
]
