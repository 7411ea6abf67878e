"""
faultline - configuration layer of an error-reporting client.

File: src/faultline/__init__.py

Purpose
- Package root. Defines package-level metadata and the small public surface
  most applications need: validate options, hold them in a store.

Functional requirements
- Must not have side effects at import time (no env reads, no logging init).
"""

from faultline.config import (
    ClientConfig,
    ConfigStore,
    ConfigValidationError,
    load_config,
    validate,
    validate_and_warn,
)

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ConfigStore",
    "ConfigValidationError",
    "__version__",
    "load_config",
    "validate",
    "validate_and_warn",
]
