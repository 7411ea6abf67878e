"""Explicit configuration store handed to every consumer of the client config."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from faultline.config.schema import (
    ClientConfig,
    get_option_spec,
    surface_diagnostics,
    validate_and_warn,
    validate_option,
)


class ConfigStore:
    """Mutable holder of the current ``ClientConfig``.

    Writers (``persist``, ``put``, ``restart``) are serialized by a lock; readers
    always see a complete immutable record, so a ``put`` is atomic for the key
    it touches and nothing more.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._config = config if config is not None else validate_and_warn({}, environ=environ)

    def persist(self, config: ClientConfig) -> None:
        """Replace the whole record."""

        if not isinstance(config, ClientConfig):
            raise TypeError(f"expected ClientConfig, got {type(config).__name__}")
        with self._lock:
            self._config = config

    def get(self, key: str) -> Any:
        spec = get_option_spec(key)
        return self._config[spec.replaced_by or spec.name]

    def put(self, key: str, value: object) -> None:
        """Re-validate ``value`` for ``key`` alone and store it.

        The store is left untouched when the key is unknown or the value is invalid.
        """

        resolved_key, validated, diagnostics = validate_option(key, value)
        surface_diagnostics(diagnostics, stacklevel=3)
        with self._lock:
            self._config = self._config.replace(**{resolved_key: validated})

    def restart(self, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Reset to a freshly validated default record."""

        fresh = validate_and_warn({}, environ=environ)
        with self._lock:
            self._config = fresh
        return fresh

    def snapshot(self) -> ClientConfig:
        return self._config

    @property
    def dsn(self) -> str | None:
        return self.get("dsn")

    @property
    def environment_name(self) -> str:
        return self.get("environment_name")

    @property
    def release(self) -> str | None:
        return self.get("release")

    @property
    def sample_rate(self) -> float:
        return self.get("sample_rate")

    @property
    def log_level(self) -> str:
        return self.get("log_level")


__all__ = ["ConfigStore"]
