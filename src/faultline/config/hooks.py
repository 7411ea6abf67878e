"""
faultline - callable references for event hooks.

File: src/faultline/config/hooks.py

Purpose
- Represent the callables configured for ``before_send`` / ``after_send_event``
  as a closed set of variants instead of duck-typed values.

What should be included in this file
- ``FunctionHook``: an in-process callable with a checked positional arity.
- ``ModuleFunctionHook``: a ``(module, function)`` reference resolved lazily.
- ``coerce_hook``: the single entrypoint converting raw option values.

Non-functional requirements
- Resolution of module references must not happen at validation time, so a
  config can name modules that are only importable once the app has booted.
"""

from __future__ import annotations

import importlib
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple, TypeAlias

from faultline.config.errors import InvalidOptionError


@dataclass(frozen=True, slots=True, eq=False)
class FunctionHook:
    """Hook backed by a callable object.

    Compares and hashes like the wrapped callable, so a validated record still
    equals the function the user passed in.
    """

    func: Callable[..., object]

    def resolve(self) -> Callable[..., object]:
        return self.func

    def describe(self) -> str:
        module = getattr(self.func, "__module__", None) or "<unknown>"
        name = getattr(self.func, "__qualname__", None) or type(self.func).__name__
        return f"{module}:{name}"

    def __call__(self, *args: object) -> object:
        return self.func(*args)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FunctionHook):
            return self.func == other.func
        if callable(other):
            return self.func == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.func)


class ModuleFunctionHook(NamedTuple):
    """Hook referenced by module path and function name.

    Being a tuple, it compares equal to the plain ``(module, function)`` pair
    users write in their options.
    """

    module: str
    function: str

    def resolve(self) -> Callable[..., object]:
        target = getattr(importlib.import_module(self.module), self.function, None)
        if not callable(target):
            raise AttributeError(f"{self.module}.{self.function} is not a callable")
        return target

    def describe(self) -> str:
        return f"{self.module}:{self.function}"

    def __call__(self, *args: object) -> object:
        return self.resolve()(*args)


Hook: TypeAlias = FunctionHook | ModuleFunctionHook


def coerce_hook(value: object, *, arity: int, key: str) -> Hook:
    """Convert a raw option value into a ``Hook`` or raise ``InvalidOptionError``."""

    expected = f"a function of arity {arity} or a (module, function_name) tuple"

    if isinstance(value, ModuleFunctionHook):
        return value
    if isinstance(value, FunctionHook):
        if not _accepts_positional(value.func, arity):
            raise InvalidOptionError(key, value.func, expected)
        return value
    if isinstance(value, tuple):
        if len(value) == 2 and all(isinstance(part, str) and part.strip() for part in value):
            module, function = value
            return ModuleFunctionHook(module.strip(), function.strip())
        raise InvalidOptionError(key, value, expected)
    if isinstance(value, (str, bytes, type)) or not callable(value):
        raise InvalidOptionError(key, value, expected)
    if not _accepts_positional(value, arity):
        raise InvalidOptionError(key, value, expected)
    return FunctionHook(value)


def _accepts_positional(func: Callable[..., object], arity: int) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Some builtins expose no signature; nothing to check against.
        return True
    try:
        signature.bind(*([None] * arity))
    except TypeError:
        return False
    return True


__all__ = [
    "FunctionHook",
    "Hook",
    "ModuleFunctionHook",
    "coerce_hook",
]
