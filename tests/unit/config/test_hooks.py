"""
faultline - unit tests for event hook references

File: tests/unit/config/test_hooks.py

Purpose
- Validate coercion of raw hook values into ``FunctionHook`` /
  ``ModuleFunctionHook`` and lazy resolution of module references.
"""

from __future__ import annotations

import json

import pytest

from faultline.config import FunctionHook, InvalidOptionError, ModuleFunctionHook, coerce_hook


def _drop_event(event: object) -> None:
    return None


class _Scrubber:
    def __call__(self, event: dict[str, object]) -> dict[str, object]:
        return {key: value for key, value in event.items() if key != "user"}


def test_module_function_pair_becomes_module_hook() -> None:
    hook = coerce_hook((" my_mod ", "my_fun "), arity=1, key="before_send")

    assert isinstance(hook, ModuleFunctionHook)
    assert hook == ("my_mod", "my_fun")
    assert hook.describe() == "my_mod:my_fun"


def test_existing_hooks_pass_through() -> None:
    module_hook = ModuleFunctionHook("json", "dumps")
    function_hook = FunctionHook(_drop_event)

    assert coerce_hook(module_hook, arity=1, key="before_send") is module_hook
    assert coerce_hook(function_hook, arity=1, key="before_send") is function_hook


def test_function_hook_rechecks_arity() -> None:
    with pytest.raises(InvalidOptionError):
        coerce_hook(FunctionHook(_drop_event), arity=2, key="after_send_event")


def test_callables_are_checked_against_positional_arity() -> None:
    assert isinstance(coerce_hook(_drop_event, arity=1, key="before_send"), FunctionHook)
    assert isinstance(coerce_hook(_Scrubber(), arity=1, key="before_send"), FunctionHook)
    variadic = coerce_hook(lambda *args: None, arity=2, key="after_send_event")
    assert isinstance(variadic, FunctionHook)
    assert isinstance(
        coerce_hook(lambda event, result=None: None, arity=1, key="before_send"), FunctionHook
    )

    with pytest.raises(InvalidOptionError, match="arity 2"):
        coerce_hook(_drop_event, arity=2, key="after_send_event")
    with pytest.raises(InvalidOptionError, match="arity 1"):
        coerce_hook(lambda: None, arity=1, key="before_send")


@pytest.mark.parametrize(
    "value",
    [
        "not_a_function",
        b"my_mod:my_fun",
        42,
        None,
        ("my_mod",),
        ("my_mod", "my_fun", "extra"),
        ("my_mod", ""),
        ("my_mod", 1),
        _Scrubber,
    ],
)
def test_invalid_values_are_rejected(value: object) -> None:
    with pytest.raises(InvalidOptionError) as exc_info:
        coerce_hook(value, arity=1, key="before_send")

    assert exc_info.value.key == "before_send"


def test_function_hook_calls_and_describes_the_callable() -> None:
    hook = FunctionHook(_Scrubber())

    assert hook.resolve() is hook.func
    assert hook({"user": "alice", "level": "error"}) == {"level": "error"}
    assert FunctionHook(_drop_event).describe() == f"{_drop_event.__module__}:_drop_event"


def test_module_hook_resolves_lazily() -> None:
    hook = coerce_hook(("faultline_not_installed_yet", "scrub"), arity=1, key="before_send")

    assert hook == ("faultline_not_installed_yet", "scrub")
    with pytest.raises(ModuleNotFoundError):
        hook.resolve()


def test_module_hook_invokes_resolved_function() -> None:
    hook = ModuleFunctionHook("json", "dumps")

    assert hook.resolve() is json.dumps
    assert hook({"a": 1}) == '{"a": 1}'


def test_module_hook_rejects_non_callable_attributes() -> None:
    with pytest.raises(AttributeError):
        ModuleFunctionHook("json", "missing").resolve()
    with pytest.raises(AttributeError):
        ModuleFunctionHook("json", "decoder").resolve()
