"""Command-line interface router for faultline."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from faultline.config import (
    ConfigValidationError,
    load_outcome,
    option_specs,
    redact_config,
)
from faultline.observability.logging import setup_logging, shutdown_logging
from faultline.ui.render import CLIRenderer, create_renderer


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Usage error raised by a command handler, carrying its exit code."""

    message: str
    exit_code: int = 2

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the ``faultline`` argument parser with one subcommand per action."""

    parser = argparse.ArgumentParser(
        prog="faultline",
        description=(
            "faultline - validate error-reporting client configuration.\n\n"
            "Common workflows:\n"
            "  faultline check                      Validate env + ./faultline.toml\n"
            "  faultline show --json                Print the redacted effective config\n"
            "  faultline defaults                   List every option and its default\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a TOML/YAML options file (default: ./faultline.toml if present).",
    )
    common.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override one option; VALUE is parsed as JSON when possible.",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Emit debug logs (JSON lines) on stderr.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Plain output without colors (NO_COLOR in the environment does the same).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Validate the effective configuration",
    )
    check_parser.set_defaults(handler=_cmd_check)

    show_parser = subparsers.add_parser(
        "show",
        parents=[common],
        help="Print the redacted effective configuration",
    )
    show_parser.add_argument(
        "--json", action="store_true", help="Print sorted JSON instead of a table"
    )
    show_parser.set_defaults(handler=_cmd_show)

    defaults_parser = subparsers.add_parser(
        "defaults",
        parents=[common],
        help="List every option with its shape, default, and env var",
    )
    defaults_parser.add_argument(
        "--json", action="store_true", help="Print sorted JSON instead of a table"
    )
    defaults_parser.set_defaults(handler=_cmd_defaults)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Dispatch ``argv`` to its command handler and return the exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    if getattr(namespace, "verbose", False):
        setup_logging("DEBUG")
    try:
        return int(handler(namespace))
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        if getattr(namespace, "verbose", False):
            shutdown_logging()


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace) -> int:
    renderer = _renderer_for(args)
    try:
        outcome = load_outcome(args.config_path, overrides=_parse_overrides(args.overrides))
    except ConfigValidationError as exc:
        renderer.fail(str(exc))
        return 2

    for item in outcome.diagnostics:
        renderer.warning(item.message)
    renderer.ok("configuration is valid")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    outcome = load_outcome(args.config_path, overrides=_parse_overrides(args.overrides))
    redacted = redact_config(outcome.config)
    renderer = _renderer_for(args)
    for item in outcome.diagnostics:
        renderer.warning(item.message)

    if args.json:
        _emit_json({"command": "show", "config": redacted})
        return 0

    rows = [(key, _render_value(value)) for key, value in redacted.items()]
    renderer.table(("option", "value"), rows, title="Effective configuration")
    return 0


def _cmd_defaults(args: argparse.Namespace) -> int:
    entries: list[dict[str, Any]] = []
    for spec in option_specs():
        default = spec.default_value({}) if spec.replaced_by is None else None
        entries.append(
            {
                "name": spec.name,
                "shape": spec.shape,
                "default": redact_config({spec.name: default})[spec.name],
                "env_var": spec.env_var,
                "deprecated": spec.deprecation is not None,
                "replaced_by": spec.replaced_by,
                "doc": spec.doc,
            }
        )

    if args.json:
        _emit_json({"command": "defaults", "options": entries})
        return 0

    renderer = _renderer_for(args)
    rows = [
        (
            entry["name"] + (" (deprecated)" if entry["deprecated"] else ""),
            entry["shape"],
            _render_value(entry["default"]),
            entry["env_var"] or "-",
        )
        for entry in entries
    ]
    renderer.table(("option", "shape", "default", "env var"), rows, title="Options")
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_overrides(raw_items: Sequence[str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for item in raw_items:
        key, sep, raw_value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise CLIError(f"invalid --set value {item!r}; expected KEY=VALUE")
        try:
            overrides[key] = json.loads(raw_value)
        except json.JSONDecodeError:
            overrides[key] = raw_value
    return overrides


def _render_value(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


def _emit_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, sort_keys=True, indent=2, ensure_ascii=False))


def _renderer_for(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=bool(getattr(args, "no_color", False)))


__all__ = ["CLIError", "build_parser", "run_cli"]
