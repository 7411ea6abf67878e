"""Process boundary for the ``faultline`` CLI: exit codes and failure output."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

from faultline.config.errors import ConfigLoadError, ConfigValidationError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

# Exceptions that mean "the configuration is wrong", wherever they sit in a chain.
_CONFIG_FAILURES: tuple[type[BaseException], ...] = (ConfigLoadError, ConfigValidationError)


class ExitCode(IntEnum):
    """Process exit codes returned by ``faultline``."""

    SUCCESS = 0
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4
    INTERRUPTED = 130


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and translate its outcome into an ``ExitCode`` value."""

    from faultline.ui.cli import run_cli

    try:
        return _as_exit_code(run_cli(argv))
    except SystemExit as exc:
        return _as_exit_code(exc.code)
    except KeyboardInterrupt:
        _stderr("interrupted")
        return int(ExitCode.INTERRUPTED)
    except Exception as exc:  # noqa: BLE001 - CLI boundary normalization.
        if _is_config_failure(exc):
            _stderr(str(exc).strip() or type(exc).__name__)
            return int(ExitCode.CONFIG_ERROR)
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
        return int(ExitCode.INTERNAL_ERROR)


def _as_exit_code(raw_code: object) -> int:
    if raw_code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw_code, int):
        known = {member.value for member in ExitCode}
        return raw_code if raw_code in known else int(ExitCode.INTERNAL_ERROR)
    if isinstance(raw_code, str) and raw_code.strip():
        _stderr(raw_code)
    return int(ExitCode.INTERNAL_ERROR)


def _is_config_failure(exc: BaseException) -> bool:
    return any(isinstance(link, _CONFIG_FAILURES) for link in _chain(exc))


def _chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` followed by its causes/contexts, stopping on cycles."""

    seen: set[int] = set()
    link: BaseException | None = exc
    while link is not None and id(link) not in seen:
        seen.add(id(link))
        yield link
        if link.__cause__ is not None:
            link = link.__cause__
        elif not link.__suppress_context__:
            link = link.__context__
        else:
            link = None


def _stderr(message: str) -> None:
    sys.stderr.write(message.strip() + "\n")


__all__ = ["ExitCode", "cli_entrypoint"]
