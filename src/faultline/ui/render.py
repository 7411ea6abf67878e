"""Output rendering for the faultline CLI.

File: src/faultline/ui/render.py

Purpose
- Status lines and option tables for the CLI, drawn with ``rich``.
- Colors are dropped under --no-color or a non-empty NO_COLOR.

Functional requirements
- Output written to a non-terminal stream must stay plain text, so CLI output
  can be piped and asserted on in tests.
"""

from __future__ import annotations

import os
import sys
from typing import IO, TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Sequence


def _wants_color(no_color_flag: bool) -> bool:
    """Color is off when the flag is given or NO_COLOR is non-empty."""

    if no_color_flag:
        return False
    return not os.environ.get("NO_COLOR", "")


class CLIRenderer:
    """Writes results to stdout and failures or warnings to stderr."""

    def __init__(
        self,
        *,
        no_color: bool = False,
        stream: IO[str] | None = None,
        error_stream: IO[str] | None = None,
    ) -> None:
        color = _wants_color(no_color)
        self._console = Console(
            file=stream if stream is not None else sys.stdout,
            no_color=not color,
            highlight=False,
            soft_wrap=True,
        )
        self._error_console = Console(
            file=error_stream if error_stream is not None else sys.stderr,
            no_color=not color,
            highlight=False,
            soft_wrap=True,
        )

    def ok(self, label: str) -> None:
        self._console.print(f"OK  {label}", style="green", markup=False)

    def fail(self, label: str) -> None:
        self._error_console.print(f"FAIL  {label}", style="red", markup=False)

    def warning(self, text: str) -> None:
        self._error_console.print(f"Warning: {text}", style="yellow", markup=False)

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a table; nothing is printed for an empty row set."""

        if not rows:
            return
        table = Table(title=title, show_lines=False, box=None, pad_edge=False)
        for header in headers:
            table.add_column(header, overflow="fold")
        for row in rows:
            table.add_row(*(Text(str(cell)) for cell in row))
        self._console.print(table)


def create_renderer(
    *,
    no_color: bool = False,
    stream: IO[str] | None = None,
    error_stream: IO[str] | None = None,
) -> CLIRenderer:
    """Build the renderer used by CLI command handlers."""

    return CLIRenderer(no_color=no_color, stream=stream, error_stream=error_stream)


__all__ = ["CLIRenderer", "create_renderer"]
