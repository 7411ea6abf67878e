"""Module entrypoint for ``python -m faultline``."""

from __future__ import annotations

from faultline.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
