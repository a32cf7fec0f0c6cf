"""Module entrypoint for ``python -m tudu``."""

from __future__ import annotations

from tudu.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
