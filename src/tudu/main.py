"""
tudu — process entrypoint

File: src/tudu/main.py

Purpose
- Run the CLI and turn its result, or the exception that escaped it, into one
  of the documented exit codes.

Exit codes
- 0 success, 1 verification found missing/errored IDs under ``--strict``.
- 2 configuration, usage or scan-path problems.
- 3 a provider error that escaped verification.
- 4 anything else; the traceback goes to stderr.
"""

from __future__ import annotations

import sys
import traceback
from collections.abc import Iterator
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    """Process exit-code contract."""

    SUCCESS = 0
    VERIFICATION_FAILED = 1
    CONFIG_ERROR = 2
    PROVIDER_ERROR = 3
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Entrypoint used by ``python -m tudu`` and the console script."""

    try:
        from tudu.ui.cli import run_cli

        return _as_exit_code(run_cli(argv))
    except SystemExit as exc:
        # argparse exits 0 for --help/--version and 2 for usage errors.
        return _as_exit_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - CLI boundary normalization.
        exit_code = _classify(exc)
        if exit_code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(f"error: {str(exc).strip() or type(exc).__name__}", file=sys.stderr)
        return int(exit_code)


def console_entrypoint() -> None:
    raise SystemExit(cli_entrypoint())


def _as_exit_code(raw_code: object) -> int:
    if raw_code is None:
        return int(ExitCode.SUCCESS)
    try:
        return int(ExitCode(raw_code))
    except (TypeError, ValueError):
        return int(ExitCode.INTERNAL_ERROR)


def _classify(exc: BaseException) -> ExitCode:
    from tudu.config import ConfigLoadError, ConfigValidationError
    from tudu.providers.base import ProviderError
    from tudu.scanning import ScanError

    routes: tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...] = (
        ((ConfigLoadError, ConfigValidationError, ScanError), ExitCode.CONFIG_ERROR),
        ((ProviderError,), ExitCode.PROVIDER_ERROR),
    )
    for cause in _causes(exc):
        for error_types, exit_code in routes:
            if isinstance(cause, error_types):
                return exit_code
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and its explicit or implicit causes, stopping on cycles."""

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


__all__ = ["ExitCode", "cli_entrypoint", "console_entrypoint"]
