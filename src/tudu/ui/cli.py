"""Command-line interface for tudu."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

import httpx
import structlog

from tudu import __version__
from tudu.config import ConfigLoadError, ConfigValidationError, load_config
from tudu.config.schema import LOG_FORMATS, LOG_LEVELS, MODES, OUTPUT_FORMATS
from tudu.domain.models import TodoItem
from tudu.observability.logging import configure_logging
from tudu.providers.base import ProviderError
from tudu.providers.registry import build_providers, close_providers
from tudu.scanning import ScanError, ScanOptions, scan_path
from tudu.ui.report import ScanReport, format_json, format_standard
from tudu.verification.lookup import verify_todos

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tudu",
        description=(
            "Find TODO/FIXME comments and check their tracking IDs against issue trackers.\n\n"
            "Examples:\n"
            "  tudu src/                     List TODOs under src/\n"
            "  tudu . --verbose              Include line content and attributes\n"
            "  tudu . --format json          Machine-readable report\n"
            "  tudu . --strict               Exit 1 when a tracked ID is missing\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", metavar="PATH", help="File or directory to scan.")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show line content, attributes and lookup details.",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: standard).",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to tudu TOML config (default: ./tudu.toml if present).",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        default=None,
        help="'scan' lists TODOs only; 'validate' also checks tracking IDs (default).",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum concurrent issue lookups.",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout_seconds",
        type=float,
        default=None,
        help="Per-lookup timeout in seconds.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Exit with status 1 when a tracked ID is missing or its lookup failed.",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="Diagnostic log level on stderr (default: WARNING).",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Diagnostic log format (default: console).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    stdout: TextIO | None = None,
    cwd: Path | None = None,
) -> int:
    """Parse argv, run the scan, and return the process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    env = dict(os.environ if environ is None else environ)

    try:
        return _cmd_scan(namespace, environ=env, transport=transport, stdout=stdout, cwd=cwd)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code


def _cmd_scan(
    args: argparse.Namespace,
    *,
    environ: Mapping[str, str],
    transport: httpx.AsyncBaseTransport | None,
    stdout: TextIO | None,
    cwd: Path | None,
) -> int:
    config = _load_effective_config(args, environ=environ, cwd=cwd)
    observability = config["observability"]
    configure_logging(observability["log_level"], observability["log_format"])

    target = Path(args.path)
    if not target.is_absolute() and cwd is not None:
        target = cwd / target
    try:
        result = scan_path(target, options=ScanOptions.from_config(config["scan"]))
    except ScanError as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    report = ScanReport.from_items(result.items, mode=config["mode"])
    if config["mode"] == "validate" and config["providers"]:
        report = asyncio.run(
            _verify_report(result.items, config, environ=environ, transport=transport)
        )
    elif config["mode"] == "validate":
        _logger.info("verification_not_configured", todos=len(result.items))

    output = config["output"]
    if output["format"] == "json":
        rendered = format_json(report)
    else:
        rendered = format_standard(report, verbose=bool(output["verbose"]))
    (stdout if stdout is not None else sys.stdout).write(rendered)

    if args.strict and report.has_problems():
        return 1
    return 0


async def _verify_report(
    items: Sequence[TodoItem],
    config: Mapping[str, Any],
    *,
    environ: Mapping[str, str],
    transport: httpx.AsyncBaseTransport | None,
) -> ScanReport:
    lookup = config["lookup"]
    providers, errors = build_providers(
        config["providers"],
        environ=environ,
        transport=transport,
        timeout_seconds=lookup["timeout_seconds"],
    )
    if not providers:
        return ScanReport.from_items(
            items,
            mode=config["mode"],
            diagnostics=(_all_providers_failed_message(errors),),
        )

    try:
        verified = await verify_todos(
            items,
            providers,
            default_provider=config.get("default_provider"),
            construction_errors=errors,
            max_concurrency=lookup["max_concurrency"],
            timeout_seconds=lookup["timeout_seconds"],
        )
    finally:
        await close_providers(providers)
    return ScanReport(entries=verified, mode=config["mode"], verified=True)


def _all_providers_failed_message(errors: Mapping[str, ProviderError]) -> str:
    details = "; ".join(f"{name}: {errors[name].detail}" for name in sorted(errors))
    return f"verification skipped; no provider could be constructed ({details})"


def _load_effective_config(
    args: argparse.Namespace,
    *,
    environ: Mapping[str, str],
    cwd: Path | None,
) -> dict[str, Any]:
    overrides: dict[str, object] = {
        "mode": args.mode,
        "output.format": args.output_format,
        "output.verbose": True if args.verbose else None,
        "lookup.max_concurrency": args.max_concurrency,
        "lookup.timeout_seconds": args.timeout_seconds,
        "observability.log_level": args.log_level,
        "observability.log_format": args.log_format,
    }
    try:
        return load_config(args.config_path, cli_overrides=overrides, environ=environ, cwd=cwd)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


__all__ = ["CLIError", "build_parser", "run_cli"]
