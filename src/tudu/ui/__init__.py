"""User-facing surfaces: CLI and report rendering."""

from tudu.ui.cli import CLIError, build_parser, run_cli
from tudu.ui.report import ScanReport, format_json, format_standard

__all__ = ["CLIError", "ScanReport", "build_parser", "format_json", "format_standard", "run_cli"]
