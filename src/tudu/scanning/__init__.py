"""File discovery and TODO line detection."""

from tudu.scanning.ignore import IgnoreRules, load_ignore_rules
from tudu.scanning.scanner import (
    MARKER_LINE_RE,
    ScanError,
    ScanOptions,
    ScanResult,
    find_todos,
    scan_path,
    should_scan_file,
)

__all__ = [
    "IgnoreRules",
    "MARKER_LINE_RE",
    "ScanError",
    "ScanOptions",
    "ScanResult",
    "find_todos",
    "load_ignore_rules",
    "scan_path",
    "should_scan_file",
]
