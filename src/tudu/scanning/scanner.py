"""
tudu — source tree scanner

File: src/tudu/scanning/scanner.py

Purpose
- Walk a file or directory and turn every TODO/FIXME comment line into a
  ``TodoItem`` carrying the parsed annotation.

Functional requirements
- A comment marker (``//``, ``/*``, ``#``, ``<!--``) followed by TODO or FIXME
  selects a line; matching is case-insensitive unless configured otherwise.
- Only known source extensions are scanned during a walk, plus ``include`` globs.
  A file passed explicitly is always scanned.
- Tool/VCS directories, hidden entries and ignore-file matches are skipped.
- Files are visited in sorted order so results are deterministic.

Non-functional requirements
- An unreadable file inside a walk is logged and skipped; an explicit
  unreadable file is a ``ScanError``.
"""

from __future__ import annotations

import fnmatch
import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import structlog

from tudu.annotations.parser import parse_annotation
from tudu.constants import SCANNED_EXTENSIONS
from tudu.domain.models import TodoItem
from tudu.scanning.ignore import IgnoreRules, load_ignore_rules

_logger = structlog.get_logger(__name__)

_MARKER_LINE_PATTERN: Final[str] = r"(//|/\*|#|<!--)\s*(TODO|FIXME)"
MARKER_LINE_RE: Final[re.Pattern[str]] = re.compile(_MARKER_LINE_PATTERN, re.IGNORECASE)
_MARKER_LINE_CASE_SENSITIVE_RE: Final[re.Pattern[str]] = re.compile(_MARKER_LINE_PATTERN)

_ALWAYS_IGNORED_DIRS: Final[frozenset[str]] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "venv",
        "node_modules",
        "target",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".hypothesis",
        ".tox",
        ".nox",
        ".cache",
    }
)


class ScanError(RuntimeError):
    """The requested path cannot be scanned."""

    def __init__(self, message: str, *, path: Path) -> None:
        self.path = path
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class ScanOptions:
    ignore: tuple[str, ...] = ()
    include: tuple[str, ...] = ()
    match_case_insensitive: bool = True

    @classmethod
    def from_config(cls, scan_config: Mapping[str, object]) -> ScanOptions:
        ignore = scan_config.get("ignore", ())
        include = scan_config.get("include", ())
        return cls(
            ignore=_as_patterns(ignore),
            include=_as_patterns(include),
            match_case_insensitive=bool(scan_config.get("match_case_insensitive", True)),
        )

    @property
    def marker_pattern(self) -> re.Pattern[str]:
        if self.match_case_insensitive:
            return MARKER_LINE_RE
        return _MARKER_LINE_CASE_SENSITIVE_RE


@dataclass(frozen=True, slots=True)
class ScanResult:
    root: Path
    items: tuple[TodoItem, ...] = ()
    scanned_files: tuple[Path, ...] = ()
    skipped_files: tuple[Path, ...] = ()

    @property
    def file_count(self) -> int:
        return len({item.file_path for item in self.items})


def should_scan_file(rel_path: str, include: Sequence[str] = ()) -> bool:
    """Known source extension, or a match for one of the ``include`` globs."""

    name = rel_path.rsplit("/", 1)[-1]
    _, dot, extension = name.rpartition(".")
    if dot and extension in SCANNED_EXTENSIONS:
        return True
    for pattern in include:
        target = rel_path if "/" in pattern else name
        if fnmatch.fnmatchcase(target, pattern.strip("/")):
            return True
    return False


def find_todos(
    text: str, file_path: Path, *, pattern: re.Pattern[str] = MARKER_LINE_RE
) -> list[TodoItem]:
    items: list[TodoItem] = []
    lines = text.split("\n")
    if lines and not lines[-1]:
        lines.pop()
    # Only "\n" ends a line; form feeds and U+2028 stay inside it.
    for index, raw_line in enumerate(lines, start=1):
        line = raw_line.removesuffix("\r")
        if pattern.search(line) is None:
            continue
        reference, attributes = parse_annotation(line)
        items.append(
            TodoItem(
                file_path=file_path,
                line_number=index,
                line_content=line.strip(),
                reference=reference,
                attributes=attributes,
            )
        )
    return items


def scan_path(path: Path | str, *, options: ScanOptions | None = None) -> ScanResult:
    """Scan ``path`` (file or directory) for TODO/FIXME comment lines."""

    target = Path(path)
    opts = options if options is not None else ScanOptions()
    if not target.exists():
        raise ScanError(f"path '{target}' does not exist", path=target)

    if target.is_file():
        try:
            text = target.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ScanError(f"cannot read '{target}': {exc.strerror or exc}", path=target) from exc
        found = find_todos(text, target, pattern=opts.marker_pattern)
        _logger.debug("scan_file_done", path=str(target), todos=len(found))
        return ScanResult(root=target, items=tuple(found), scanned_files=(target,))

    if not target.is_dir():
        raise ScanError(f"'{target}' is neither a file nor a directory", path=target)

    rules = load_ignore_rules(target, opts.ignore)
    items: list[TodoItem] = []
    scanned: list[Path] = []
    skipped: list[Path] = []
    for file_path in _collect_files(target, rules=rules, include=opts.include):
        try:
            text = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            _logger.warning("scan_file_unreadable", path=str(file_path), error=str(exc))
            skipped.append(file_path)
            continue
        scanned.append(file_path)
        items.extend(find_todos(text, file_path, pattern=opts.marker_pattern))

    _logger.info(
        "scan_complete",
        root=str(target),
        files=len(scanned),
        skipped=len(skipped),
        todos=len(items),
    )
    return ScanResult(
        root=target,
        items=tuple(items),
        scanned_files=tuple(scanned),
        skipped_files=tuple(skipped),
    )


def _collect_files(root: Path, *, rules: IgnoreRules, include: Sequence[str]) -> list[Path]:
    discovered: list[tuple[str, Path]] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir

        kept_dirs: list[str] = []
        for dirname in sorted(dirnames):
            candidate = f"{rel_dir}/{dirname}" if rel_dir else dirname
            if _is_skipped_dir(dirname) or rules.is_ignored(candidate, is_dir=True):
                continue
            kept_dirs.append(dirname)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            rel_file = f"{rel_dir}/{filename}" if rel_dir else filename
            if rules.is_ignored(rel_file, is_dir=False):
                continue
            if not should_scan_file(rel_file, include):
                continue
            discovered.append((rel_file, current_dir / filename))

    return [path for _, path in sorted(discovered)]


def _as_patterns(value: object) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return ()


def _is_skipped_dir(dirname: str) -> bool:
    if dirname in _ALWAYS_IGNORED_DIRS or dirname.startswith("."):
        return True
    lowered = dirname.lower()
    return lowered.endswith("_cache") or lowered == "caches"


__all__ = [
    "MARKER_LINE_RE",
    "ScanError",
    "ScanOptions",
    "ScanResult",
    "find_todos",
    "scan_path",
    "should_scan_file",
]
