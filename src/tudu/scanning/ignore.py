"""
tudu — ignore-file rules for directory scans

File: src/tudu/scanning/ignore.py

Purpose
- Decide which paths under a scan root are skipped, from config globs and the
  ``.gitignore`` / ``.tuduignore`` files at the root.

Pattern rules
- ``#`` starts a comment line; blank lines are ignored.
- A pattern without ``/`` matches any single path component (``*.log``, ``build``).
- A pattern containing ``/`` (or starting with one) is anchored at the scan root
  and matched one path component at a time: ``*`` never crosses ``/`` and
  ``**`` spans zero or more directories (``**/foo`` also matches a root ``foo``).
- A trailing ``/`` restricts the pattern to directories.
- ``!`` negation is not supported; such lines are dropped.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import structlog

from tudu.constants import IGNORE_FILENAMES

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class IgnorePattern:
    pattern: str
    anchored: bool
    directory_only: bool
    source: str

    def matches(self, rel_path: str, *, is_dir: bool) -> bool:
        parts = PurePosixPath(rel_path).parts
        if not parts:
            return False
        last = len(parts) - 1
        if self.anchored:
            segments = tuple(segment for segment in self.pattern.split("/") if segment)
            for index in range(len(parts)):
                if self.directory_only and index == last and not is_dir:
                    continue
                if _match_segments(segments, parts[: index + 1]):
                    return True
            return False
        for index, part in enumerate(parts):
            if self.directory_only and index == last and not is_dir:
                continue
            if fnmatch.fnmatchcase(part, self.pattern):
                return True
        return False


def _match_segments(segments: Sequence[str], parts: Sequence[str]) -> bool:
    """Match path components one segment at a time; ``**`` spans any depth."""

    if not segments:
        return not parts
    head, rest = segments[0], segments[1:]
    if head == "**":
        if not rest:
            # Trailing ``**`` matches contents, not the directory itself.
            return len(parts) > 0
        return any(_match_segments(rest, parts[start:]) for start in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatch.fnmatchcase(parts[0], head) and _match_segments(rest, parts[1:])


def parse_pattern(line: str, *, source: str) -> IgnorePattern | None:
    """Parse one ignore line; ``None`` for comments, blanks and unsupported forms."""

    text = line.strip()
    if not text or text.startswith("#"):
        return None
    if text.startswith("!"):
        _logger.debug("ignore_negation_unsupported", source=source, pattern=text)
        return None

    directory_only = text.endswith("/")
    text = text.rstrip("/")
    anchored = "/" in text
    text = text.lstrip("/")
    if not text:
        return None
    return IgnorePattern(
        pattern=text,
        anchored=anchored,
        directory_only=directory_only,
        source=source,
    )


@dataclass(frozen=True, slots=True)
class IgnoreRules:
    patterns: tuple[IgnorePattern, ...] = ()

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, source: str) -> IgnoreRules:
        parsed = (parse_pattern(line, source=source) for line in lines)
        return cls(tuple(pattern for pattern in parsed if pattern is not None))

    def extend(self, other: IgnoreRules) -> IgnoreRules:
        return IgnoreRules(self.patterns + other.patterns)

    def is_ignored(self, rel_path: str, *, is_dir: bool) -> bool:
        return any(pattern.matches(rel_path, is_dir=is_dir) for pattern in self.patterns)


def load_ignore_rules(root: Path, extra_patterns: Sequence[str] = ()) -> IgnoreRules:
    """Combine ``extra_patterns`` with the ignore files found directly under ``root``."""

    rules = IgnoreRules.from_lines(extra_patterns, source="config")
    for filename in IGNORE_FILENAMES:
        candidate = root / filename
        if not candidate.is_file():
            continue
        try:
            text = candidate.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            _logger.warning("ignore_file_unreadable", path=str(candidate), error=str(exc))
            continue
        rules = rules.extend(IgnoreRules.from_lines(text.splitlines(), source=filename))
    return rules


__all__ = ["IgnorePattern", "IgnoreRules", "load_ignore_rules", "parse_pattern"]
