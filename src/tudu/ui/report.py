"""
tudu — report rendering

File: src/tudu/ui/report.py

Purpose
- Render scan and verification results as human text or deterministic JSON.

Functional requirements
- Items are grouped by file in sorted path order; lines keep scan order.
- Text output names the verification status of each tracked ID when verification ran.
- JSON output is stable (sorted keys) and carries a summary block.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from tudu.domain.models import JSONValue, TodoItem, Tracked, render_attributes
from tudu.verification.lookup import CheckStatus, VerifiedTodo

FOLDER_MARK = "\U0001f4c1"


@dataclass(frozen=True, slots=True)
class ReportSummary:
    total: int
    files: int
    tracked: int
    untracked: int
    found: int
    missing: int
    errors: int
    skipped: int

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "total": self.total,
            "files": self.files,
            "tracked": self.tracked,
            "untracked": self.untracked,
            "found": self.found,
            "missing": self.missing,
            "errors": self.errors,
            "skipped": self.skipped,
        }


@dataclass(frozen=True, slots=True)
class ScanReport:
    entries: tuple[VerifiedTodo, ...]
    mode: str = "scan"
    verified: bool = False
    diagnostics: tuple[str, ...] = field(default=())

    @classmethod
    def from_items(
        cls,
        items: Iterable[TodoItem],
        *,
        mode: str = "scan",
        diagnostics: Sequence[str] = (),
    ) -> ScanReport:
        return cls(
            entries=tuple(VerifiedTodo(item=item) for item in items),
            mode=mode,
            verified=False,
            diagnostics=tuple(diagnostics),
        )

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def summary(self) -> ReportSummary:
        checks = [entry.check for entry in self.entries if entry.check is not None]
        tracked = sum(1 for entry in self.entries if isinstance(entry.item.reference, Tracked))
        return ReportSummary(
            total=len(self.entries),
            files=len({entry.item.file_path for entry in self.entries}),
            tracked=tracked,
            untracked=len(self.entries) - tracked,
            found=sum(1 for check in checks if check.status is CheckStatus.FOUND),
            missing=sum(1 for check in checks if check.status is CheckStatus.MISSING),
            errors=sum(1 for check in checks if check.status is CheckStatus.ERROR),
            skipped=sum(1 for check in checks if check.status is CheckStatus.SKIPPED),
        )

    def has_problems(self) -> bool:
        return any(entry.check is not None and entry.check.is_problem for entry in self.entries)

    def to_dict(self) -> dict[str, JSONValue]:
        items: list[JSONValue] = []
        for entry in self.entries:
            payload = entry.item.to_dict()
            payload["check"] = None if entry.check is None else entry.check.to_dict()
            items.append(payload)
        return {
            "mode": self.mode,
            "verified": self.verified,
            "summary": self.summary().to_dict(),
            "items": items,
            "diagnostics": list(self.diagnostics),
        }


def format_standard(report: ScanReport, *, verbose: bool = False) -> str:
    if report.is_empty:
        lines = ["No TODOs found."]
        lines.extend(f"warning: {message}" for message in report.diagnostics)
        return "\n".join(lines) + "\n"

    summary = report.summary()
    lines = ["", f"Found {summary.total} TODOs:"]
    for path, entries in _group_by_file(report.entries):
        lines.append(f"{FOLDER_MARK} {path}:")
        for entry in entries:
            lines.extend(_format_entry(entry, verbose=verbose))
        lines.append("")

    lines.append(f"Total: {summary.total} TODOs across {summary.files} file(s)")
    lines.append(f"Tracked: {summary.tracked}, untracked: {summary.untracked}")
    if report.verified:
        lines.append(
            "Verification: "
            f"found={summary.found} "
            f"missing={summary.missing} "
            f"errors={summary.errors} "
            f"skipped={summary.skipped}"
        )
    lines.extend(f"warning: {message}" for message in report.diagnostics)
    return "\n".join(lines) + "\n"


def format_json(report: ScanReport) -> str:
    return json.dumps(report.to_dict(), sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def _group_by_file(
    entries: Sequence[VerifiedTodo],
) -> list[tuple[str, list[VerifiedTodo]]]:
    grouped: dict[str, list[VerifiedTodo]] = {}
    for entry in entries:
        grouped.setdefault(entry.item.file_path.as_posix(), []).append(entry)
    return [(path, grouped[path]) for path in sorted(grouped)]


def _format_entry(entry: VerifiedTodo, *, verbose: bool) -> list[str]:
    item = entry.item
    head = f"  Line {item.line_number}"
    if entry.check is not None:
        head += f" [{entry.check.identifier}: {entry.check.status.value}]"
    if not verbose:
        return [head]

    lines = [f"{head}: {item.line_content}"]
    if item.attributes:
        lines.append(f"      attributes: {render_attributes(item.attributes)}")
    if entry.check is not None and entry.check.detail:
        lines.append(f"      detail: {entry.check.detail}")
    return lines


__all__ = ["FOLDER_MARK", "ReportSummary", "ScanReport", "format_json", "format_standard"]
