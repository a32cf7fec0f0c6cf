"""
tudu — unit tests for report rendering

File: tests/unit/ui/test_report.py

Purpose
- Pin the standard text layout and the JSON document shape.
"""

from __future__ import annotations

import json
from pathlib import Path

from tudu.domain.models import AttributeFlag, AttributeText, TodoItem, Tracked, Untracked
from tudu.ui.report import FOLDER_MARK, ScanReport, format_json, format_standard
from tudu.verification.lookup import CheckStatus, IssueCheck, VerifiedTodo


def _untracked(path: str, line: int) -> TodoItem:
    return TodoItem(
        file_path=Path(path),
        line_number=line,
        line_content="# TODO: tidy up",
        reference=Untracked(),
    )


def _tracked(path: str, line: int, identifier: str) -> TodoItem:
    return TodoItem(
        file_path=Path(path),
        line_number=line,
        line_content=f"# TODO({identifier}, bidir, owner=ann): sync",
        reference=Tracked(identifier),
        attributes={"bidir": AttributeFlag(True), "owner": AttributeText("ann")},
    )


def test_empty_report_says_nothing_found() -> None:
    assert format_standard(ScanReport.from_items([])) == "No TODOs found.\n"


def test_empty_report_still_prints_diagnostics() -> None:
    report = ScanReport.from_items([], diagnostics=["verification skipped"])

    assert format_standard(report) == "No TODOs found.\nwarning: verification skipped\n"


def test_standard_output_groups_by_sorted_file_path() -> None:
    report = ScanReport.from_items(
        [_tracked("src/b.py", 2, "TASK-1"), _untracked("src/a.py", 7), _untracked("src/a.py", 1)]
    )

    assert format_standard(report).splitlines() == [
        "",
        "Found 3 TODOs:",
        f"{FOLDER_MARK} src/a.py:",
        "  Line 7",
        "  Line 1",
        "",
        f"{FOLDER_MARK} src/b.py:",
        "  Line 2",
        "",
        "Total: 3 TODOs across 2 file(s)",
        "Tracked: 1, untracked: 2",
    ]


def test_verified_report_shows_statuses_and_summary() -> None:
    entries = (
        VerifiedTodo(
            _tracked("a.py", 1, "TASK-1"),
            IssueCheck("TASK-1", CheckStatus.FOUND, provider="tasks"),
        ),
        VerifiedTodo(
            _tracked("a.py", 2, "TASK-2"),
            IssueCheck(
                "TASK-2",
                CheckStatus.ERROR,
                provider="tasks",
                error_code="auth",
                detail="Notion rejected the token",
            ),
        ),
        VerifiedTodo(_untracked("a.py", 3)),
    )
    report = ScanReport(entries=entries, mode="validate", verified=True)

    lines = format_standard(report).splitlines()

    assert "  Line 1 [TASK-1: found]" in lines
    assert "  Line 2 [TASK-2: error]" in lines
    assert "  Line 3" in lines
    assert lines[-1] == "Verification: found=1 missing=0 errors=1 skipped=0"
    assert report.has_problems()


def test_verbose_output_includes_content_attributes_and_detail() -> None:
    entry = VerifiedTodo(
        _tracked("a.py", 4, "TASK-9"),
        IssueCheck("TASK-9", CheckStatus.MISSING, provider="tasks", detail="not in database"),
    )
    report = ScanReport(entries=(entry,), verified=True)

    lines = format_standard(report, verbose=True).splitlines()

    assert "  Line 4 [TASK-9: missing]: # TODO(TASK-9, bidir, owner=ann): sync" in lines
    assert "      attributes: bidir, owner=ann" in lines
    assert "      detail: not in database" in lines


def test_summary_counts() -> None:
    entries = (
        VerifiedTodo(_tracked("a.py", 1, "T-1"), IssueCheck("T-1", CheckStatus.MISSING)),
        VerifiedTodo(_tracked("b.py", 1, "T-2"), IssueCheck("T-2", CheckStatus.SKIPPED)),
        VerifiedTodo(_untracked("b.py", 2)),
    )

    summary = ScanReport(entries=entries, verified=True).summary()

    assert (summary.total, summary.files, summary.tracked, summary.untracked) == (3, 2, 2, 1)
    assert (summary.found, summary.missing, summary.errors, summary.skipped) == (0, 1, 0, 1)


def test_skipped_checks_are_not_problems() -> None:
    entries = (VerifiedTodo(_tracked("a.py", 1, "T-1"), IssueCheck("T-1", CheckStatus.SKIPPED)),)

    assert not ScanReport(entries=entries, verified=True).has_problems()


def test_json_output_is_sorted_and_complete() -> None:
    entry = VerifiedTodo(
        _tracked("src/a.py", 3, "TASK-1"),
        IssueCheck("TASK-1", CheckStatus.FOUND, provider="tasks"),
    )
    report = ScanReport(entries=(entry,), mode="validate", verified=True, diagnostics=("note",))

    rendered = format_json(report)
    document = json.loads(rendered)

    assert rendered.endswith("\n")
    assert list(document) == sorted(document)
    assert document["mode"] == "validate"
    assert document["verified"] is True
    assert document["diagnostics"] == ["note"]
    assert document["summary"]["found"] == 1
    assert document["items"] == [
        {
            "file": "src/a.py",
            "line": 3,
            "content": "# TODO(TASK-1, bidir, owner=ann): sync",
            "reference": {"kind": "tracked", "id": "TASK-1"},
            "attributes": {"bidir": True, "owner": "ann"},
            "check": {"id": "TASK-1", "status": "found", "provider": "tasks"},
        }
    ]


def test_json_output_for_unverified_scan_has_null_checks() -> None:
    document = json.loads(format_json(ScanReport.from_items([_untracked("a.py", 1)])))

    assert document["verified"] is False
    assert document["items"][0]["check"] is None
    assert document["items"][0]["reference"] == {"kind": "untracked"}
