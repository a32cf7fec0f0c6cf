"""Unit tests for tracking-ID validation."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tudu.domain import ids


@pytest.mark.parametrize("value", ["TASK-123", "BUG-1", "A-0", "FEAT-400", "X-007"])
def test_is_tracking_id_accepts_uppercase_prefix_and_digits(value: str) -> None:
    assert ids.is_tracking_id(value)


@pytest.mark.parametrize(
    "value",
    [
        "",
        "-",
        "TASK",
        "TASK-",
        "-123",
        "task-123",
        "Task-123",
        "TASK123",
        "TASK-12a",
        "TASK-1-2",
        "TASK_1",
        " TASK-1",
        "TASK-1 ",
        "TASK -1",
        "TASK-1\n",
        "ÄBC-1",
        "TASK-١٢",
    ],
)
def test_is_tracking_id_rejects_malformed_values(value: str) -> None:
    assert not ids.is_tracking_id(value)


def test_is_tracking_id_rejects_non_strings() -> None:
    assert not ids.is_tracking_id(None)
    assert not ids.is_tracking_id(123)
    assert not ids.is_tracking_id(b"TASK-1")


def test_split_tracking_id_returns_prefix_and_number() -> None:
    assert ids.split_tracking_id("TASK-123") == ("TASK", 123)
    assert ids.split_tracking_id("PROJ-007") == ("PROJ", 7)


def test_split_tracking_id_rejects_missing_separator_or_numeric_suffix() -> None:
    assert ids.split_tracking_id("TASK123") is None
    assert ids.split_tracking_id("TASK-abc") is None
    assert ids.split_tracking_id("TASK-") is None
    assert ids.split_tracking_id("A-B-1") is None


@pytest.mark.parametrize(
    "value",
    ["TASK-+5", "TASK-1_0", "TASK- 7", "TASK-7 ", "TASK-\u0661\u0662", "TASK-2147483648"],
)
def test_split_tracking_id_accepts_only_ascii_digits_in_range(value: str) -> None:
    assert ids.split_tracking_id(value) is None


def test_split_tracking_id_upper_bound() -> None:
    assert ids.split_tracking_id("TASK-2147483647") == ("TASK", 2147483647)


@given(
    st.from_regex(r"\A[A-Z]{1,8}\Z"),
    st.integers(min_value=0, max_value=10**9),
)
def test_generated_identifiers_validate_and_split(prefix: str, number: int) -> None:
    value = f"{prefix}-{number}"

    assert ids.is_tracking_id(value)
    assert ids.split_tracking_id(value) == (prefix, number)


@given(st.text(max_size=20))
def test_lowercased_identifiers_never_validate(value: str) -> None:
    lowered = value.lower()
    if any(char.isalpha() for char in lowered if char.isascii()):
        assert not ids.is_tracking_id(lowered)
