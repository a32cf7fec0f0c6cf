"""Tracking-ID validation and decomposition."""

from __future__ import annotations

import re
from typing import Final

_TRACKING_ID_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Z]+-[0-9]+$")
_PREFIX_SEPARATOR: Final[str] = "-"
_MAX_ISSUE_NUMBER: Final[int] = 2**31 - 1


def is_tracking_id(value: object) -> bool:
    """Return whether ``value`` is a tracking ID of the form ``TASK-123``.

    The whole string must match: uppercase ASCII letters, one hyphen, digits.
    Surrounding or interior whitespace, lowercase letters, and extra hyphens
    all fail.
    """
    if not isinstance(value, str):
        return False
    # fullmatch: ``$`` alone would accept a trailing newline.
    return _TRACKING_ID_RE.fullmatch(value) is not None


def split_tracking_id(value: str) -> tuple[str, int] | None:
    """Split ``PREFIX-NUMBER`` at the first hyphen.

    Returns ``None`` when there is no separator, or the suffix is not plain
    ASCII digits within the signed 32-bit range. Signs, underscores, spaces and
    non-ASCII digits are rejected even though ``int()`` would accept them.
    """
    prefix, separator, suffix = value.partition(_PREFIX_SEPARATOR)
    if not separator or not (suffix.isascii() and suffix.isdigit()):
        return None
    number = int(suffix)
    if number > _MAX_ISSUE_NUMBER:
        return None
    return prefix, number


__all__ = [
    "is_tracking_id",
    "split_tracking_id",
]
