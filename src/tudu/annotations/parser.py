"""
tudu — annotation grammar parser

File: src/tudu/annotations/parser.py

Purpose
- Turn one TODO/FIXME line into a ``TodoReference`` plus an optional attribute map.

Grammar
- ``TODO: text``                       -> Untracked
- ``TODO(TASK-123): text``             -> Tracked("TASK-123")
- ``TODO(TASK-123, bidir, k=v, l=a,b)`` -> Tracked + {bidir: flag, k: text, l: list}
- ``TODO(alice)`` / ``TODO()``         -> Untracked

Functional requirements
- Reference and attributes locate the parenthesized span with the same rule
  (first ``(`` and first ``)``).
- Unparseable annotations degrade to ``Untracked``; nothing here raises.

Non-functional requirements
- Pure and stateless; safe to call from any thread.
"""

from __future__ import annotations

import re
from typing import Final

from tudu.domain.ids import is_tracking_id
from tudu.domain.models import (
    AttributeFlag,
    AttributeList,
    AttributeMap,
    AttributeText,
    AttributeValue,
    TodoReference,
    Tracked,
    Untracked,
    freeze_attributes,
)

_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"TODO|FIXME", re.IGNORECASE)
_ATTRIBUTE_SEPARATOR: Final[str] = ", "
_LIST_SEPARATOR: Final[str] = ","
_KEY_VALUE_SEPARATOR: Final[str] = "="

ParseResult = tuple[TodoReference, AttributeMap | None]


def parse_line(line: str) -> tuple[TodoReference | None, AttributeMap | None]:
    """Parse ``line``; lines without a TODO/FIXME marker yield ``(None, None)``."""

    if _MARKER_RE.search(line) is None:
        return None, None
    return parse_annotation(line)


def parse_annotation(line: str) -> ParseResult:
    """Parse the annotation of a line known to contain a TODO/FIXME marker."""

    inside = _parenthesized(line)
    if not inside:
        return Untracked(), None

    candidate, separator, attribute_source = inside.partition(",")
    if separator and is_tracking_id(candidate):
        return Tracked(candidate), parse_attributes(attribute_source.strip())

    if not separator and is_tracking_id(inside):
        return Tracked(inside), None

    return Untracked(), None


def parse_attributes(source: str) -> AttributeMap | None:
    """Parse ``key``, ``key=value`` and ``key=a,b`` tokens separated by ``", "``.

    Later duplicate keys overwrite earlier ones. Returns ``None`` when no
    attribute survives.
    """

    attributes: dict[str, AttributeValue] = {}
    for token in source.split(_ATTRIBUTE_SEPARATOR):
        token = token.strip()
        if not token:
            continue
        parsed = _parse_token(token)
        if parsed is None:
            continue
        key, value = parsed
        attributes[key] = value

    if not attributes:
        return None
    return freeze_attributes(attributes)


def _parenthesized(line: str) -> str | None:
    open_index = line.find("(")
    close_index = line.find(")")
    if open_index < 0 or close_index < 0 or close_index < open_index:
        return None
    return line[open_index + 1 : close_index].strip()


def _parse_token(token: str) -> tuple[str, AttributeValue] | None:
    key, separator, raw_value = token.partition(_KEY_VALUE_SEPARATOR)
    key = key.strip()
    if not key:
        return None
    if not separator:
        return key, AttributeFlag(True)

    value = raw_value.strip()
    if _LIST_SEPARATOR in value:
        items = [item.strip() for item in value.split(_LIST_SEPARATOR)]
        return key, AttributeList(tuple(item for item in items if item))
    return key, AttributeText(value)


__all__ = [
    "ParseResult",
    "parse_annotation",
    "parse_attributes",
    "parse_line",
]
