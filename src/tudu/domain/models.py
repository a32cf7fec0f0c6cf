"""
tudu — annotation domain models

File: src/tudu/domain/models.py

Purpose
- Immutable records for one detected TODO/FIXME marker and the structured
  annotation parsed from it.

What should be included in this file
- ``TodoReference`` variants: ``Untracked``, ``Tracked``, ``New``.
- ``AttributeValue`` variants: ``AttributeFlag``, ``AttributeText``, ``AttributeList``.
- ``TodoItem`` with deterministic JSON-ready serialization.

Non-functional requirements
- Records are frozen; attribute mappings are copied and key-sorted on construction.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TypeAlias

JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


@dataclass(frozen=True, slots=True)
class Untracked:
    """Marker without a usable tracking ID."""

    kind = "untracked"

    def to_dict(self) -> dict[str, JSONValue]:
        return {"kind": self.kind}


@dataclass(frozen=True, slots=True)
class Tracked:
    """Marker linked to an external issue, e.g. ``TODO(TASK-123)``."""

    id: str
    kind = "tracked"

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("Tracked.id must be a non-empty string")

    def to_dict(self) -> dict[str, JSONValue]:
        return {"kind": self.kind, "id": self.id}


@dataclass(frozen=True, slots=True)
class New:
    """Marker asking for a new issue to be created.

    Declared for forward compatibility; the parser has no syntax that produces it.
    """

    title: str | None = None
    kind = "new"

    def to_dict(self) -> dict[str, JSONValue]:
        return {"kind": self.kind, "title": self.title}


TodoReference: TypeAlias = Untracked | Tracked | New


@dataclass(frozen=True, slots=True)
class AttributeFlag:
    """Bare attribute token such as ``bidir``."""

    value: bool = True

    def to_json(self) -> JSONValue:
        return self.value

    def render(self) -> str:
        return ""


@dataclass(frozen=True, slots=True)
class AttributeText:
    """Single ``key=value`` attribute."""

    value: str

    def to_json(self) -> JSONValue:
        return self.value

    def render(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class AttributeList:
    """``key=v1,v2`` attribute; order of values is preserved."""

    values: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def to_json(self) -> JSONValue:
        return list(self.values)

    def render(self) -> str:
        return ",".join(self.values)


AttributeValue: TypeAlias = AttributeFlag | AttributeText | AttributeList
AttributeMap: TypeAlias = Mapping[str, AttributeValue]


def freeze_attributes(attributes: Mapping[str, AttributeValue]) -> AttributeMap:
    """Return a read-only, key-sorted copy of ``attributes``."""

    return MappingProxyType({key: attributes[key] for key in sorted(attributes)})


def attributes_to_dict(attributes: AttributeMap) -> dict[str, JSONValue]:
    return {key: attributes[key].to_json() for key in sorted(attributes)}


def render_attributes(attributes: AttributeMap) -> str:
    """Render attributes as ``key=value`` pairs in sorted key order."""

    parts: list[str] = []
    for key in sorted(attributes):
        rendered = attributes[key].render()
        parts.append(f"{key}={rendered}" if rendered else key)
    return ", ".join(parts)


@dataclass(frozen=True, slots=True)
class TodoItem:
    """One TODO/FIXME occurrence found during a scan."""

    file_path: Path
    line_number: int
    line_content: str
    reference: TodoReference | None = None
    attributes: AttributeMap | None = field(default=None, hash=False)

    def __post_init__(self) -> None:
        if self.line_number < 1:
            raise ValueError("TodoItem.line_number is 1-based and must be >= 1")
        object.__setattr__(self, "file_path", Path(self.file_path))
        if self.attributes is not None:
            object.__setattr__(self, "attributes", freeze_attributes(self.attributes))

    @property
    def tracking_id(self) -> str | None:
        if isinstance(self.reference, Tracked):
            return self.reference.id
        return None

    def attribute_text(self, key: str) -> str | None:
        """Return the text value of attribute ``key`` when it is a plain ``key=value``."""

        if self.attributes is None:
            return None
        value = self.attributes.get(key)
        if isinstance(value, AttributeText):
            return value.value
        return None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "file": self.file_path.as_posix(),
            "line": self.line_number,
            "content": self.line_content,
            "reference": None if self.reference is None else self.reference.to_dict(),
            "attributes": (
                None if self.attributes is None else attributes_to_dict(self.attributes)
            ),
        }


__all__ = [
    "AttributeFlag",
    "AttributeList",
    "AttributeMap",
    "AttributeText",
    "AttributeValue",
    "JSONValue",
    "New",
    "TodoItem",
    "TodoReference",
    "Tracked",
    "Untracked",
    "attributes_to_dict",
    "freeze_attributes",
    "render_attributes",
]
