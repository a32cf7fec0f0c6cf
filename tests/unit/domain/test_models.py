"""
tudu — unit tests for annotation domain models

File: tests/unit/domain/test_models.py

Purpose
- Validate reference/attribute variants and deterministic ``TodoItem`` serialization.
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from tudu.domain.models import (
    AttributeFlag,
    AttributeList,
    AttributeText,
    New,
    TodoItem,
    Tracked,
    Untracked,
    attributes_to_dict,
    render_attributes,
)


def _item(**overrides: object) -> TodoItem:
    fields: dict[str, object] = {
        "file_path": Path("src/app.py"),
        "line_number": 3,
        "line_content": "# TODO(TASK-1, owner=alice): refactor",
        "reference": Tracked("TASK-1"),
        "attributes": {"owner": AttributeText("alice")},
    }
    fields.update(overrides)
    return TodoItem(**fields)  # type: ignore[arg-type]


def test_reference_variants_compare_structurally() -> None:
    assert Untracked() == Untracked()
    assert Tracked("TASK-1") == Tracked("TASK-1")
    assert Tracked("TASK-1") != Tracked("TASK-2")
    assert New() != Untracked()


def test_reference_variants_serialize_with_kind_tag() -> None:
    assert Untracked().to_dict() == {"kind": "untracked"}
    assert Tracked("BUG-9").to_dict() == {"kind": "tracked", "id": "BUG-9"}
    assert New("write docs").to_dict() == {"kind": "new", "title": "write docs"}


def test_tracked_rejects_empty_identifier() -> None:
    with pytest.raises(ValueError, match="non-empty"):
        Tracked("")


def test_records_are_frozen() -> None:
    item = _item()
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.line_number = 4  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        Tracked("TASK-1").id = "TASK-2"  # type: ignore[misc]


def test_attribute_list_normalizes_to_tuple() -> None:
    value = AttributeList(["a", "b"])  # type: ignore[arg-type]

    assert value.values == ("a", "b")
    assert value.to_json() == ["a", "b"]
    assert value.render() == "a,b"


def test_render_attributes_uses_sorted_keys_and_bare_flags() -> None:
    rendered = render_attributes(
        {
            "labels": AttributeList(("frontend", "performance")),
            "bidir": AttributeFlag(True),
            "assignee": AttributeText("bob"),
        }
    )

    assert rendered == "assignee=bob, bidir, labels=frontend,performance"


def test_attributes_to_dict_maps_each_variant_to_json() -> None:
    payload = attributes_to_dict(
        {
            "bidir": AttributeFlag(True),
            "labels": AttributeList(("x",)),
            "owner": AttributeText("ann"),
        }
    )

    assert payload == {"bidir": True, "labels": ["x"], "owner": "ann"}


def test_todo_item_freezes_and_sorts_attributes() -> None:
    source = {"zeta": AttributeFlag(True), "alpha": AttributeText("1")}
    item = _item(attributes=source)
    source["late"] = AttributeFlag(True)

    assert item.attributes is not None
    assert list(item.attributes) == ["alpha", "zeta"]
    with pytest.raises(TypeError):
        item.attributes["new"] = AttributeFlag(True)  # type: ignore[index]


def test_todo_item_rejects_zero_line_number() -> None:
    with pytest.raises(ValueError, match="1-based"):
        _item(line_number=0)


def test_todo_item_coerces_string_path() -> None:
    item = _item(file_path="src/app.py")

    assert item.file_path == Path("src/app.py")


def test_tracking_id_and_attribute_text_accessors() -> None:
    item = _item(attributes={"owner": AttributeText("alice"), "bidir": AttributeFlag(True)})

    assert item.tracking_id == "TASK-1"
    assert item.attribute_text("owner") == "alice"
    assert item.attribute_text("bidir") is None
    assert item.attribute_text("missing") is None

    untracked = _item(reference=Untracked(), attributes=None)
    assert untracked.tracking_id is None
    assert untracked.attribute_text("owner") is None


def test_todo_item_to_dict_is_json_ready() -> None:
    payload = _item().to_dict()

    assert payload == {
        "file": "src/app.py",
        "line": 3,
        "content": "# TODO(TASK-1, owner=alice): refactor",
        "reference": {"kind": "tracked", "id": "TASK-1"},
        "attributes": {"owner": "alice"},
    }
    assert json.loads(json.dumps(payload, sort_keys=True)) == payload


def test_todo_items_with_equal_fields_are_equal() -> None:
    assert _item() == _item()
    assert _item() != _item(line_number=4)
