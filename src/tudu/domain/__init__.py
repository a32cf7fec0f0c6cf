"""Domain records and tracking-ID helpers."""

from tudu.domain.ids import is_tracking_id, split_tracking_id
from tudu.domain.models import (
    AttributeFlag,
    AttributeList,
    AttributeMap,
    AttributeText,
    AttributeValue,
    New,
    TodoItem,
    TodoReference,
    Tracked,
    Untracked,
)

__all__ = [
    "AttributeFlag",
    "AttributeList",
    "AttributeMap",
    "AttributeText",
    "AttributeValue",
    "New",
    "TodoItem",
    "TodoReference",
    "Tracked",
    "Untracked",
    "is_tracking_id",
    "split_tracking_id",
]
