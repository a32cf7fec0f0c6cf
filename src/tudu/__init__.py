"""
tudu — TODO/FIXME annotation scanner

File: src/tudu/__init__.py

Purpose
- Package root. Exposes the version and the small public parsing surface.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from tudu.annotations.parser import parse_annotation, parse_attributes, parse_line
from tudu.domain.ids import is_tracking_id, split_tracking_id

__version__ = "0.3.0"

__all__ = [
    "__version__",
    "is_tracking_id",
    "parse_annotation",
    "parse_attributes",
    "parse_line",
    "split_tracking_id",
]
