"""
tudu — structured logging setup

File: src/tudu/observability/logging.py

Purpose
- Configure ``structlog`` once per process: level filtering, console or JSON
  rendering to stderr, and a redaction processor in front of the renderer.

Functional requirements
- Diagnostics never go to stdout; stdout is reserved for the report.
- Values under credential-like keys, bearer tokens and ``key=value`` secrets are
  masked before rendering.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import MutableMapping
from typing import Any, Final, TextIO

import structlog

REDACTED_VALUE: Final[str] = "***REDACTED***"

_LEVELS: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "private_key",
)

_SENSITIVE_ASSIGNMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(api[_-]?key|token|password|secret|authorization)\b\s*([:=])\s*([^\s,;]+)"
)
_BEARER_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*")
_NOTION_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"\b(?:secret|ntn)_[A-Za-z0-9]{20,}\b")
_GITHUB_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(?:gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})\b"
)


def configure_logging(
    level: str = "WARNING",
    log_format: str = "console",
    stream: TextIO | None = None,
) -> None:
    """Install the process-wide structlog configuration."""

    normalized_level = level.strip().upper()
    if normalized_level not in _LEVELS:
        expected = ", ".join(_LEVELS)
        raise ValueError(f"unsupported log level {level!r}; expected one of: {expected}")
    if log_format not in ("console", "json"):
        raise ValueError(f"unsupported log format {log_format!r}; expected console or json")

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_event_dict,
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    target = stream if stream is not None else sys.stderr
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_LEVELS[normalized_level]),
        logger_factory=structlog.PrintLoggerFactory(file=target),
        cache_logger_on_first_use=False,
    )


def redact_event_dict(
    logger: object, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking credentials anywhere in the event."""

    for key in list(event_dict):
        event_dict[key] = redact_value(event_dict[key], key_context=key)
    return event_dict


def redact_value(value: object, *, key_context: str | None = None) -> object:
    if key_context is not None and _requires_redaction_for_key(key_context):
        return REDACTED_VALUE
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, list | tuple):
        return [redact_value(item) for item in value]
    if isinstance(value, dict):
        return {key: redact_value(item, key_context=str(key)) for key, item in value.items()}
    return value


def redact_text(text: str) -> str:
    # Bearer first: the assignment pattern would otherwise consume only "Bearer".
    redacted = _BEARER_TOKEN_PATTERN.sub(f"Bearer {REDACTED_VALUE}", text)
    redacted = _SENSITIVE_ASSIGNMENT_PATTERN.sub(
        lambda match: f"{match.group(1)}{match.group(2)}{REDACTED_VALUE}", redacted
    )
    redacted = _NOTION_TOKEN_PATTERN.sub(REDACTED_VALUE, redacted)
    return _GITHUB_TOKEN_PATTERN.sub(REDACTED_VALUE, redacted)


def _requires_redaction_for_key(key: str) -> bool:
    key_lower = key.lower()
    if key_lower.endswith("_env"):
        return False
    return any(term in key_lower for term in _SENSITIVE_KEY_TERMS)


__all__ = [
    "REDACTED_VALUE",
    "configure_logging",
    "redact_event_dict",
    "redact_text",
    "redact_value",
]
