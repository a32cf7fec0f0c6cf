"""Logging configuration and redaction."""

from tudu.observability.logging import (
    REDACTED_VALUE,
    configure_logging,
    redact_event_dict,
    redact_text,
    redact_value,
)

__all__ = [
    "REDACTED_VALUE",
    "configure_logging",
    "redact_event_dict",
    "redact_text",
    "redact_value",
]
