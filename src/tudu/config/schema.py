"""
tudu — configuration schema and validation

File: src/tudu/config/schema.py

Purpose
- Define configuration defaults and strict validation rules for ``tudu.toml``.

What should be included in this file
- Schema versioning and migration guidance.
- Validation for scan, output, lookup, observability and provider sections.
- Deterministic deep-merge helpers used by the loader.

Functional requirements
- Validate config payloads and return structured issues (field path + message).
- Reject embedded credentials; providers name the env var that holds them.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, NotRequired, TypedDict

from tudu.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT_SECONDS,
    PROVIDER_KINDS,
)

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

MODES: Final[tuple[str, ...]] = ("scan", "validate")
OUTPUT_FORMATS: Final[tuple[str, ...]] = ("json", "standard")
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS: Final[tuple[str, ...]] = ("console", "json")

_ENV_NAME_PATTERN = re.compile(r"^[A-Z_][A-Z0-9_]*$")
_PROVIDER_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")
_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

_SENSITIVE_KEY_TOKENS: Final[frozenset[str]] = frozenset(
    {
        "secret",
        "token",
        "password",
        "passwd",
        "apikey",
        "private",
        "credential",
        "credentials",
    }
)
_SENSITIVE_KEY_PHRASES: Final[tuple[str, ...]] = (
    "api_key",
    "api_token",
    "access_token",
    "client_secret",
    "private_key",
    "password",
    "secret",
)

# Provider kind -> (required keys, optional keys); "type" is implied.
_PROVIDER_FIELDS: Final[dict[str, tuple[frozenset[str], frozenset[str]]]] = {
    "notion": (
        frozenset({"database_id"}),
        frozenset({"id_property", "token_env", "api_url"}),
    ),
    "jira": (
        frozenset({"server", "project"}),
        frozenset({"email_env", "token_env"}),
    ),
    "github": (
        frozenset({"owner", "repo"}),
        frozenset({"token_env", "api_url"}),
    ),
}
_PROVIDER_ENV_FIELDS: Final[frozenset[str]] = frozenset({"token_env", "email_env"})
_PROVIDER_URL_FIELDS: Final[frozenset[str]] = frozenset({"api_url", "server"})


class MetaConfig(TypedDict):
    schema_version: int


class ScanConfig(TypedDict):
    ignore: list[str]
    include: list[str]
    match_case_insensitive: bool


class OutputConfig(TypedDict):
    format: Literal["standard", "json"]
    verbose: bool


class LookupConfig(TypedDict):
    max_concurrency: int
    timeout_seconds: float


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_format: Literal["console", "json"]


class TuduConfig(TypedDict):
    meta: MetaConfig
    mode: Literal["scan", "validate"]
    default_provider: NotRequired[str]
    scan: ScanConfig
    output: OutputConfig
    lookup: LookupConfig
    observability: ObservabilityConfig
    providers: dict[str, dict[str, str]]


DEFAULT_CONFIG: Final[TuduConfig] = {
    "meta": {
        "schema_version": ConfigSchemaVersion,
    },
    "mode": "validate",
    "scan": {
        "ignore": [],
        "include": [],
        "match_case_insensitive": True,
    },
    "output": {
        "format": "standard",
        "verbose": False,
    },
    "lookup": {
        "max_concurrency": DEFAULT_MAX_CONCURRENCY,
        "timeout_seconds": DEFAULT_TIMEOUT_SECONDS,
    },
    "observability": {
        "log_level": "WARNING",
        "log_format": "console",
    },
    "providers": {},
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> TuduConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade tudu.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade tudu"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized = _validate_root(root, issues)
    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_root(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    allowed = {
        "meta",
        "mode",
        "default_provider",
        "scan",
        "output",
        "lookup",
        "observability",
        "providers",
    }
    _reject_unknown_keys(payload, allowed, "", issues)
    _require_keys(payload, allowed - {"default_provider"}, "", issues)

    out: dict[str, Any] = {}
    meta = _section(payload, "meta", issues)
    if meta is not None:
        out["meta"] = _validate_meta(meta, "meta", issues)

    if "mode" in payload:
        parsed_mode = _as_enum(payload["mode"], "mode", issues, allowed_values=MODES)
        if parsed_mode is not None:
            out["mode"] = parsed_mode

    scan = _section(payload, "scan", issues)
    if scan is not None:
        out["scan"] = _validate_scan(scan, "scan", issues)

    output = _section(payload, "output", issues)
    if output is not None:
        out["output"] = _validate_output(output, "output", issues)

    lookup = _section(payload, "lookup", issues)
    if lookup is not None:
        out["lookup"] = _validate_lookup(lookup, "lookup", issues)

    observability = _section(payload, "observability", issues)
    if observability is not None:
        out["observability"] = _validate_observability(observability, "observability", issues)

    providers = _section(payload, "providers", issues)
    if providers is not None:
        out["providers"] = _validate_providers(providers, "providers", issues)

    if "default_provider" in payload:
        default_provider = _as_str(payload["default_provider"], "default_provider", issues)
        if default_provider is not None:
            configured = out.get("providers", {})
            if default_provider not in configured:
                known = ", ".join(sorted(configured)) or "<none>"
                issues.add(
                    "default_provider",
                    f"names no configured provider {default_provider!r}; configured: {known}",
                )
            out["default_provider"] = default_provider

    return out


def _section(
    payload: Mapping[str, object], key: str, issues: _IssueCollector
) -> dict[str, object] | None:
    raw = payload.get(key)
    if raw is None:
        return None
    return _as_object(raw, key, issues)


def _validate_meta(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"schema_version"}, path, issues)
    _require_keys(payload, {"schema_version"}, path, issues)

    out: dict[str, Any] = {}
    if "schema_version" in payload:
        parsed = _as_int(
            payload["schema_version"], _join(path, "schema_version"), issues, minimum=1
        )
        if parsed is not None:
            out["schema_version"] = parsed
            if parsed != ConfigSchemaVersion:
                issues.add(_join(path, "schema_version"), migration_guidance(parsed))
    return out


def _validate_scan(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"ignore", "include", "match_case_insensitive"}
    _reject_unknown_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    for key in ("ignore", "include"):
        if key in payload:
            patterns = _as_str_list(payload[key], _join(path, key), issues)
            if patterns is not None:
                out[key] = patterns

    if "match_case_insensitive" in payload:
        parsed = _as_bool(
            payload["match_case_insensitive"], _join(path, "match_case_insensitive"), issues
        )
        if parsed is not None:
            out["match_case_insensitive"] = parsed
    return out


def _validate_output(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"format", "verbose"}
    _reject_unknown_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "format" in payload:
        parsed_format = _as_enum(
            payload["format"], _join(path, "format"), issues, allowed_values=OUTPUT_FORMATS
        )
        if parsed_format is not None:
            out["format"] = parsed_format
    if "verbose" in payload:
        parsed_verbose = _as_bool(payload["verbose"], _join(path, "verbose"), issues)
        if parsed_verbose is not None:
            out["verbose"] = parsed_verbose
    return out


def _validate_lookup(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"max_concurrency", "timeout_seconds"}
    _reject_unknown_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "max_concurrency" in payload:
        parsed_concurrency = _as_int(
            payload["max_concurrency"], _join(path, "max_concurrency"), issues, minimum=1
        )
        if parsed_concurrency is not None:
            out["max_concurrency"] = parsed_concurrency
    if "timeout_seconds" in payload:
        timeout_path = _join(path, "timeout_seconds")
        parsed_timeout = _as_float(payload["timeout_seconds"], timeout_path, issues, minimum=0.0)
        if parsed_timeout is not None:
            if parsed_timeout == 0.0:
                issues.add(timeout_path, "must be > 0")
            else:
                out["timeout_seconds"] = parsed_timeout
    return out


def _validate_observability(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"log_level", "log_format"}
    _reject_unknown_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "log_level" in payload:
        parsed_log_level = _as_enum(
            payload["log_level"], _join(path, "log_level"), issues, allowed_values=LOG_LEVELS
        )
        if parsed_log_level is not None:
            out["log_level"] = parsed_log_level
    if "log_format" in payload:
        parsed_log_format = _as_enum(
            payload["log_format"], _join(path, "log_format"), issues, allowed_values=LOG_FORMATS
        )
        if parsed_log_format is not None:
            out["log_format"] = parsed_log_format
    return out


def _validate_providers(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name in sorted(payload):
        section_path = _join(path, name)
        if not _PROVIDER_NAME_PATTERN.fullmatch(name):
            issues.add(section_path, "provider name must match ^[a-z][a-z0-9_-]*$")
            continue
        section = _as_object(payload[name], section_path, issues)
        if section is None:
            continue
        settings = _validate_provider_settings(section, section_path, issues)
        if settings is not None:
            out[name] = settings
    return out


def _validate_provider_settings(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, str] | None:
    if "type" not in payload:
        issues.add(_join(path, "type"), "missing required field")
        return None
    kind = _as_enum(payload["type"], _join(path, "type"), issues, allowed_values=PROVIDER_KINDS)
    if kind is None:
        return None

    required, optional = _PROVIDER_FIELDS[kind]
    _reject_unknown_keys(payload, {"type"} | required | optional, path, issues)
    _require_keys(payload, set(required), path, issues)

    out: dict[str, str] = {"type": kind}
    for key in sorted((required | optional) & set(payload)):
        key_path = _join(path, key)
        if key in _PROVIDER_ENV_FIELDS:
            parsed = _as_env_name(payload[key], key_path, issues)
        elif key in _PROVIDER_URL_FIELDS:
            parsed = _as_url(payload[key], key_path, issues)
        else:
            parsed = _as_str(payload[key], key_path, issues)
        if parsed is not None:
            out[key] = parsed
    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_str_list(value: object, path: str, issues: _IssueCollector) -> list[str] | None:
    if not isinstance(value, (list, tuple)):
        issues.add(path, f"expected list of strings, got {type(value).__name__}")
        return None
    out: list[str] = []
    for index, item in enumerate(value):
        parsed = _as_str(item, f"{path}[{index}]", issues)
        if parsed is not None:
            out.append(parsed)
    return out


def _as_env_name(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if not _ENV_NAME_PATTERN.fullmatch(parsed):
        issues.add(path, "must be an env var name (example: NOTION_TOKEN)")
        return None
    return parsed


def _as_url(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if not parsed.startswith(("https://", "http://")):
        issues.add(path, "must be an http(s) URL")
        return None
    return parsed.rstrip("/")


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_float(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: float | None = None,
) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {type(value).__name__}")
        return None
    parsed = float(value)
    if not math.isfinite(parsed):
        issues.add(path, "must be finite")
        return None
    if minimum is not None and parsed < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return parsed


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str] | frozenset[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key in allowed:
            continue
        key_path = _join(path, key)
        if _looks_sensitive_key(key):
            issues.add(
                key_path,
                "embedded secret values are forbidden; use an *_env key with an env var name",
            )
        else:
            issues.add(key_path, "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _looks_sensitive_key(key: str) -> bool:
    normalized = _normalize_key(key)
    if normalized.endswith("_env"):
        return False
    if any(phrase in normalized for phrase in _SENSITIVE_KEY_PHRASES):
        return True
    tokens = tuple(token for token in normalized.split("_") if token)
    return any(token in _SENSITIVE_KEY_TOKENS for token in tokens)


def _normalize_key(key: str) -> str:
    with_boundaries = _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key.strip())
    return _NON_ALNUM.sub("_", with_boundaries.lower()).strip("_")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    return {key: copy.deepcopy(value[key]) for key in sorted(value)}


__all__ = [
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "MODES",
    "OUTPUT_FORMATS",
    "TuduConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
