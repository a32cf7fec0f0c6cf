"""
tudu — unit tests for config schema validation

File: tests/unit/config/test_schema.py

Purpose
- Validate defaults, structured issue paths and provider section rules.

What this test file should cover
- Default config is valid and deep-copied.
- Type, range and enum errors carry deterministic dotted paths.
- Provider names, kinds, required fields, env-name and URL fields.
- Embedded credentials are rejected with a pointer to ``*_env`` keys.
"""

from __future__ import annotations

from typing import Any

import pytest

from tudu.config.schema import (
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)


def _config(**sections: Any) -> dict[str, Any]:
    return merge_config(default_config(), sections)


def _issues(config: object) -> dict[str, str]:
    result = validate_config(config)
    assert not result.is_valid
    return {issue.path: issue.message for issue in result.issues}


def test_default_config_is_valid() -> None:
    result = validate_config(default_config())

    assert result.is_valid
    assert result.config is not None
    assert result.config["mode"] == "validate"
    assert result.config["lookup"] == {"max_concurrency": 8, "timeout_seconds": 10.0}
    assert result.config["scan"]["match_case_insensitive"] is True


def test_default_config_returns_independent_copies() -> None:
    first = default_config()
    first["scan"]["ignore"].append("build")

    assert default_config()["scan"]["ignore"] == []


def test_merge_config_deep_merges_and_does_not_mutate_inputs() -> None:
    base = {"lookup": {"max_concurrency": 8, "timeout_seconds": 10.0}}
    overlay = {"lookup": {"max_concurrency": 2}}

    merged = merge_config(base, overlay)

    assert merged == {"lookup": {"max_concurrency": 2, "timeout_seconds": 10.0}}
    assert base["lookup"]["max_concurrency"] == 8


def test_non_object_root_is_rejected() -> None:
    assert _issues(["not", "a", "table"]) == {"<root>": "expected object, got list"}


def test_unknown_root_and_section_keys_are_reported() -> None:
    issues = _issues(_config(colour="blue", scan={"recursive": True}))

    assert issues["colour"] == "unknown field"
    assert issues["scan.recursive"] == "unknown field"


@pytest.mark.parametrize(
    ("sections", "path", "message"),
    [
        ({"mode": "fix"}, "mode", "expected one of: scan, validate"),
        ({"output": {"format": "xml"}}, "output.format", "expected one of: json, standard"),
        ({"output": {"verbose": "yes"}}, "output.verbose", "expected boolean"),
        ({"lookup": {"max_concurrency": 0}}, "lookup.max_concurrency", "must be >= 1"),
        ({"lookup": {"max_concurrency": True}}, "lookup.max_concurrency", "expected integer"),
        ({"lookup": {"timeout_seconds": 0}}, "lookup.timeout_seconds", "must be > 0"),
        ({"lookup": {"timeout_seconds": -1.5}}, "lookup.timeout_seconds", "must be >= 0.0"),
        ({"scan": {"ignore": "build"}}, "scan.ignore", "expected list of strings"),
        ({"scan": {"include": ["ok", ""]}}, "scan.include[1]", "must not be empty"),
        (
            {"observability": {"log_level": "TRACE"}},
            "observability.log_level",
            "expected one of",
        ),
    ],
)
def test_invalid_values_report_dotted_paths(
    sections: dict[str, Any], path: str, message: str
) -> None:
    issues = _issues(_config(**sections))

    assert message in issues[path]


def test_schema_version_mismatch_includes_migration_guidance() -> None:
    issues = _issues(_config(meta={"schema_version": 2}))

    assert issues["meta.schema_version"] == migration_guidance(2)
    assert "upgrade tudu" in migration_guidance(2)
    assert "older than supported" in migration_guidance(0)


def test_valid_notion_provider_is_normalized() -> None:
    config = assert_valid_config(
        _config(
            providers={
                "tasks": {
                    "type": "notion",
                    "database_id": " abc123 ",
                    "token_env": "NOTION_TOKEN",
                    "api_url": "https://api.notion.com/v1/",
                }
            },
            default_provider="tasks",
        )
    )

    assert config["providers"]["tasks"] == {
        "type": "notion",
        "database_id": "abc123",
        "token_env": "NOTION_TOKEN",
        "api_url": "https://api.notion.com/v1",
    }
    assert config["default_provider"] == "tasks"


def test_provider_kind_and_required_fields_are_checked() -> None:
    issues = _issues(
        _config(
            providers={
                "a": {"type": "linear"},
                "b": {"database_id": "x"},
                "c": {"type": "jira", "server": "https://jira.example.com"},
                "d": {"type": "github", "owner": "acme", "repo": "w", "labels": "x"},
            }
        )
    )

    assert "expected one of: github, jira, notion" in issues["providers.a.type"]
    assert issues["providers.b.type"] == "missing required field"
    assert issues["providers.c.project"] == "missing required field"
    assert issues["providers.d.labels"] == "unknown field"


def test_provider_names_must_be_lowercase_identifiers() -> None:
    issues = _issues(_config(providers={"Team Tasks": {"type": "notion", "database_id": "x"}}))

    assert "provider name must match" in issues["providers.Team Tasks"]


def test_provider_env_and_url_fields_are_validated() -> None:
    issues = _issues(
        _config(
            providers={
                "work": {
                    "type": "jira",
                    "server": "jira.example.com",
                    "project": "OPS",
                    "token_env": "jira-token",
                }
            }
        )
    )

    assert issues["providers.work.server"] == "must be an http(s) URL"
    assert "env var name" in issues["providers.work.token_env"]


@pytest.mark.parametrize("key", ["token", "api_token", "apiKey", "password", "client_secret"])
def test_embedded_secrets_are_rejected(key: str) -> None:
    issues = _issues(
        _config(providers={"tasks": {"type": "notion", "database_id": "x", key: "value"}})
    )

    assert "embedded secret values are forbidden" in issues[f"providers.tasks.{key}"]


def test_default_provider_must_name_a_configured_provider() -> None:
    issues = _issues(_config(default_provider="tasks"))

    assert issues["default_provider"] == (
        "names no configured provider 'tasks'; configured: <none>"
    )


def test_assert_valid_config_raises_with_rendered_issues() -> None:
    with pytest.raises(ConfigValidationError) as excinfo:
        assert_valid_config(_config(mode="fix", output={"verbose": 1}))

    message = str(excinfo.value)
    assert message.startswith("invalid config:\n")
    assert "- mode: " in message
    assert "- output.verbose: expected boolean, got int" in message
    assert len(excinfo.value.issues) == 2
