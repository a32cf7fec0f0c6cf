"""
tudu — unit tests for config loader

File: tests/unit/config/test_loader.py

Purpose
- Validate config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Deterministic env var path mapping and type coercion.
- Explicit vs implicit config file discovery.

Functional requirements
- Works without provider credentials or network.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tudu.config import ConfigLoadError, ConfigValidationError, load_config

_NOTION_TOML = """
[meta]
schema_version = 1

[lookup]
max_concurrency = 4

[providers.tasks]
type = "notion"
database_id = "db-1"
"""


def _write_config(tmp_path: Path, text: str, name: str = "tudu.toml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_no_file_is_present(tmp_path: Path) -> None:
    config = load_config(environ={}, cwd=tmp_path)

    assert config["mode"] == "validate"
    assert config["providers"] == {}
    assert config["output"] == {"format": "standard", "verbose": False}


def test_implicit_file_in_cwd_is_loaded(tmp_path: Path) -> None:
    _write_config(tmp_path, _NOTION_TOML)

    config = load_config(environ={}, cwd=tmp_path)

    assert config["lookup"]["max_concurrency"] == 4
    assert config["lookup"]["timeout_seconds"] == 10.0
    assert config["providers"]["tasks"] == {"type": "notion", "database_id": "db-1"}


def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "missing.toml", environ={})


def test_invalid_toml_is_an_error(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "[lookup\nmax_concurrency = 1\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(path, environ={})


def test_precedence_cli_over_env_over_file(tmp_path: Path) -> None:
    path = _write_config(tmp_path, _NOTION_TOML, name="custom.toml")
    environ = {
        "TUDU_LOOKUP_MAX_CONCURRENCY": "6",
        "TUDU_LOOKUP_TIMEOUT_SECONDS": "2.5",
        "TUDU_OUTPUT_FORMAT": "json",
    }

    config = load_config(
        path,
        environ=environ,
        cli_overrides={"lookup.max_concurrency": 2, "output.format": None},
    )

    assert config["lookup"]["max_concurrency"] == 2
    assert config["lookup"]["timeout_seconds"] == 2.5
    assert config["output"]["format"] == "json"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("YES", True), ("1", True), ("off", False), (" no ", False)],
)
def test_env_booleans_are_coerced(tmp_path: Path, raw: str, expected: bool) -> None:
    config = load_config(environ={"TUDU_OUTPUT_VERBOSE": raw}, cwd=tmp_path)

    assert config["output"]["verbose"] is expected


@pytest.mark.parametrize(
    ("name", "raw", "message"),
    [
        ("TUDU_OUTPUT_VERBOSE", "maybe", "must be a boolean"),
        ("TUDU_LOOKUP_MAX_CONCURRENCY", "many", "must be an integer"),
        ("TUDU_LOOKUP_TIMEOUT_SECONDS", "soon", "must be a number"),
    ],
)
def test_env_coercion_errors_name_the_variable(
    tmp_path: Path, name: str, raw: str, message: str
) -> None:
    with pytest.raises(ConfigLoadError, match=message) as excinfo:
        load_config(environ={name: raw}, cwd=tmp_path)

    assert name in str(excinfo.value)


def test_env_values_are_validated_after_coercion(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError, match="lookup.max_concurrency"):
        load_config(environ={"TUDU_LOOKUP_MAX_CONCURRENCY": "0"}, cwd=tmp_path)


def test_default_provider_can_come_from_env(tmp_path: Path) -> None:
    _write_config(tmp_path, _NOTION_TOML)

    config = load_config(environ={"TUDU_DEFAULT_PROVIDER": "tasks"}, cwd=tmp_path)

    assert config["default_provider"] == "tasks"


def test_unrelated_env_vars_are_ignored(tmp_path: Path) -> None:
    config = load_config(
        environ={"TUDU_PROVIDERS_TASKS_TYPE": "jira", "NOTION_TOKEN": "secret_x"},
        cwd=tmp_path,
    )

    assert config["providers"] == {}


def test_secret_in_file_is_rejected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        '[providers.tasks]\ntype = "notion"\ndatabase_id = "db"\ntoken = "secret_abc"\n',
    )

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(path, environ={})

    assert "providers.tasks.token" in str(excinfo.value)
    assert "secret_abc" not in str(excinfo.value)


def test_cli_override_is_validated(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError, match="mode"):
        load_config(environ={}, cwd=tmp_path, cli_overrides={"mode": "fix"})


def test_repeated_loads_are_identical(tmp_path: Path) -> None:
    path = _write_config(tmp_path, _NOTION_TOML)

    assert load_config(path, environ={}) == load_config(path, environ={})
