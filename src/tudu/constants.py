"""Stable constants shared across tudu modules."""

from __future__ import annotations

from typing import Final

CONFIG_SCHEMA_VERSION: Final[int] = 1
DEFAULT_CONFIG_FILE: Final[str] = "tudu.toml"
ENV_PREFIX: Final[str] = "TUDU_"

# Ignore files read from the scan root.
IGNORE_FILENAMES: Final[tuple[str, ...]] = (".gitignore", ".tuduignore")

SCANNED_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        "rs",
        "py",
        "js",
        "ts",
        "java",
        "cpp",
        "c",
        "h",
        "go",
        "rb",
        "php",
        "swift",
        "kt",
        "scala",
        "cs",
        "sh",
        "bash",
        "zsh",
        "yaml",
        "yml",
        "toml",
        "md",
        "html",
        "css",
        "scss",
        "less",
    }
)

PROVIDER_KINDS: Final[tuple[str, ...]] = ("github", "jira", "notion")

NOTION_API_URL: Final[str] = "https://api.notion.com/v1"
NOTION_API_VERSION: Final[str] = "2022-06-28"
GITHUB_API_URL: Final[str] = "https://api.github.com"
GITHUB_API_VERSION: Final[str] = "2022-11-28"

DEFAULT_MAX_CONCURRENCY: Final[int] = 8
DEFAULT_TIMEOUT_SECONDS: Final[float] = 10.0

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_MAX_CONCURRENCY",
    "DEFAULT_TIMEOUT_SECONDS",
    "ENV_PREFIX",
    "GITHUB_API_URL",
    "GITHUB_API_VERSION",
    "IGNORE_FILENAMES",
    "NOTION_API_URL",
    "NOTION_API_VERSION",
    "PROVIDER_KINDS",
    "SCANNED_EXTENSIONS",
]
