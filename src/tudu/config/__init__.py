"""Configuration loading and validation for ``tudu.toml``."""

from tudu.config.loader import ConfigLoadError, load_config
from tudu.config.schema import (
    ConfigValidationError,
    ConfigValidationIssue,
    TuduConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "TuduConfig",
    "assert_valid_config",
    "default_config",
    "load_config",
    "merge_config",
    "validate_config",
]
