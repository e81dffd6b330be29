# gitbulk Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from gitbulk.config.defaults import DEFAULT_CONFIG, generate_default_config, get_default_config
from gitbulk.config.loader import (
    ensure_config_exists,
    format_validation_errors,
    get_config_path,
    load_config,
    load_config_or_default,
    validate_config_file,
)
from gitbulk.config.schema import (
    CloneMethod,
    CloneSettings,
    GitBulkConfig,
    OutputConfig,
    SyncSettings,
)

__all__ = [
    # Schema
    "GitBulkConfig",
    "SyncSettings",
    "CloneSettings",
    "OutputConfig",
    "CloneMethod",
    # Loader
    "load_config",
    "load_config_or_default",
    "get_config_path",
    "ensure_config_exists",
    "format_validation_errors",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "get_default_config",
    "generate_default_config",
]
