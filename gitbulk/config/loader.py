# gitbulk Configuration Loader
# Locates, reads, writes and checks the YAML configuration file

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from gitbulk.config.defaults import generate_default_config, get_default_config
from gitbulk.config.schema import GitBulkConfig

CONFIG_ENV_VAR = "GITBULK_CONFIG"
CONFIG_FILENAME = "config.yaml"


def get_config_dir() -> Path:
    """Directory holding the per-user configuration."""
    return Path.home() / ".config" / "gitbulk"


def get_config_path() -> Path:
    """
    Path of the active configuration file.

    GITBULK_CONFIG, when set, points at an alternative file.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / CONFIG_FILENAME


def _resolve(config_path: Optional[Path]) -> Path:
    return get_config_path() if config_path is None else config_path


def _read_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        elif value is not None:
            merged[key] = value
    return merged


def format_validation_errors(error: ValidationError) -> list[str]:
    """Render pydantic errors as ``section -> field: message`` lines."""
    return [" -> ".join(str(part) for part in item["loc"]) + f": {item['msg']}" for item in error.errors()]


def load_config(config_path: Optional[Path] = None) -> GitBulkConfig:
    """
    Read the configuration file and fill in missing keys from the defaults.

    Args:
        config_path: File to read. Defaults to get_config_path().

    Returns:
        Validated GitBulkConfig.

    Raises:
        FileNotFoundError: If the file is missing.
        ValidationError: If a value is out of range or of the wrong type.
    """
    path = _resolve(config_path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}\nRun 'gitbulk config init' to create one.")

    data = _read_yaml(path) or {}
    if isinstance(data, dict):
        data = _deep_merge(get_default_config(), data)
    return GitBulkConfig.model_validate(data)


def load_config_or_default(config_path: Optional[Path] = None) -> GitBulkConfig:
    """Like load_config, but a missing file yields the built-in defaults."""
    try:
        return load_config(config_path)
    except FileNotFoundError:
        return GitBulkConfig.model_validate(get_default_config())


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Write the commented default file unless one is already present.

    Returns:
        Tuple of (path, created).
    """
    path = _resolve(config_path)
    if path.exists():
        return path, False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_default_config(), encoding="utf-8")
    return path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Check a configuration file and collect every problem found.

    Unlike load_config, unknown top-level sections are reported and an
    empty file counts as an error.

    Returns:
        Tuple of (valid, messages).
    """
    path = _resolve(config_path)
    if not path.is_file():
        return False, [f"Configuration file not found: {path}"]

    try:
        data = _read_yaml(path)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]
    if not isinstance(data, dict):
        return False, ["Configuration must be a mapping of sections"]

    problems = [f"{name}: unknown section" for name in sorted(set(data) - set(GitBulkConfig.model_fields))]
    try:
        GitBulkConfig.model_validate(data)
    except ValidationError as e:
        problems.extend(format_validation_errors(e))

    return not problems, problems
