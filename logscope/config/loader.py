"""Settings loader for logging scopes."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .environment import load_environment_overrides
from .exceptions import ConfigurationError
from .models import ScopeSettings
from .validators import check_for_warnings, emit_warnings

DEFAULT_SETTINGS_FILES = (
    Path("logscope.yaml"),
    Path("config") / "logscope.yaml",
)


def load_settings(
    config_path: Optional[Path] = None, apply_environment: bool = True
) -> ScopeSettings:
    """
    Load and validate scope settings.

    Resolution order (later wins):
    1. Model defaults
    2. YAML file: config_path if given, else the first of logscope.yaml,
       config/logscope.yaml that exists (no file at all is fine)
    3. Environment variable overrides (LOGSCOPE_*, LOG_LEVEL, LOG_FORMAT)

    Args:
        config_path: Optional explicit path to a settings file
        apply_environment: Whether to apply environment overrides

    Returns:
        Validated ScopeSettings

    Raises:
        ConfigurationError: If the file is missing (explicit path only),
            unreadable, or any value is invalid
    """
    settings_path = _find_settings_file(config_path)
    settings_dict = _read_settings_file(settings_path)
    source = settings_path if settings_path is not None else "defaults"

    if apply_environment:
        overrides = load_environment_overrides()
        if overrides:
            settings_dict = _merge(settings_dict, overrides)
            source = f"{source} + environment"

    warnings = check_for_warnings(settings_dict)
    if warnings:
        emit_warnings(warnings)

    try:
        return ScopeSettings.model_validate(settings_dict)
    except ValidationError as e:
        raise ConfigurationError.from_validation_error(e, source=source) from e


def _find_settings_file(config_path: Optional[Path]) -> Optional[Path]:
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified settings file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Omit the path to use logscope.yaml or built-in defaults",
                ],
            )
        return config_path

    for candidate in DEFAULT_SETTINGS_FILES:
        if candidate.exists():
            return candidate

    return None


def _read_settings_file(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}

    try:
        with open(path, "r") as f:
            settings_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML settings: {e}",
            suggestions=[
                "Check YAML syntax in your settings file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
            source=path,
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read settings file: {e}",
            suggestions=[f"Ensure {path} is readable", "Check file permissions"],
            source=path,
        ) from e

    if settings_dict is None:
        # Empty file means "all defaults"
        return {}

    if not isinstance(settings_dict, dict):
        raise ConfigurationError(
            f"Settings file {path} must contain a mapping at the top level",
            suggestions=["Use 'key: value' pairs, e.g. 'propagation: logical'"],
            source=path,
        )

    return settings_dict


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_settings_file(config_path: Path) -> bool:
    """
    Validate a settings file without applying environment overrides.

    Args:
        config_path: Path to settings file

    Returns:
        True if valid, False otherwise (errors printed to stdout)
    """
    try:
        load_settings(config_path, apply_environment=False)
        print(f"✓ Settings file {config_path} is valid")
        return True
    except ConfigurationError as e:
        print(f"✗ Settings validation failed:\n{e}")
        return False
