"""Settings management for logging scopes."""

from .environment import load_environment_overrides
from .exceptions import ConfigurationError
from .loader import load_settings, validate_settings_file
from .models import (
    DEFAULT_STACK_KEY,
    LogFormat,
    LogLevel,
    LoggingConfig,
    PropagationMode,
    ScopeSettings,
)

__all__ = [
    # Loader functions
    "load_settings",
    "validate_settings_file",
    "load_environment_overrides",
    # Models
    "ScopeSettings",
    "LoggingConfig",
    "DEFAULT_STACK_KEY",
    # Enums
    "PropagationMode",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
