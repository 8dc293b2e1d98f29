"""Environment variable overrides for scope settings."""

import os
from typing import Any, Dict

from .exceptions import ConfigurationError
from .models import LogFormat, LogLevel, PropagationMode

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def load_environment_overrides() -> Dict[str, Any]:
    """
    Read and validate environment variable overrides.

    Optional environment variables:
    - LOGSCOPE_PROPAGATION: thread or logical
    - LOGSCOPE_SWALLOW_ERRORS: true/false (also 1/0, yes/no, on/off)
    - LOGSCOPE_STACK_KEY: reserved key holding the scope stack
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL
    - LOG_FORMAT: json or key-value
    - ENVIRONMENT: environment label stamped on every log record

    Returns:
        Nested dict shaped like ScopeSettings, containing only the values
        that were set (empty dict when nothing is overridden)

    Raises:
        ConfigurationError: If any variable holds an invalid value
    """
    errors = []
    overrides: Dict[str, Any] = {}
    logging_overrides: Dict[str, Any] = {}

    propagation = os.getenv("LOGSCOPE_PROPAGATION")
    swallow_errors = os.getenv("LOGSCOPE_SWALLOW_ERRORS")
    stack_key = os.getenv("LOGSCOPE_STACK_KEY")
    log_level = os.getenv("LOG_LEVEL")
    log_format = os.getenv("LOG_FORMAT")
    environment = os.getenv("ENVIRONMENT")

    if propagation:
        valid_modes = [mode.value for mode in PropagationMode]
        if propagation.strip().lower() in valid_modes:
            overrides["propagation"] = propagation.strip().lower()
        else:
            errors.append(
                f"Invalid LOGSCOPE_PROPAGATION: '{propagation}'. Must be one of: {', '.join(valid_modes)}"
            )

    if swallow_errors:
        normalized = swallow_errors.strip().lower()
        if normalized in _TRUE_VALUES:
            overrides["swallow_internal_errors"] = True
        elif normalized in _FALSE_VALUES:
            overrides["swallow_internal_errors"] = False
        else:
            errors.append(
                f"Invalid LOGSCOPE_SWALLOW_ERRORS: '{swallow_errors}'. Must be true or false."
            )

    if stack_key:
        overrides["stack_key"] = stack_key.strip()

    if log_level:
        valid_levels = [level.value for level in LogLevel]
        if log_level.upper() in valid_levels:
            logging_overrides["level"] = log_level.upper()
        else:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )

    if log_format:
        valid_formats = [fmt.value for fmt in LogFormat]
        if log_format.strip().lower() in valid_formats:
            logging_overrides["format"] = log_format.strip().lower()
        else:
            errors.append(
                f"Invalid LOG_FORMAT: '{log_format}'. Must be one of: {', '.join(valid_formats)}"
            )

    if environment:
        logging_overrides["environment"] = environment.strip()

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Check the LOGSCOPE_* and LOG_* variables in your shell or .env file",
                "Unset a variable to fall back to the settings file or defaults",
            ],
            source="environment",
        )

    if logging_overrides:
        overrides["logging"] = logging_overrides

    return overrides
