"""Additional validation utilities for scope settings."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(settings_dict: Dict[str, Any]) -> List[str]:
    """
    Check raw settings for legal but risky choices.

    Args:
        settings_dict: Raw settings dictionary (file merged with overrides)

    Returns:
        List of warning messages
    """
    warning_messages = []

    if settings_dict.get("swallow_internal_errors") is True:
        warning_messages.append(
            "swallow_internal_errors is enabled: failures while pushing scope "
            "variables will be logged and the variables silently dropped"
        )

    logging_section = settings_dict.get("logging", {})
    if isinstance(logging_section, dict):
        level = logging_section.get("level")
        if isinstance(level, str) and level.strip().upper() == "DEBUG":
            warning_messages.append(
                "logging.level is DEBUG: every scope open and close will be logged"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
