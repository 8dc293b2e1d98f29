"""Settings errors."""

from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from logscope.exceptions import ScopeError

_SETTINGS_HINTS = [
    "propagation must be 'thread' or 'logical'",
    "logging.format must be 'json' or 'key-value'",
    "stack_key must be a dotted name without whitespace",
]


class ConfigurationError(ScopeError):
    """Raised when scope settings cannot be loaded or fail validation.

    Every problem found in one source (a settings file or the environment)
    is collected so they can be fixed together.

    Attributes:
        message: One-line summary
        source: Settings file path or "environment", when known
        errors: Individual problems, in the order they were found
        suggestions: Hints for fixing them
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
        source: Optional[Union[str, Path]] = None,
    ):
        self.message = message
        self.source = str(source) if source is not None else None
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        super().__init__(self._render())

    @classmethod
    def from_validation_error(
        cls, error: ValidationError, source: Optional[Union[str, Path]] = None
    ) -> "ConfigurationError":
        """Translate a pydantic ValidationError into readable messages."""
        return cls(
            "Settings validation failed",
            errors=[_describe(item) for item in error.errors()],
            suggestions=_SETTINGS_HINTS,
            source=source,
        )

    def _render(self) -> str:
        lines = [self.message if self.source is None else f"{self.message} ({self.source})"]
        if self.errors:
            lines.append("\nValidation Errors:")
            lines += [f"  {number}. {text}" for number, text in enumerate(self.errors, 1)]
        if self.suggestions:
            lines.append("\nSuggestions:")
            lines += [f"  - {hint}" for hint in self.suggestions]
        return "\n".join(lines)


def _describe(item) -> str:
    field = " -> ".join(str(part) for part in item["loc"]) or "settings"
    kind = item["type"]

    if kind == "missing":
        return f"Missing required field: {field}"
    if kind in ("string_type", "bool_type", "bool_parsing", "dict_type", "model_type"):
        expected = kind.split("_")[0]
        return f"Invalid type for '{field}': expected {expected}, got {item.get('input')!r}"
    if kind == "enum":
        return f"Invalid value for '{field}': {item['msg']}"
    return f"{field}: {item['msg']}"
