"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class PropagationMode(str, Enum):
    """How ambient scope state propagates between execution branches."""

    # One context per OS thread, never shared
    THREAD = "thread"
    # Flows into asyncio tasks and explicitly flowing threads (copy-on-write)
    LOGICAL = "logical"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


DEFAULT_STACK_KEY = "logscope.LoggingScopes"


def check_stack_key(key: str) -> str:
    """Reject reserved keys that could be mistaken for ordinary variables.

    Raises:
        ValueError: If key is empty, contains whitespace or has no dot
    """
    if not key:
        raise ValueError("stack_key cannot be empty")
    if any(ch.isspace() for ch in key):
        raise ValueError("stack_key cannot contain whitespace")
    if "." not in key:
        raise ValueError(
            "stack_key must be namespaced with a dot (e.g. 'myapp.LoggingScopes') "
            "so it cannot collide with variable names"
        )
    return key


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )
    service: str = Field("logscope", min_length=1, description="Static service field")
    environment: str = Field("local", min_length=1, description="Environment label")

    @field_validator("service", "environment")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from string fields."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    model_config = {"use_enum_values": True, "validate_default": True}


class ScopeSettings(BaseModel):
    """Root configuration object for logging scopes."""

    propagation: PropagationMode = Field(
        PropagationMode.THREAD,
        description="Ambient propagation strategy (thread or logical)",
    )
    swallow_internal_errors: bool = Field(
        False,
        description=(
            "Log and ignore unexpected failures while pushing variables "
            "instead of raising InvalidOperationError"
        ),
    )
    stack_key: str = Field(
        DEFAULT_STACK_KEY,
        min_length=1,
        description="Reserved variable key holding the scope stack",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @field_validator("stack_key")
    @classmethod
    def validate_stack_key(cls, v: str) -> str:
        return check_stack_key(v)
