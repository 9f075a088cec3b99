"""Exceptions raised while resolving and validating the agent configuration."""

from typing import Any, Optional


class ConfigError(Exception):
    """Base class for every configuration failure reported at startup."""


class ConfigReadError(ConfigError):
    """The configuration file could not be read."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"could not read config from file: {cause}")
        self.path = path
        self.cause = cause


class ConfigDecodeError(ConfigError):
    """The configuration file is not valid JSON or holds a value of the wrong type.

    ``config`` holds the default-based configuration with every well-formed key of
    the document applied, so callers may still decide to use it.
    """

    def __init__(self, message: str, config: Any = None) -> None:
        super().__init__(message)
        self.config = config


class ConfigValidationError(ConfigError):
    """A resolved configuration violates one of the validation rules."""

    def __init__(self, field: str, value: Any, message: str, rule: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value
        self.rule = rule


class RuleRegistrationError(ConfigError):
    """A named validation rule could not be installed in the validation engine."""


class EmptyIntervalsError(ValueError):
    """Raised when min/max is requested over an empty list of stats buckets."""
