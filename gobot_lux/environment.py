"""Environment variable access shared by the agent and its sub-configurations.

Every variable is namespaced by the bot name, e.g. ``GOBOT_LUX_INTERVAL_S``.
Variables are read as raw strings by pydantic-settings and parsed one at a
time, so a malformed value only drops its own override.
"""

import logging
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, StringConstraints, TypeAdapter, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

BOT_NAME = "gobot_lux"

# Values accepted for integer and boolean variables, e.g. "-5" or "TRUE".
# Anything else ("45.0", "4_5", " 45", "yes", "on") is malformed.
_TRUE_VALUES = ("1", "t", "T", "TRUE", "true", "True")
_FALSE_VALUES = ("0", "f", "F", "FALSE", "false", "False")

_ADAPTERS: dict[type, TypeAdapter] = {
    str: TypeAdapter(str),
    int: TypeAdapter(Annotated[str, StringConstraints(pattern=r"^[+-]?[0-9]+$"), AfterValidator(int)]),
    bool: TypeAdapter(
        Annotated[Literal[_TRUE_VALUES + _FALSE_VALUES], AfterValidator(lambda value: value in _TRUE_VALUES)]
    ),
}


def compute_env_name(name: str) -> str:
    """Return the namespaced variable name for ``name``."""
    return f"{BOT_NAME.upper()}_{name.upper()}"


class BotEnvironment(BaseSettings):
    """Raw view of the bot's environment variables.

    Subclasses declare one ``Optional[str]`` field per variable suffix. Empty
    variables count as unset.
    """

    model_config = SettingsConfigDict(
        env_prefix=f"{BOT_NAME.upper()}_",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    def parsed(self, name: str, target: type) -> Optional[Any]:
        """Parse the variable ``name`` into ``target``.

        Returns:
            The parsed value, or None if the variable is unset or malformed.
        """
        raw = getattr(self, name)
        if raw is None:
            return None

        try:
            return _ADAPTERS[target].validate_python(raw)
        except ValidationError:
            logger.warning(
                "Ignoring %s=%r: not a valid %s, keeping the current value",
                compute_env_name(name),
                raw,
                target.__name__,
            )
            return None
