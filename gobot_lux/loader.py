"""JSON file loader.

The document is overlaid onto the default configuration: keys missing from
the file keep their defaults and ``null`` values are ignored.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from gobot_lux.config import Config, default_config
from gobot_lux.errors import ConfigDecodeError, ConfigReadError

logger = logging.getLogger(__name__)


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']} (got {err['input']!r})" for err in exc.errors()
    )


def _partial_config(defaults: Config, document: dict[str, Any], exc: ValidationError) -> Config:
    """Apply only the keys of ``document`` that did not take part in ``exc``."""
    rejected = set()
    for err in exc.errors():
        rejected.update(err["loc"][:2])

    accepted = {key: value for key, value in document.items() if key not in rejected}
    try:
        return Config.model_validate({**defaults.to_document(), **accepted})
    except ValidationError:
        return defaults


def read_json_config(file_path: str) -> Config:
    """Read a JSON configuration file and merge it onto the defaults.

    Args:
        file_path: Path of the JSON document.

    Returns:
        The merged, not yet validated, configuration.

    Raises:
        ConfigReadError: If the file cannot be read.
        ConfigDecodeError: If the file is not UTF-8, not a JSON object, or a value has the wrong
            type. ``exc.config`` holds the defaults with every well-formed key applied.
    """
    defaults = default_config()
    try:
        with open(file_path, "r", encoding="utf-8") as handle:
            content = handle.read()
    except UnicodeDecodeError as exc:
        raise ConfigDecodeError(f"could not decode config file {file_path}: {exc}", config=defaults) from exc
    except OSError as exc:
        raise ConfigReadError(file_path, exc) from exc

    logger.debug("Read %d characters of configuration from %s", len(content), file_path)

    try:
        document = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigDecodeError(f"could not decode config file {file_path}: {exc}", config=defaults) from exc

    if not isinstance(document, dict):
        raise ConfigDecodeError(
            f"could not decode config file {file_path}: expected a JSON object, got {type(document).__name__}",
            config=defaults,
        )

    document = {key: value for key, value in document.items() if value is not None}
    try:
        return Config.model_validate({**defaults.to_document(), **document})
    except ValidationError as exc:
        raise ConfigDecodeError(
            f"could not decode config file {file_path}: {_describe(exc)}",
            config=_partial_config(defaults, document, exc),
        ) from exc
