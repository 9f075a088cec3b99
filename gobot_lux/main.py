"""Startup entrypoint: resolves and validates the agent configuration.

Responsibilities:
  - Read the configuration from a JSON file when ``--config`` is given,
    otherwise from ``GOBOT_LUX_*`` environment variables.
  - Log the resolved configuration.
  - Abort with a non-zero exit code before any sensor or broker work begins
    if the configuration is unusable.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from gobot_lux.config import Config, config_from_env
from gobot_lux.errors import ConfigError, ConfigValidationError
from gobot_lux.loader import read_json_config
from gobot_lux.log_helper import _configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resolve and validate the gobot-lux agent configuration",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        help="Path to a JSON configuration file. Environment variables are used if omitted.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set the logging level",
    )
    return parser.parse_args(argv)


def load_config(config_file: Optional[str]) -> Config:
    """Resolve the configuration from ``config_file`` or, if None, from the environment.

    Raises:
        ConfigReadError: If the file cannot be read.
        ConfigDecodeError: If the file cannot be decoded.
    """
    if config_file:
        logger.info("Reading configuration from %s", config_file)
        return read_json_config(config_file)

    logger.info("Reading configuration from environment")
    return config_from_env()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Application entrypoint.

    Returns:
        0 if the configuration is valid, 1 otherwise.
    """
    args = parse_args(argv)
    _configure_logging(args.log_level)

    try:
        config = load_config(args.config)
        config.print()
        config.verify()
    except ConfigValidationError as exc:
        logger.error("Invalid configuration for field %r: %s", exc.field, exc)
        return 1
    except ConfigError as exc:
        logger.error("Could not load configuration: %s", exc)
        return 1

    logger.info("Configuration for placement %r is valid", config.placement)
    return 0


if __name__ == "__main__":
    sys.exit(main())
