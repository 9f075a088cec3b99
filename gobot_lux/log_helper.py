"""Logging setup for the startup wrapper."""

import logging
import sys


def _configure_logging(log_level: str) -> None:
    """Send log records to stdout, where the agent's supervisor collects them.

    The configuration summary and any startup failure are logged once, before
    any sensor or broker work, so records only carry a timestamp, the level and
    the emitting module. Unknown level names fall back to INFO.

    Args:
        log_level: Level name such as ``debug`` or ``WARNING``.
    """
    logging.basicConfig(
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
