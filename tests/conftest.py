"""
Shared fixtures for the configuration tests.
"""

import json
import os
from logging import getLogger
from pathlib import Path
from typing import Any, Callable

import pytest

from gobot_lux.config import Config, MqttConfig, default_config
from gobot_lux.environment import BOT_NAME
from gobot_lux.sensor import SensorConfig

logger = getLogger(__name__)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every bot variable inherited from the surrounding environment."""
    prefix = f"{BOT_NAME.upper()}_"
    for name in list(os.environ):
        if name.upper().startswith(prefix):
            logger.info("Unsetting inherited variable %s", name)
            monkeypatch.delenv(name)


@pytest.fixture
def valid_config() -> Config:
    """A configuration that passes every validation rule."""
    return default_config().model_copy(
        update={
            "placement": "kitchen",
            "mqtt": MqttConfig(host="tcp://mqtt.example.com:1883", topic="sensors/kitchen/lux"),
            "sensor": SensorConfig(aio_polling_interval_ms=0),
        }
    )


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[Any], str]:
    """Write a JSON document (or raw text) to a temp file and return its path."""

    def _write(content: Any, name: str = "config.json") -> str:
        path = tmp_path / name
        path.write_text(content if isinstance(content, str) else json.dumps(content), encoding="utf-8")
        return str(path)

    return _write
