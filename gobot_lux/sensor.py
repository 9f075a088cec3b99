"""Configuration of the analog light sensor polled by the agent."""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

from gobot_lux.environment import BotEnvironment
from gobot_lux.errors import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_AIO_PIN = "7"
DEFAULT_AIO_POLLING_INTERVAL_MS = 2500
MAX_AIO_POLLING_INTERVAL_MS = 300_000


class SensorEnvironment(BotEnvironment):
    """Sensor-specific environment variables."""

    aio_pin: Optional[str] = None
    aio_polling_interval_ms: Optional[str] = None


class SensorConfig(BaseModel):
    """Pin and sampling period of the analog sensor."""

    model_config = ConfigDict(frozen=True)

    aio_pin: StrictStr = DEFAULT_AIO_PIN
    aio_polling_interval_ms: StrictInt = DEFAULT_AIO_POLLING_INTERVAL_MS

    def from_env(self) -> "SensorConfig":
        """Return a copy with the sensor's environment overrides applied."""
        env = SensorEnvironment()
        update = {}

        aio_pin = env.parsed("aio_pin", str)
        if aio_pin is not None:
            update["aio_pin"] = aio_pin

        polling_interval = env.parsed("aio_polling_interval_ms", int)
        if polling_interval is not None:
            update["aio_polling_interval_ms"] = polling_interval

        return self.model_copy(update=update)

    def verify(self) -> None:
        """Check the sensor settings.

        Raises:
            ConfigValidationError: On an empty pin or an out-of-range polling interval.
        """
        if not self.aio_pin:
            raise ConfigValidationError("sensor.aio_pin", self.aio_pin, "empty aio pin provided")

        if not 0 <= self.aio_polling_interval_ms <= MAX_AIO_POLLING_INTERVAL_MS:
            raise ConfigValidationError(
                "sensor.aio_polling_interval_ms",
                self.aio_polling_interval_ms,
                f"invalid aio polling interval: must be between 0 and {MAX_AIO_POLLING_INTERVAL_MS} "
                f"but is {self.aio_polling_interval_ms}",
            )

    def print(self) -> None:
        """Write the sensor settings to the log."""
        logger.info("AioPin=%s", self.aio_pin)
        logger.info("AioPollingIntervalMs=%d", self.aio_polling_interval_ms)
