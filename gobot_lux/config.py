"""Configuration model of the gobot-lux agent.

Responsibilities:
  - Build the baseline configuration with safe defaults.
  - Override it from ``GOBOT_LUX_*`` environment variables.
  - Expose derived values (stats bucket bounds) and log a summary.

``Config`` is frozen; every override produces a new value.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, model_validator

from gobot_lux import stats
from gobot_lux.environment import BotEnvironment
from gobot_lux.sensor import SensorConfig

logger = logging.getLogger(__name__)

DEFAULT_LOG_SENSOR = False
DEFAULT_INTERVAL_SECONDS = 30
DEFAULT_METRICS_ADDRESS = ":9194"
DEFAULT_STATS_BUCKETS_SECONDS = (15, 30, 60, 120, 300, 600, 1800)


class MqttConfig(BaseModel):
    """Broker endpoint, topics and TLS client credentials."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: StrictStr = Field(default="", alias="mqtt_host")
    topic: StrictStr = Field(default="", alias="mqtt_topic")
    stats_topic: StrictStr = Field(default="", alias="mqtt_stats_topic")
    client_key_file: StrictStr = Field(default="", alias="mqtt_ssl_key_file")
    client_cert_file: StrictStr = Field(default="", alias="mqtt_ssl_cert_file")

    def uses_ssl_certs(self) -> bool:
        """Return True if client certificate authentication is configured."""
        return bool(self.client_key_file) and bool(self.client_cert_file)

    def print(self) -> None:
        logger.info("Host=%s", self.host)
        logger.info("Topic=%s", self.topic)
        if self.stats_topic:
            logger.info("StatsTopic=%s", self.stats_topic)
        if self.uses_ssl_certs():
            logger.info("ClientCertFile=%s", self.client_cert_file)
            logger.info("ClientKeyFile=%s", self.client_key_file)


def _embedded_keys(model: type[BaseModel]) -> frozenset[str]:
    return frozenset(info.alias or name for name, info in model.model_fields.items())


def _with_aliases(model: type[BaseModel], values: dict[str, Any]) -> dict[str, Any]:
    """Rename field-name keys (``host``) to their document keys (``mqtt_host``)."""
    aliases = {name: info.alias for name, info in model.model_fields.items() if info.alias}
    return {aliases.get(key, key): value for key, value in values.items()}


class Config(BaseModel):
    """Resolved agent configuration.

    The broker and sensor sub-configurations are embedded: in a JSON document
    their keys sit next to the agent's own keys (``mqtt_host``, ``aio_pin``, ...).
    The nested form (``{"mqtt": {...}}``) is accepted as well, keyed by either
    document keys or field names, and wins over flat keys.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    placement: StrictStr = ""
    metrics_address: StrictStr = Field(default=DEFAULT_METRICS_ADDRESS, alias="metrics_addr")
    poll_interval_seconds: StrictInt = Field(default=DEFAULT_INTERVAL_SECONDS, alias="interval_s")
    stats_bucket_seconds: list[StrictInt] = Field(
        default_factory=lambda: list(DEFAULT_STATS_BUCKETS_SECONDS), alias="stat_intervals"
    )
    log_sensor_readings: StrictBool = Field(default=DEFAULT_LOG_SENSOR, alias="log_sensor")
    mqtt: MqttConfig = Field(default_factory=MqttConfig)
    sensor: SensorConfig = Field(default_factory=SensorConfig)

    @model_validator(mode="before")
    @classmethod
    def _lift_embedded_keys(cls, data: Any) -> Any:
        """Move flat broker and sensor keys into their sub-configurations."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        for name, model in (("mqtt", MqttConfig), ("sensor", SensorConfig)):
            nested = data.get(name)
            if isinstance(nested, BaseModel):
                nested = nested.model_dump(by_alias=True)
            if nested is not None and not isinstance(nested, dict):
                continue

            keys = _embedded_keys(model)
            flat = {key: data.pop(key) for key in list(data) if key in keys}
            if flat or nested:
                data[name] = {**flat, **_with_aliases(model, nested or {})}
        return data

    def to_document(self) -> dict[str, Any]:
        """Return the configuration as a flat JSON-compatible document."""
        document = self.model_dump(by_alias=True, exclude={"mqtt", "sensor"})
        document.update(self.mqtt.model_dump(by_alias=True))
        document.update(self.sensor.model_dump(by_alias=True))
        return document

    def get_stat_interval_min(self) -> int:
        """Smallest stats bucket in seconds. Raises ``EmptyIntervalsError`` if there are none."""
        return stats.interval_min(self.stats_bucket_seconds)

    def get_stat_interval_max(self) -> int:
        """Largest stats bucket in seconds. Raises ``EmptyIntervalsError`` if there are none."""
        return stats.interval_max(self.stats_bucket_seconds)

    def verify(self) -> None:
        """Validate the configuration, raising ``ConfigValidationError`` on the first violation."""
        from gobot_lux.validation import validate_config  # pylint: disable=import-outside-toplevel

        validate_config(self)

    def print(self) -> None:
        """Write the resolved configuration to the log."""
        logger.info("-----------------")
        logger.info("Configuration:")
        logger.info("Placement=%s", self.placement)
        logger.info("LogSensor=%s", self.log_sensor_readings)
        logger.info("MetricConfig=%s", self.metrics_address)
        logger.info("IntervalSecs=%d", self.poll_interval_seconds)
        self.mqtt.print()
        if self.stats_bucket_seconds:
            logger.info("StatIntervals=%s", self.stats_bucket_seconds)

        self.sensor.print()

        logger.info("-----------------")


def default_config() -> Config:
    """Return the baseline configuration. Never fails."""
    return Config(
        log_sensor_readings=DEFAULT_LOG_SENSOR,
        poll_interval_seconds=DEFAULT_INTERVAL_SECONDS,
        metrics_address=DEFAULT_METRICS_ADDRESS,
        stats_bucket_seconds=list(DEFAULT_STATS_BUCKETS_SECONDS),
        sensor=SensorConfig(),
    )


class AgentEnvironment(BotEnvironment):
    """Agent-level environment variables, e.g. ``GOBOT_LUX_LOCATION``."""

    location: Optional[str] = None
    log_sensor: Optional[str] = None
    interval_s: Optional[str] = None
    metrics_addr: Optional[str] = None
    mqtt_host: Optional[str] = None
    mqtt_topic: Optional[str] = None
    mqtt_stats_topic: Optional[str] = None
    ssl_client_key_file: Optional[str] = None
    ssl_client_cert_file: Optional[str] = None


# (variable suffix, type, field)
_AGENT_OVERRIDES = (
    ("location", str, "placement"),
    ("log_sensor", bool, "log_sensor_readings"),
    ("interval_s", int, "poll_interval_seconds"),
    ("metrics_addr", str, "metrics_address"),
)
_MQTT_OVERRIDES = (
    ("mqtt_host", str, "host"),
    ("mqtt_topic", str, "topic"),
    ("mqtt_stats_topic", str, "stats_topic"),
    ("ssl_client_key_file", str, "client_key_file"),
    ("ssl_client_cert_file", str, "client_cert_file"),
)


def _collect_overrides(env: BotEnvironment, overrides: tuple) -> dict[str, Any]:
    update = {}
    for variable, target, field in overrides:
        value = env.parsed(variable, target)
        if value is not None:
            update[field] = value
    return update


def config_from_env() -> Config:
    """Build the configuration from defaults overridden by environment variables.

    Each variable is applied independently; unset or malformed variables leave
    their field at the default. This function never raises.
    """
    conf = default_config()
    env = AgentEnvironment()

    update = _collect_overrides(env, _AGENT_OVERRIDES)
    update["mqtt"] = conf.mqtt.model_copy(update=_collect_overrides(env, _MQTT_OVERRIDES))
    update["sensor"] = conf.sensor.from_env()

    return conf.model_copy(update=update)
