"""
Tests for the validation engine and the ordered rule set.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from gobot_lux import validation
from gobot_lux.config import default_config
from gobot_lux.errors import ConfigValidationError, RuleRegistrationError
from gobot_lux.patterns import match_topic
from gobot_lux.sensor import SensorConfig
from gobot_lux.validation import BROKER_FORMAT, TOPIC_FORMAT, ValidationEngine, get_engine, validate_config


def _with(config, **update):
    return config.model_copy(update=update)


def _with_mqtt(config, **update):
    return config.model_copy(update={"mqtt": config.mqtt.model_copy(update=update)})


def test_valid_config(valid_config) -> None:
    validate_config(valid_config)
    valid_config.verify()


def test_defaults_alone_are_not_valid() -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        default_config().verify()

    assert exc_info.value.field == "placement"


class TestPollInterval:
    """Test cases for the poll interval bounds."""

    def test_every_valid_interval(self, valid_config):
        for interval in range(1, 301):
            validate_config(_with(valid_config, poll_interval_seconds=interval))

    @pytest.mark.parametrize("interval", [0, 301, -1])
    def test_out_of_range(self, valid_config, interval):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(_with(valid_config, poll_interval_seconds=interval))

        assert exc_info.value.field == "poll_interval_seconds"
        assert exc_info.value.value == interval
        assert str(interval) in str(exc_info.value)

    def test_lower_than_sensor_interval(self, valid_config):
        config = _with(valid_config, poll_interval_seconds=30, sensor=SensorConfig(aio_polling_interval_ms=45000))

        with pytest.raises(ConfigValidationError, match="aioPollingIntervalMs"):
            validate_config(config)

    def test_sensor_interval_is_truncated(self, valid_config):
        config = _with(valid_config, poll_interval_seconds=30, sensor=SensorConfig(aio_polling_interval_ms=30999))

        validate_config(config)


def test_placement_reported_first(valid_config) -> None:
    config = _with(valid_config, placement="", poll_interval_seconds=0, stats_bucket_seconds=[5])

    with pytest.raises(ConfigValidationError) as exc_info:
        validate_config(config)

    assert exc_info.value.field == "placement"


def test_sensor_error_is_propagated(valid_config) -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        validate_config(_with(valid_config, sensor=SensorConfig(aio_pin="")))

    assert exc_info.value.field == "sensor.aio_pin"
    assert str(exc_info.value) == "empty aio pin provided"


class TestStatsBuckets:
    """Test cases for the stats bucket rules."""

    @pytest.mark.parametrize("buckets", [[10], [3600], [15, 30, 60], [1800, 10, 600], []])
    def test_valid_buckets(self, valid_config, buckets):
        validate_config(_with(valid_config, stats_bucket_seconds=buckets))

    def test_element_below_floor(self, valid_config):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(_with(valid_config, stats_bucket_seconds=[5, 30]))

        assert exc_info.value.field == "stats_bucket_seconds"
        assert "5" in str(exc_info.value)

    def test_element_above_ceiling(self, valid_config):
        with pytest.raises(ConfigValidationError, match="3600"):
            validate_config(_with(valid_config, stats_bucket_seconds=[30, 3601]))

    def test_system_ceiling(self, valid_config):
        """The looser system-wide maximum is checked before the per-element bound."""
        with pytest.raises(ConfigValidationError, match="maximal value in stats bucket must not be > 7200: 7300"):
            validate_config(_with(valid_config, stats_bucket_seconds=[15, 7300]))

    def test_minimum_below_one(self, valid_config):
        with pytest.raises(ConfigValidationError, match="minimal value in stats bucket must not be < 1: 0"):
            validate_config(_with(valid_config, stats_bucket_seconds=[60, 0]))


class TestMetricsAddress:
    """Test cases for the metrics listen address."""

    @pytest.mark.parametrize("address", ["", ":9194", "127.0.0.1:9100"])
    def test_valid(self, valid_config, address):
        validate_config(_with(valid_config, metrics_address=address))

    def test_invalid(self, valid_config):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(_with(valid_config, metrics_address="not an address"))

        assert exc_info.value.field == "metrics_address"
        assert exc_info.value.rule == "tcp_addr"


class TestBroker:
    """Test cases for the broker sub-configuration rules."""

    @pytest.mark.parametrize("host", ["", "has space:1883", "ftp://broker:21"])
    def test_invalid_host(self, valid_config, host):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(_with_mqtt(valid_config, host=host))

        assert exc_info.value.field == "mqtt.host"
        assert exc_info.value.rule == BROKER_FORMAT

    @pytest.mark.parametrize("topic", ["", "home/+foo", "home/#/lux"])
    def test_invalid_topic(self, valid_config, topic):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(_with_mqtt(valid_config, topic=topic))

        assert exc_info.value.field == "mqtt.topic"
        assert exc_info.value.rule == TOPIC_FORMAT

    def test_stats_topic_is_optional(self, valid_config):
        validate_config(_with_mqtt(valid_config, stats_topic=""))
        validate_config(_with_mqtt(valid_config, stats_topic="sensors/kitchen/stats"))

    def test_invalid_stats_topic(self, valid_config):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(_with_mqtt(valid_config, stats_topic="sensors//stats"))

        assert exc_info.value.field == "mqtt.stats_topic"

    def test_ssl_files_must_be_paired(self, valid_config):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(_with_mqtt(valid_config, client_key_file="/etc/lux/client.key"))

        assert exc_info.value.field == "mqtt.client_cert_file"

        validate_config(
            _with_mqtt(valid_config, client_key_file="/etc/lux/client.key", client_cert_file="/etc/lux/client.crt")
        )


class TestEngine:
    """Test cases for building the validation engine."""

    def test_engine_is_shared(self):
        assert get_engine() is get_engine()

    def test_concurrent_first_use_builds_once(self, monkeypatch):
        monkeypatch.setattr(validation, "_engine", None)
        builds = []
        build = validation._build_engine  # pylint: disable=protected-access

        def _slow_build():
            builds.append(threading.get_ident())
            time.sleep(0.05)
            return build()

        monkeypatch.setattr(validation, "_build_engine", _slow_build)

        with ThreadPoolExecutor(max_workers=8) as executor:
            engines = list(executor.map(lambda _: get_engine(), range(8)))

        assert len(builds) == 1
        assert all(engine is engines[0] for engine in engines)

    def test_duplicate_rule_registration(self):
        engine = ValidationEngine()
        engine.register_validation(TOPIC_FORMAT, match_topic)

        with pytest.raises(RuleRegistrationError, match="already registered"):
            engine.register_validation(TOPIC_FORMAT, match_topic)

    def test_registration_failure_is_fatal(self, monkeypatch):
        monkeypatch.setattr(validation, "_engine", None)
        monkeypatch.setattr(validation, "CUSTOM_RULES", ((TOPIC_FORMAT, match_topic), (TOPIC_FORMAT, match_topic)))

        with pytest.raises(SystemExit):
            get_engine()

        assert validation._engine is None  # pylint: disable=protected-access
