"""Validation of a resolved configuration.

The validation engine is built lazily, exactly once per process. It owns the
named string rules ("topic-format", "broker-format") and an ordered table of
checks; ``validate_config`` runs the checks in order and reports the first
violation.

Field constraints are declared as pydantic ``Annotated`` types and applied
with ``TypeAdapter``; cross-field constraints are plain functions.
"""

import logging
import operator
import threading
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Optional

from pydantic import AfterValidator, Field, TypeAdapter, ValidationError

from gobot_lux.config import Config
from gobot_lux.errors import ConfigValidationError, RuleRegistrationError
from gobot_lux.patterns import match_host, match_tcp_addr, match_topic

logger = logging.getLogger(__name__)

TOPIC_FORMAT = "topic-format"
BROKER_FORMAT = "broker-format"

MIN_INTERVAL_SECONDS = 1
MAX_INTERVAL_SECONDS = 300
MIN_STATS_BUCKET_SECONDS = 10
MAX_STATS_BUCKET_SECONDS = 3600
MAX_STATS_BUCKET_SECONDS_TOTAL = 7200

CUSTOM_RULES: tuple[tuple[str, Callable[[str], bool]], ...] = (
    (TOPIC_FORMAT, match_topic),
    (BROKER_FORMAT, match_host),
)

Check = Callable[[Config], None]


def _matcher_validator(name: str, matcher: Callable[[str], bool]) -> AfterValidator:
    def _check(value: Any) -> Any:
        if not isinstance(value, str) or not matcher(value):
            raise ValueError(f"Value does not satisfy '{name}'")
        return value

    return AfterValidator(_check)


@dataclass
class FieldRule:
    """Declarative constraint on a single (possibly nested) configuration field."""

    path: str
    annotation: Any
    rule: str
    omitempty: bool = False
    adapter: TypeAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.adapter = TypeAdapter(self.annotation)

    def __call__(self, config: Config) -> None:
        value = operator.attrgetter(self.path)(config)
        if self.omitempty and not value:
            return

        try:
            self.adapter.validate_python(value)
        except ValidationError as exc:
            err = exc.errors()[0]
            raise ConfigValidationError(
                self.path,
                value,
                f"invalid {self.path}: {err['msg']} (got {err['input']!r})",
                self.rule,
            ) from None


class ValidationEngine:
    """Registry of named string rules plus the ordered checks run against a ``Config``."""

    def __init__(self) -> None:
        self._rules: dict[str, Callable[[str], bool]] = {}
        self._checks: list[Check] = []

    def register_validation(self, name: str, matcher: Callable[[str], bool]) -> None:
        """Register a named string rule.

        Raises:
            RuleRegistrationError: If ``name`` is empty or already registered.
        """
        if not name:
            raise RuleRegistrationError("validation rule name must not be empty")
        if name in self._rules:
            raise RuleRegistrationError(f"validation rule {name!r} is already registered")
        self._rules[name] = matcher

    def rule(self, name: str) -> AfterValidator:
        """Return the registered rule ``name`` as a pydantic validator."""
        return _matcher_validator(name, self._rules[name])

    def add_check(self, check: Check) -> None:
        self._checks.append(check)

    def validate(self, config: Config) -> None:
        """Run every check in order, raising on the first failure."""
        for check in self._checks:
            check(config)


def _check_interval_against_sensor(config: Config) -> None:
    # truncates toward zero
    sensor_interval = int(config.sensor.aio_polling_interval_ms / 1000)
    if config.poll_interval_seconds < sensor_interval:
        raise ConfigValidationError(
            "poll_interval_seconds",
            config.poll_interval_seconds,
            f"invalid interval: must not be lower than aioPollingIntervalMs ({sensor_interval}s): "
            f"{config.poll_interval_seconds}",
        )


def _check_sensor(config: Config) -> None:
    config.sensor.verify()


def _check_stats_bucket_bounds(config: Config) -> None:
    if not config.stats_bucket_seconds:
        return

    smallest = config.get_stat_interval_min()
    if smallest < 1:
        raise ConfigValidationError(
            "stats_bucket_seconds", smallest, f"minimal value in stats bucket must not be < 1: {smallest}"
        )

    largest = config.get_stat_interval_max()
    if largest > MAX_STATS_BUCKET_SECONDS_TOTAL:
        raise ConfigValidationError(
            "stats_bucket_seconds",
            largest,
            f"maximal value in stats bucket must not be > {MAX_STATS_BUCKET_SECONDS_TOTAL}: {largest}",
        )


def _check_ssl_files_paired(config: Config) -> None:
    mqtt = config.mqtt
    if bool(mqtt.client_key_file) != bool(mqtt.client_cert_file):
        raise ConfigValidationError(
            "mqtt.client_key_file" if not mqtt.client_key_file else "mqtt.client_cert_file",
            "",
            "ssl client key file and cert file must be provided together",
        )


def _install_checks(engine: ValidationEngine) -> None:
    topic = Annotated[str, engine.rule(TOPIC_FORMAT)]
    broker = Annotated[str, engine.rule(BROKER_FORMAT)]
    bucket = Annotated[int, Field(ge=MIN_STATS_BUCKET_SECONDS, le=MAX_STATS_BUCKET_SECONDS)]

    engine.add_check(FieldRule("placement", Annotated[str, Field(min_length=1)], "required"))
    engine.add_check(
        FieldRule(
            "poll_interval_seconds",
            Annotated[int, Field(ge=MIN_INTERVAL_SECONDS, le=MAX_INTERVAL_SECONDS)],
            "min=1,max=300",
        )
    )
    engine.add_check(_check_interval_against_sensor)
    engine.add_check(_check_sensor)
    engine.add_check(_check_stats_bucket_bounds)
    engine.add_check(FieldRule("stats_bucket_seconds", list[bucket], "dive,min=10,max=3600"))
    engine.add_check(
        FieldRule(
            "metrics_address",
            Annotated[str, _matcher_validator("tcp_addr", match_tcp_addr)],
            "tcp_addr",
            omitempty=True,
        )
    )
    engine.add_check(FieldRule("mqtt.host", broker, BROKER_FORMAT))
    engine.add_check(FieldRule("mqtt.topic", topic, TOPIC_FORMAT))
    engine.add_check(FieldRule("mqtt.stats_topic", topic, TOPIC_FORMAT, omitempty=True))
    engine.add_check(_check_ssl_files_paired)


def _build_engine() -> ValidationEngine:
    engine = ValidationEngine()
    for name, matcher in CUSTOM_RULES:
        try:
            engine.register_validation(name, matcher)
        except RuleRegistrationError as exc:
            logger.critical("could not build custom validation %r: %s", name, exc)
            raise SystemExit(f"could not build custom validation {name!r}") from exc

    _install_checks(engine)
    logger.debug("Validation engine built with rules %s", [name for name, _ in CUSTOM_RULES])
    return engine


_engine: Optional[ValidationEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> ValidationEngine:
    """Return the process-wide validation engine, building it on first use."""
    global _engine  # pylint: disable=global-statement
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = _build_engine()
    return _engine


def validate_config(config: Config) -> None:
    """Validate a fully resolved configuration.

    Raises:
        ConfigValidationError: Describing the first violated rule, including the
            offending field and value.
    """
    get_engine().validate(config)
    logger.debug("Configuration for placement %r is valid", config.placement)
