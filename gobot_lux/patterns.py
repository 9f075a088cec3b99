"""String matchers for broker addresses, MQTT topics and listen addresses.

All matchers are pure predicates: they never raise and return False for
anything that is not a string.
"""

import ipaddress
import re

_MAX_TOPIC_BYTES = 65535
_MAX_PORT = 65535

_BROKER_SCHEMES = frozenset({"tcp", "ssl", "tls", "mqtt", "mqtts", "ws", "wss"})

_BROKER_RE = re.compile(
    r"^(?:(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*)://)?"
    r"(?P<host>\[[0-9A-Fa-f:.%]+\]|[A-Za-z0-9.-]+)"
    r"(?::(?P<port>\d{1,5}))?$"
)
_TCP_ADDR_RE = re.compile(r"^(?P<host>\[[0-9A-Fa-f:.%]+\]|[A-Za-z0-9.-]*):(?P<port>\d{1,5})$")
_LABEL_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")


def _is_hostname(host: str) -> bool:
    if len(host) > 253:
        return False
    return all(_LABEL_RE.match(label) for label in host.rstrip(".").split("."))


def _is_host(host: str) -> bool:
    if host.startswith("["):
        try:
            ipaddress.IPv6Address(host[1:-1])
        except ValueError:
            return False
        return True
    return _is_hostname(host)


def match_host(broker: str) -> bool:
    """Return True if ``broker`` is usable as a message-broker endpoint.

    Accepted forms are ``host``, ``host:port`` and ``scheme://host:port`` where the
    scheme is one of the MQTT transports and the host is a hostname, an IPv4
    address or a bracketed IPv6 address.
    """
    if not isinstance(broker, str):
        return False

    match = _BROKER_RE.match(broker)
    if match is None:
        return False

    scheme = match.group("scheme")
    if scheme is not None and scheme.lower() not in _BROKER_SCHEMES:
        return False

    port = match.group("port")
    if port is not None and not 0 < int(port) <= _MAX_PORT:
        return False

    return _is_host(match.group("host"))


def match_topic(topic: str) -> bool:
    """Return True if ``topic`` follows the MQTT topic grammar.

    Levels are separated by ``/`` and must not be empty. ``+`` may only appear as
    a whole level and ``#`` only as the whole last level.
    """
    if not isinstance(topic, str) or not topic:
        return False
    if topic != topic.strip() or "\x00" in topic:
        return False
    if len(topic.encode("utf-8")) > _MAX_TOPIC_BYTES:
        return False

    levels = topic.split("/")
    last = len(levels) - 1
    for index, level in enumerate(levels):
        if not level:
            return False
        if "#" in level and (level != "#" or index != last):
            return False
        if "+" in level and level != "+":
            return False

    return True


def match_tcp_addr(address: str) -> bool:
    """Return True if ``address`` is a ``host:port`` listen address.

    The host part may be empty (listen on all interfaces), e.g. ``:9194``.
    """
    if not isinstance(address, str):
        return False

    match = _TCP_ADDR_RE.match(address)
    if match is None or int(match.group("port")) > _MAX_PORT:
        return False

    host = match.group("host")
    return not host or _is_host(host)
