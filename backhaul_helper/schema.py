"""Static description of every Backhaul setting, per mode and transport."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import UnsupportedTransport

MODES = ["server", "client"]

TRANSPORTS = [
    "tcp",
    "tcpmux",
    "udp",
    "ws",
    "wss",
    "ws_multiplexing",
    "wss_multiplexing",
]

MUX_TRANSPORTS = {"tcpmux", "ws_multiplexing", "wss_multiplexing"}
UDP_CAPABLE_TRANSPORTS = {"tcp", "udp"}

# Fields land in these sections in this order; a transport-specific field
# is placed at the end of its section unless it overrides an existing key.
SECTIONS = ("address", "intake", "session", "mux", "observe", "forward")

FieldValue = Union[str, int, bool, list]

_WHOLE_NUMBER = re.compile(r"^[0-9]+$")


class FieldKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    PORT_LIST = "port_list"


def is_port(token: str) -> bool:
    return bool(_WHOLE_NUMBER.match(token)) and 1 <= int(token) <= 65535


def check_value(kind: FieldKind, value: object) -> bool:
    if kind is FieldKind.BOOLEAN:
        return isinstance(value, bool)
    if kind is FieldKind.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind is FieldKind.STRING:
        return isinstance(value, str)
    if kind is FieldKind.PORT_LIST:
        return isinstance(value, list) and all(isinstance(p, str) and is_port(p) for p in value)
    return False


@dataclass(frozen=True, slots=True)
class FieldSpec:
    key: str
    kind: FieldKind
    default: FieldValue
    prompt: str

    def __post_init__(self) -> None:
        if not check_value(self.kind, self.default):
            raise ValueError(f"Default {self.default!r} is not a valid {self.kind.value} for {self.key}")


@dataclass(frozen=True, slots=True)
class ModeProfile:
    mode: str
    transport: str
    fields: tuple[FieldSpec, ...]

    @property
    def address_key(self) -> str:
        return "bind_addr" if self.mode == "server" else "remote_addr"

    def keys(self) -> list[str]:
        return [spec.key for spec in self.fields]


def _string(key: str, default: str, prompt: str) -> FieldSpec:
    return FieldSpec(key, FieldKind.STRING, default, prompt)


def _integer(key: str, default: int, prompt: str) -> FieldSpec:
    return FieldSpec(key, FieldKind.INTEGER, default, prompt)


def _boolean(key: str, default: bool, prompt: str) -> FieldSpec:
    return FieldSpec(key, FieldKind.BOOLEAN, default, prompt)


OBSERVE_FIELDS = [
    ("observe", _boolean("sniffer", False, "Enable Sniffer? (true/false)")),
    ("observe", _integer("web_port", 2060, "Web Port (web_port)")),
    ("observe", _string("sniffer_log", "/root/backhaul.json", "Sniffer Log File Path (sniffer_log)")),
    ("observe", _string("log_level", "info", "Log Level (log_level) (debug, info, warn, error)")),
]

MUX_FIELDS = [
    ("mux", _integer("mux_version", 1, "Multiplexing version (mux_version)")),
    ("mux", _integer("mux_framesize", 32768, "Multiplexing frame size (mux_framesize)")),
    ("mux", _integer("mux_recievebuffer", 4194304, "Multiplexing receive buffer size (mux_recievebuffer)")),
    ("mux", _integer("mux_streambuffer", 65536, "Multiplexing stream buffer size (mux_streambuffer)")),
]

BASE_FIELDS = {
    "server": [
        ("address", _string("bind_addr", "0.0.0.0:3080", "Bind address and port (bind_addr)")),
        ("session", _string("token", "your_token", "Token (token)")),
        ("session", _integer("keepalive_period", 75, "Keepalive Period (seconds) (keepalive_period)")),
        ("session", _boolean("nodelay", True, "Enable Nodelay? (true/false)")),
        ("session", _integer("heartbeat", 40, "Heartbeat (seconds) (heartbeat)")),
        ("session", _integer("channel_size", 2048, "Channel Size (channel_size)")),
        *OBSERVE_FIELDS,
        ("forward", FieldSpec("ports", FieldKind.PORT_LIST, [], "Ports to monitor (e.g., 80,443), leave empty to finish")),
    ],
    "client": [
        ("address", _string("remote_addr", "0.0.0.0:3080", "Remote address and port (remote_addr)")),
        ("session", _string("token", "your_token", "Token (token)")),
        ("session", _integer("connection_pool", 8, "Connection Pool Size (connection_pool)")),
        ("session", _boolean("aggressive_pool", False, "Enable Aggressive Pool? (true/false)")),
        ("session", _integer("keepalive_period", 75, "Keepalive Period (seconds) (keepalive_period)")),
        ("session", _integer("dial_timeout", 10, "Dial Timeout (seconds) (dial_timeout)")),
        ("session", _integer("retry_interval", 3, "Retry Interval (seconds) (retry_interval)")),
        ("session", _boolean("nodelay", True, "Enable Nodelay? (true/false)")),
        *OBSERVE_FIELDS,
    ],
}


def transport_fields(mode: str, transport: str) -> list[tuple[str, FieldSpec]]:
    extra: list[tuple[str, FieldSpec]] = []
    if mode == "server" and transport in UDP_CAPABLE_TRANSPORTS:
        extra.append(("intake", _boolean("accept_udp", False, "Accept UDP? (true/false)")))
    if mode == "server" and transport == "tcpmux":
        extra.append(("mux", _integer("mux_con", 8, "Max multiplexed connections (mux_con)")))
    if transport in MUX_TRANSPORTS:
        extra.extend(MUX_FIELDS)
    return extra


def merge_fields(
    base: list[tuple[str, FieldSpec]],
    extra: list[tuple[str, FieldSpec]],
) -> list[FieldSpec]:
    merged = list(base)

    for section, spec in extra:
        existing = next((i for i, (_, f) in enumerate(merged) if f.key == spec.key), None)
        if existing is not None:
            merged[existing] = (merged[existing][0], spec)
            continue

        rank = SECTIONS.index(section)
        position = 0
        for i, (other, _) in enumerate(merged):
            if SECTIONS.index(other) <= rank:
                position = i + 1
        merged.insert(position, (section, spec))

    return [spec for _, spec in merged]


def build_profile(mode: str, transport: str) -> ModeProfile:
    if mode not in BASE_FIELDS or transport not in TRANSPORTS:
        raise UnsupportedTransport(f"No settings defined for {mode}/{transport}")

    fields = merge_fields(BASE_FIELDS[mode], transport_fields(mode, transport))
    return ModeProfile(mode=mode, transport=transport, fields=tuple(fields))
