"""Load and check an existing configuration document before it is used.

The document must hold exactly one ``[server]`` or ``[client]`` table whose
``transport`` is a known transport. Settings the profile knows about are
checked against their kind; anything else is passed through untouched so
hand-added Backhaul options survive.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from .errors import DocumentError
from .schema import MODES, TRANSPORTS, build_profile, check_value


def parse_document(text: str) -> tuple[str, dict]:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise DocumentError(f"Configuration is not valid TOML: {exc}") from exc

    section, values = next(iter(data.items()), (None, None))
    if len(data) != 1 or section not in MODES or not isinstance(values, dict):
        raise DocumentError("Configuration must contain exactly one [server] or [client] section")

    transport = values.get("transport")
    if transport not in TRANSPORTS:
        raise DocumentError(f"Unknown or missing transport in [{section}]: {transport!r}")

    for spec in build_profile(section, transport).fields:
        if spec.key in values and not check_value(spec.kind, values[spec.key]):
            raise DocumentError(f"[{section}] {spec.key} must be a {spec.kind.value}, got {values[spec.key]!r}")
    return section, values


def load_document(path: Path) -> tuple[str, dict]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(f"Configuration file not found at {path}") from exc
    section, values = parse_document(text)
    print(f"[+] Using configuration {path}: [{section}] transport = {values['transport']}")
    return section, values
