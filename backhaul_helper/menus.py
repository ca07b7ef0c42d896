from __future__ import annotations

from typing import Callable

from .errors import InvalidSelection
from .prompts import LineSource
from .schema import MODES, TRANSPORTS

TRANSPORT_LABELS = {
    "tcp": "TCP",
    "tcpmux": "TCP Multiplexing",
    "udp": "UDP",
    "ws": "WebSocket",
    "wss": "Secure WebSocket",
    "ws_multiplexing": "WS Multiplexing",
    "wss_multiplexing": "WSS Multiplexing",
}

MODE_LABELS = {
    "server": "Server",
    "client": "Client",
}


def choose_from_menu(
    title: str,
    options: list[str],
    labels: dict[str, str],
    source: LineSource,
    show: Callable[[str], None] = print,
) -> str:
    show(title)
    for idx, option in enumerate(options, start=1):
        show(f"  {idx}. {labels[option]}")
    selection = source.ask(f"Enter choice (1-{len(options)}): ").strip()
    if not selection.isdigit() or not (1 <= int(selection) <= len(options)):
        raise InvalidSelection(f"Invalid selection: {selection or '<empty>'}")
    return options[int(selection) - 1]


def choose_transport(arg_transport: str | None, source: LineSource, show: Callable[[str], None] = print) -> str:
    if arg_transport:
        transport = arg_transport.lower().strip()
        if transport not in TRANSPORTS:
            raise InvalidSelection(f"Unknown transport: {arg_transport}. Supported: {', '.join(TRANSPORTS)}")
        return transport
    return choose_from_menu("Select Transport Type:", TRANSPORTS, TRANSPORT_LABELS, source, show)


def choose_mode(arg_mode: str | None, source: LineSource, show: Callable[[str], None] = print) -> str:
    if arg_mode:
        mode = arg_mode.lower().strip()
        if mode not in MODES:
            raise InvalidSelection(f"Unknown mode: {arg_mode}. Supported: {', '.join(MODES)}")
        return mode
    return choose_from_menu("Select Mode (Server or Client):", MODES, MODE_LABELS, source, show)
