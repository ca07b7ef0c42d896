"""Backhaul installer, configurator, and launcher."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .builder import render_document, write_document
from .errors import ServiceError
from .launcher import launch, require_binary
from .menus import choose_mode, choose_transport
from .prompts import LineSource, TerminalInput, resolve_profile
from .provision import (
    DEFAULT_BINARY_NAME,
    DEFAULT_DOWNLOAD_BASE,
    DEFAULT_RELEASE,
    DOWNLOAD_TIMEOUT,
    provision_binary,
)
from .reader import load_document
from .schema import MODES, TRANSPORTS, build_profile
from .service import DEFAULT_SERVICE_NAME, DEFAULT_UNIT_DIR, register_service

DEFAULT_CONFIG = "config.toml"


def configure(args: argparse.Namespace, source: LineSource) -> Path:
    transport = choose_transport(args.transport, source)
    print("---")
    mode = choose_mode(args.mode, source)
    print("---")

    profile = build_profile(mode, transport)
    resolved = resolve_profile(profile, source)
    document = render_document(profile, resolved)

    config_path = write_document(Path(args.config).expanduser(), document)
    print("---")
    print(f"[+] Configuration file ({config_path}) created successfully:")
    print("---")
    print(document, end="")
    print("---")
    return config_path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Install, configure, and run the Backhaul tunnel")
    parser.add_argument("--action", choices=["install", "configure", "run", "all"], default="all")
    parser.add_argument("--install-dir", default=".", help="Directory the Backhaul binary is extracted into (default: .)")
    parser.add_argument("--binary-name", default=DEFAULT_BINARY_NAME, help="Executable name inside the release archive")
    parser.add_argument("--release", default=DEFAULT_RELEASE, help=f"Release tag to download (default: {DEFAULT_RELEASE})")
    parser.add_argument("--download-base", default=DEFAULT_DOWNLOAD_BASE, help="Release download URL prefix")
    parser.add_argument("--timeout", type=float, default=DOWNLOAD_TIMEOUT, help="Download timeout seconds")
    parser.add_argument("--config", default=DEFAULT_CONFIG, help=f"Configuration file path (default: {DEFAULT_CONFIG})")

    parser.add_argument("--transport", help=f"Transport: {', '.join(TRANSPORTS)} (skips the menu)")
    parser.add_argument("--mode", choices=MODES, help="Run as server or client (skips the menu)")

    parser.add_argument("--service", action="store_true", help="Register a systemd service instead of running in the foreground")
    parser.add_argument("--service-name", default=DEFAULT_SERVICE_NAME, help="systemd unit name")
    parser.add_argument("--unit-dir", default=str(DEFAULT_UNIT_DIR), help="Directory for the systemd unit file")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None, source: LineSource | None = None) -> int:
    args = parse_args(argv)
    source = source or TerminalInput()
    install_dir = Path(args.install_dir).expanduser()
    binary = install_dir / args.binary_name
    config_path = Path(args.config).expanduser()

    try:
        print(f"[+] Action: {args.action}")

        if args.action in {"install", "all"}:
            print("[+] Detecting processor architecture and downloading Backhaul...")
            provisioned = provision_binary(
                install_dir,
                release=args.release,
                base=args.download_base,
                binary_name=args.binary_name,
                timeout=args.timeout,
            )
            if provisioned:
                binary = provisioned

        if args.action in {"configure", "all"}:
            config_path = configure(args, source)

        if args.action not in {"run", "all"}:
            print("[+] Completed")
            return 0

        require_binary(binary)
        load_document(config_path)

        if args.service:
            try:
                unit = register_service(binary, config_path, name=args.service_name, unit_dir=Path(args.unit_dir))
                print(f"[+] Service registered: {unit}")
            except ServiceError as exc:
                print(f"[!] Service registration failed: {exc}", file=sys.stderr)
                print(f"[!] Configuration kept at {config_path}")
            return 0

        print("[+] Running Backhaul with the new configuration file...")
        return launch(binary, config_path)

    except KeyboardInterrupt:
        print("\n[!] Cancelled by user")
        return 130
    except Exception as exc:
        print(f"[!] Error: {exc}", file=sys.stderr)
        return 1

