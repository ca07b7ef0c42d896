from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable

from .errors import ServiceError

DEFAULT_SERVICE_NAME = "backhaul"
DEFAULT_UNIT_DIR = Path("/etc/systemd/system")

Runner = Callable[[list[str], str], None]


def run_command(cmd: list[str], purpose: str) -> None:
    print(f"[+] {purpose}: {' '.join(cmd)}")
    try:
        completed = subprocess.run(cmd, check=False)
    except OSError as exc:
        raise ServiceError(f"Command could not be started: {' '.join(cmd)} ({exc})") from exc
    if completed.returncode != 0:
        raise ServiceError(f"Command failed ({completed.returncode}): {' '.join(cmd)}")


def render_unit(binary: Path, config_path: Path, description: str = "Backhaul Reverse Tunnel Service") -> str:
    binary = binary.resolve()
    config_path = config_path.resolve()
    return (
        "[Unit]\n"
        f"Description={description}\n"
        "After=network.target\n\n"
        "[Service]\n"
        "Type=simple\n"
        f"WorkingDirectory={binary.parent}\n"
        f"ExecStart={binary} -c {config_path}\n"
        "Restart=always\n"
        "RestartSec=3\n"
        "LimitNOFILE=1048576\n\n"
        "[Install]\n"
        "WantedBy=multi-user.target\n"
    )


def register_service(
    binary: Path,
    config_path: Path,
    name: str = DEFAULT_SERVICE_NAME,
    unit_dir: Path = DEFAULT_UNIT_DIR,
    runner: Runner = run_command,
) -> Path:
    unit_name = f"{name}.service"
    unit_path = unit_dir / unit_name
    try:
        unit_dir.mkdir(parents=True, exist_ok=True)
        unit_path.write_text(render_unit(binary, config_path), encoding="utf-8")
    except OSError as exc:
        raise ServiceError(f"Could not write {unit_path}: {exc}") from exc
    print(f"[+] Wrote service unit: {unit_path}")

    runner(["systemctl", "daemon-reload"], "Reloading systemd")
    runner(["systemctl", "enable", unit_name], f"Enabling {unit_name}")
    runner(["systemctl", "start", unit_name], f"Starting {unit_name}")
    return unit_path
