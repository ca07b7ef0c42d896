"""Run the provisioned binary in the foreground and relay its output."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import threading
from pathlib import Path
from typing import TextIO

from .errors import LaunchError

STOP_GRACE_SECONDS = 5.0


def build_command(binary: Path, config_path: Path) -> list[str]:
    return [str(binary), "-c", str(config_path)]


def _relay(stream: TextIO, sink: TextIO) -> None:
    for line in iter(stream.readline, ""):
        sink.write(line)
        sink.flush()
    stream.close()


def stop_child(proc: subprocess.Popen, grace: float = STOP_GRACE_SECONDS) -> int:
    if proc.poll() is not None:
        return proc.returncode
    if os.name == "nt":
        proc.terminate()
    else:
        proc.send_signal(signal.SIGINT)
    try:
        return proc.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        proc.kill()
        return proc.wait()


def exit_status(returncode: int) -> int:
    # Popen reports death by signal N as -N; shells report it as 128 + N.
    return 128 - returncode if returncode < 0 else returncode


def supervise(cmd: list[str], stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    try:
        proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, bufsize=1)
    except OSError as exc:
        raise LaunchError(f"Could not start {cmd[0]}: {exc}") from exc

    relays = [
        threading.Thread(target=_relay, args=(proc.stdout, stdout or sys.stdout), daemon=True),
        threading.Thread(target=_relay, args=(proc.stderr, stderr or sys.stderr), daemon=True),
    ]
    for relay in relays:
        relay.start()

    try:
        code = proc.wait()
    except KeyboardInterrupt:
        print("\n[!] Ctrl+C detected, stopping Backhaul and exiting.")
        code = stop_child(proc)

    for relay in relays:
        relay.join()
    return exit_status(code)


def require_binary(binary: Path) -> None:
    if not binary.is_file():
        raise LaunchError(f"Backhaul executable not found at {binary}. Please check the download or path.")
    if not os.access(binary, os.X_OK):
        raise LaunchError(f"Backhaul executable at {binary} is not executable")


def launch(binary: Path, config_path: Path, stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    require_binary(binary)
    if not config_path.is_file():
        raise LaunchError(f"Configuration file not found at {config_path}")

    cmd = build_command(binary, config_path)
    print(f"[+] Connect command: {' '.join(cmd)}")
    code = supervise(cmd, stdout=stdout, stderr=stderr)
    print(f"[+] Backhaul process exited with code {code}")
    return code
