from __future__ import annotations

import platform
import stat
import tarfile
import tempfile
from pathlib import Path

import requests

from .errors import DownloadError, ExtractionError, UnsupportedArchitecture

DEFAULT_RELEASE = "v0.6.5"
DEFAULT_DOWNLOAD_BASE = "https://github.com/Musixal/Backhaul/releases/download"
DEFAULT_BINARY_NAME = "backhaul"
DOWNLOAD_TIMEOUT = 60
CHUNK_SIZE = 64 * 1024

ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm64",
    "armv8l": "arm64",
}


def detect_arch(machine: str | None = None) -> str:
    machine = (machine if machine is not None else platform.machine()).lower()
    arch = ARCH_MAP.get(machine)
    if not arch:
        raise UnsupportedArchitecture(f"Unsupported architecture: {machine or '<unknown>'}. Please download Backhaul manually.")
    return arch


def release_url(arch: str, release: str = DEFAULT_RELEASE, base: str = DEFAULT_DOWNLOAD_BASE) -> str:
    return f"{base.rstrip('/')}/{release}/backhaul_linux_{arch}.tar.gz"


def ensure_executable(file_path: Path) -> None:
    mode = file_path.stat().st_mode
    file_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def download_file(url: str, output_path: Path, session=None, timeout: float = DOWNLOAD_TIMEOUT) -> Path:
    print(f"[+] Downloading: {url}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    http = session or requests
    try:
        with http.get(url, stream=True, timeout=timeout, headers={"User-Agent": "backhaul-helper/1.0"}) as response:
            response.raise_for_status()
            with output_path.open("wb") as out_file:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        out_file.write(chunk)
    except requests.RequestException as exc:
        raise DownloadError(f"Failed to download Backhaul from {url}: {exc}") from exc
    except OSError as exc:
        raise DownloadError(f"Failed to save download to {output_path}: {exc}") from exc
    return output_path


def extract_archive(archive_path: Path, extract_dir: Path) -> None:
    extract_dir.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive_path, "r:*") as tf:
            tf.extractall(extract_dir, filter="data")
    except (tarfile.TarError, OSError) as exc:
        raise ExtractionError(f"Failed to extract {archive_path.name}: {exc}") from exc


def provision_binary(
    install_dir: Path,
    release: str = DEFAULT_RELEASE,
    base: str = DEFAULT_DOWNLOAD_BASE,
    binary_name: str = DEFAULT_BINARY_NAME,
    machine: str | None = None,
    session=None,
    timeout: float = DOWNLOAD_TIMEOUT,
) -> Path | None:
    """Download the release archive for this host and unpack it into ``install_dir``.

    Returns the path of the executable, or ``None`` when the archive did not
    contain ``binary_name`` (reported as a warning, not an error).
    """
    arch = detect_arch(machine)
    print(f"[+] Detected architecture: {arch}")
    url = release_url(arch, release, base)

    with tempfile.TemporaryDirectory() as td:
        archive_path = Path(td) / url.rsplit("/", 1)[-1]
        download_file(url, archive_path, session=session, timeout=timeout)
        print(f"[+] Download complete. Extracting {archive_path.name}...")
        extract_archive(archive_path, install_dir)

    binary = install_dir / binary_name
    if not binary.is_file():
        print(f"[!] Warning: '{binary_name}' executable not found after extraction. Please check the contents of the archive.")
        return None

    ensure_executable(binary)
    print(f"[+] Backhaul extracted and made executable: {binary}")
    return binary
