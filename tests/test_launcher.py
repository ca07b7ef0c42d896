import io
import os
import subprocess
import sys

import pytest

from backhaul_helper.errors import LaunchError
from backhaul_helper.launcher import build_command, exit_status, launch, stop_child, supervise


def test_build_command(tmp_path):
    assert build_command(tmp_path / "backhaul", tmp_path / "config.toml") == [
        str(tmp_path / "backhaul"),
        "-c",
        str(tmp_path / "config.toml"),
    ]


def test_supervise_relays_both_streams_and_exit_code():
    out, err = io.StringIO(), io.StringIO()
    code = supervise(
        [sys.executable, "-c", "import sys; print('line one'); print('line two'); print('bad', file=sys.stderr); sys.exit(3)"],
        stdout=out,
        stderr=err,
    )

    assert code == 3
    assert out.getvalue().splitlines() == ["line one", "line two"]
    assert err.getvalue().strip() == "bad"


def test_supervise_missing_program():
    with pytest.raises(LaunchError):
        supervise(["/nonexistent/backhaul", "-c", "config.toml"])


def test_stop_child_ends_running_process():
    proc = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    stop_child(proc, grace=5)
    assert proc.poll() is not None


def test_stop_child_on_finished_process_returns_its_code():
    proc = subprocess.Popen([sys.executable, "-c", "import sys; sys.exit(4)"])
    proc.wait()
    assert stop_child(proc) == 4


def test_launch_requires_binary(tmp_path):
    config = tmp_path / "config.toml"
    config.write_text("[client]\n", encoding="utf-8")
    with pytest.raises(LaunchError):
        launch(tmp_path / "backhaul", config)


@pytest.mark.skipif(os.name == "nt", reason="shebang scripts")
def test_launch_requires_config(tmp_path):
    binary = tmp_path / "backhaul"
    binary.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    binary.chmod(0o755)
    with pytest.raises(LaunchError):
        launch(binary, tmp_path / "config.toml")


@pytest.mark.skipif(os.name == "nt", reason="shebang scripts")
def test_launch_passes_config_path(tmp_path, capsys):
    binary = tmp_path / "backhaul"
    binary.write_text('#!/bin/sh\necho "$@"\n', encoding="utf-8")
    binary.chmod(0o755)
    config = tmp_path / "config.toml"
    config.write_text("[server]\n", encoding="utf-8")
    out = io.StringIO()

    assert launch(binary, config, stdout=out, stderr=io.StringIO()) == 0
    assert out.getvalue().strip() == f"-c {config}"
    assert "exited with code 0" in capsys.readouterr().out


@pytest.mark.skipif(os.name == "nt", reason="POSIX signals")
def test_supervise_reports_signal_deaths_like_a_shell():
    code = supervise(
        [sys.executable, "-c", "import os, signal; signal.signal(signal.SIGINT, signal.SIG_DFL); os.kill(os.getpid(), signal.SIGINT)"],
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )
    assert code == 130


def test_exit_status():
    assert exit_status(0) == 0
    assert exit_status(3) == 3
    assert exit_status(-15) == 143
