import tomllib

import pytest

from backhaul_helper.builder import render_document, write_document
from backhaul_helper.errors import DocumentError, SerializationError
from backhaul_helper.prompts import ScriptedInput, resolve_profile
from backhaul_helper.reader import load_document, parse_document
from backhaul_helper.schema import MODES, TRANSPORTS, build_profile

SERVER_TCP_DEFAULTS = """\
[server]
transport = "tcp"
bind_addr = "0.0.0.0:3080"
accept_udp = false
token = "your_token"
keepalive_period = 75
nodelay = true
heartbeat = 40
channel_size = 2048
sniffer = false
web_port = 2060
sniffer_log = "/root/backhaul.json"
log_level = "info"
ports = []
"""


def run_defaults(mode, transport, overrides=None):
    profile = build_profile(mode, transport)
    answers = []
    for spec in profile.fields:
        answers.append((overrides or {}).get(spec.key, ""))
    resolved = resolve_profile(profile, ScriptedInput(answers), notify=lambda _: None)
    return profile, resolved


def test_server_tcp_all_defaults():
    profile, resolved = run_defaults("server", "tcp")
    assert render_document(profile, resolved) == SERVER_TCP_DEFAULTS


def test_client_tcpmux_with_mux_version():
    profile, resolved = run_defaults("client", "tcpmux", {"mux_version": "2"})
    document = render_document(profile, resolved)
    lines = document.splitlines()

    assert lines[0] == "[client]"
    assert lines[1] == 'transport = "tcpmux"'
    assert lines[2] == 'remote_addr = "0.0.0.0:3080"'
    assert "mux_version = 2" in lines
    assert "mux_framesize = 32768" in lines
    assert "mux_recievebuffer = 4194304" in lines
    assert "mux_streambuffer = 65536" in lines


def test_port_list_is_quoted_per_element():
    profile = build_profile("server", "ws")
    answers = [""] * (len(profile.fields) - 1) + ["80", "y", "443", "n"]
    resolved = resolve_profile(profile, ScriptedInput(answers))

    assert render_document(profile, resolved).endswith('ports = ["80","443"]\n')


def test_strings_are_escaped():
    profile, resolved = run_defaults("client", "ws", {"token": 'a"b\\c'})
    assert 'token = "a\\"b\\\\c"' in render_document(profile, resolved).splitlines()


def test_missing_value_is_an_invariant_failure():
    profile, resolved = run_defaults("server", "udp")
    del resolved["heartbeat"]
    with pytest.raises(SerializationError):
        render_document(profile, resolved)


def test_wrong_value_type_is_an_invariant_failure():
    profile, resolved = run_defaults("server", "udp")
    resolved["heartbeat"] = True
    with pytest.raises(SerializationError):
        render_document(profile, resolved)


@pytest.mark.parametrize("mode", MODES)
@pytest.mark.parametrize("transport", TRANSPORTS)
def test_round_trip_through_reader(mode, transport):
    overrides = {"token": "s3cr=t # x", "nodelay": "false", "web_port": "8080"}
    profile, resolved = run_defaults(mode, transport, overrides)
    if "ports" in resolved:
        resolved["ports"] = ["0080", "443"]

    section, values = parse_document(render_document(profile, resolved))

    assert section == mode
    assert values == {"transport": transport, **resolved}
    assert list(values) == ["transport", *profile.keys()]


def test_rendering_is_deterministic():
    first = render_document(*run_defaults("server", "wss_multiplexing", {"token": "abc"}))
    second = render_document(*run_defaults("server", "wss_multiplexing", {"token": "abc"}))
    assert first == second


def test_output_is_valid_toml():
    profile, resolved = run_defaults("server", "tcpmux", {"token": 'q"uote'})
    resolved["ports"] = ["80", "443"]

    data = tomllib.loads(render_document(profile, resolved))

    assert data["server"]["token"] == 'q"uote'
    assert data["server"]["ports"] == ["80", "443"]
    assert data["server"]["mux_con"] == 8


def test_write_document_creates_parent(tmp_path):
    path = write_document(tmp_path / "etc" / "config.toml", SERVER_TCP_DEFAULTS)
    assert path.read_text(encoding="utf-8") == SERVER_TCP_DEFAULTS


@pytest.mark.parametrize(
    "text",
    [
        'transport = "tcp"\n',
        '[server]\ntransport = "tcp"\n[client]\ntransport = "tcp"\n',
        '[server]\ntoken = "open\n',
        '[server]\ntransport = "quic"\n',
        '[server]\nbind_addr = "0.0.0.0:3080"\n',
        '[server]\ntransport = "tcp"\nweb_port = 20.5\n',
        '[server]\ntransport = "tcp"\nports = [80]\n',
        '[client]\ntransport = "tcp"\nnodelay = "yes"\n',
        '[server]\ntoken = "a"\ntoken = "b"\n',
    ],
)
def test_reader_rejects_unsupported_shapes(text):
    with pytest.raises(DocumentError):
        parse_document(text)


def test_reader_keeps_settings_it_does_not_know():
    section, values = parse_document('[client]\ntransport = "ws"\nedge_ip = "1.2.3.4"\n')
    assert section == "client"
    assert values == {"transport": "ws", "edge_ip": "1.2.3.4"}


def test_load_document_missing_file(tmp_path):
    with pytest.raises(DocumentError):
        load_document(tmp_path / "config.toml")
