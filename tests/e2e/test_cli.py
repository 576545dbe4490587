"""End-to-end tests for the netgap CLI."""

from __future__ import annotations

import socket
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from netgap import __version__
from netgap.cli.app import app
from netgap.server.listener import Listener

if TYPE_CHECKING:
    from netgap._internal.config import ServerConfig

runner = CliRunner()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def captured_server(monkeypatch: pytest.MonkeyPatch) -> list[ServerConfig]:
    """Make ``serve_forever`` return at once, recording the listener config."""
    configs: list[ServerConfig] = []

    def _serve_once(self: Listener) -> None:
        configs.append(self.config)

    monkeypatch.setattr(Listener, "serve_forever", _serve_once)
    return configs


# ---------------------------------------------------------------------------
# Tests: global options
# ---------------------------------------------------------------------------


def test_version_flag():
    """--version prints version and exits 0."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_subcommands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "server" in result.output
    assert "client" in result.output


def test_client_help():
    result = runner.invoke(app, ["client", "--help"])
    assert result.exit_code == 0
    for flag in ("--host", "--channels", "--msg-total", "--msg-length", "--read-timeout"):
        assert flag in result.output


# ---------------------------------------------------------------------------
# Tests: netgap server
# ---------------------------------------------------------------------------


def test_server_defaults(captured_server: list[ServerConfig], free_port: int):
    result = runner.invoke(app, ["server", "--host", "127.0.0.1", "--port", str(free_port)])
    assert result.exit_code == 0, result.output
    assert captured_server[0].port == free_port
    assert captured_server[0].ack_enabled is True


@pytest.mark.parametrize(("word", "expected"), [("false", False), ("no", False), ("TRUE", True)])
def test_server_ack_words(
    captured_server: list[ServerConfig], free_port: int, word: str, expected: bool
):
    result = runner.invoke(
        app, ["server", "--host", "127.0.0.1", "--port", str(free_port), "--ack", word]
    )
    assert result.exit_code == 0, result.output
    assert captured_server[0].ack_enabled is expected


def test_server_rejects_bad_ack_word(captured_server: list[ServerConfig]):
    result = runner.invoke(app, ["server", "--ack", "maybe"])
    assert result.exit_code == 2
    assert captured_server == []


def test_server_bind_failure_exits_non_zero():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as occupied:
        occupied.bind(("127.0.0.1", 0))
        occupied.listen(1)
        port = occupied.getsockname()[1]

        result = runner.invoke(app, ["server", "--host", "127.0.0.1", "--port", str(port)])

    assert result.exit_code == 1
    assert "failed to bind" in result.output


# ---------------------------------------------------------------------------
# Tests: netgap client
# ---------------------------------------------------------------------------


def test_client_requires_host():
    result = runner.invoke(app, ["client"])
    assert result.exit_code != 0


def test_client_rejects_zero_channels():
    result = runner.invoke(app, ["client", "--host", "127.0.0.1", "--channels", "0"])
    assert result.exit_code == 2


def test_client_reports_against_running_server(ack_server: Listener):
    result = runner.invoke(
        app,
        [
            "client",
            "--host",
            "127.0.0.1",
            "--port",
            str(ack_server.address[1]),
            "--channels",
            "2",
            "--msg-total",
            "20",
            "--msg-length",
            "100",
            "--msg-interval-ms",
            "0",
            "--read-timeout",
            "500",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Probe Complete" in result.output
    assert "2000" in result.output
    assert "100.00%" in result.output


def test_client_without_server_still_reports(free_port: int):
    result = runner.invoke(
        app,
        [
            "client",
            "--host",
            "127.0.0.1",
            "--port",
            str(free_port),
            "--channels",
            "2",
            "--msg-interval-ms",
            "0",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Probe Complete" in result.output
    assert "2/2 completed" in result.output


def test_client_warns_about_dropped_remainder(free_port: int):
    result = runner.invoke(
        app,
        ["client", "--host", "127.0.0.1", "--port", str(free_port), "--channels", "3"],
    )
    assert result.exit_code == 0, result.output
    assert "will not be sent" in result.output
