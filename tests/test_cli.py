"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from socks5_proxy import __version__
from socks5_proxy.cmd import cli
from socks5_proxy.core.exceptions import ConfigurationError
from socks5_proxy.core.lib.wire import Method
from socks5_proxy.core.network import NetworkInterface

runner = CliRunner()


@pytest.fixture
def served(monkeypatch):
    """Capture run_server calls instead of listening."""
    calls = []
    monkeypatch.setattr(cli, "run_server", lambda host, port, config: calls.append((host, port, config)))
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    return calls


def test_version():
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_serve_defaults(served):
    result = runner.invoke(cli.app, ["serve", "--port", "1090"])
    assert result.exit_code == 0, result.output
    host, port, config = served[0]
    assert (host, port) == ("0.0.0.0", 1090)
    assert config.auth_method == Method.NO_AUTH
    assert config.idle_timeout is None


def test_serve_password_with_users(served, tmp_path):
    users_file = tmp_path / "users.txt"
    users_file.write_text("admin:123456\n", encoding="utf-8")
    result = runner.invoke(
        cli.app,
        ["serve", "--auth", "password", "--users-file", str(users_file), "--user", "lisi:abde", "--idle-timeout", "30"],
    )
    assert result.exit_code == 0, result.output
    _, _, config = served[0]
    assert config.auth_method == Method.PASSWORD
    assert config.password_checker(b"admin", b"123456")
    assert config.password_checker(b"lisi", b"abde")
    assert config.idle_timeout == 30


def test_serve_password_without_users_fails(served):
    result = runner.invoke(cli.app, ["serve", "--auth", "password"])
    assert result.exit_code == 1
    assert served == []


def test_serve_malformed_user_fails(served):
    result = runner.invoke(cli.app, ["serve", "--auth", "password", "--user", "nocolon"])
    assert result.exit_code == 1
    assert served == []


def test_serve_users_without_password_auth_fails(served, tmp_path):
    users_file = tmp_path / "users.txt"
    users_file.write_text("admin:123456\n", encoding="utf-8")
    for args in (["--user", "admin:123456"], ["--users-file", str(users_file)]):
        result = runner.invoke(cli.app, ["serve", *args])
        assert result.exit_code == 1
        assert "--auth password" in result.output
    assert served == []


def test_serve_on_interface(served, monkeypatch):
    monkeypatch.setattr(cli, "interface_address", lambda name: "192.0.2.10")
    result = runner.invoke(cli.app, ["serve", "--interface", "wlan0"])
    assert result.exit_code == 0, result.output
    assert served[0][0] == "192.0.2.10"


def test_interfaces_table(monkeypatch):
    monkeypatch.setattr(
        cli,
        "list_interfaces",
        lambda: [NetworkInterface(name="eth0", ip="192.0.2.10", is_up=True, is_loopback=False)],
    )
    result = runner.invoke(cli.app, ["interfaces"])
    assert result.exit_code == 0
    assert "eth0" in result.output
    assert "192.0.2.10" in result.output


def test_build_config_rejects_empty_store():
    with pytest.raises(ConfigurationError):
        cli.build_config(cli.AuthChoice.password, cli.CredentialStore(), 10.0, None, [])


def test_build_config_rejects_users_without_password_auth():
    with pytest.raises(ConfigurationError):
        cli.build_config(cli.AuthChoice.none, cli.CredentialStore({"admin": "123456"}), 10.0, None, [])
