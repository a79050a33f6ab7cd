"""Command-line interface for the SOCKS proxy server.

This module provides the main command-line interface for the proxy server, handling:
- Command-line argument parsing
- Credential loading for username/password authentication
- Interface selection
- Logging setup
- Error reporting

The CLI is built using Typer and provides commands for:
- Starting the proxy server
- Listing network interfaces
- Showing the version

Example:
    # Run from command line:
    $ socks5-proxy serve --port 1080 --auth password --user admin:secret
"""

from enum import Enum
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from socks5_proxy import __version__
from socks5_proxy.core.config import DEFAULT_CONNECT_TIMEOUT, ServerConfig
from socks5_proxy.core.credentials import CredentialStore
from socks5_proxy.core.exceptions import ConfigurationError
from socks5_proxy.core.lib.wire import Method
from socks5_proxy.core.network import interface_address, list_interfaces
from socks5_proxy.core.proxy import run_server
from socks5_proxy.core.utils.log_config import LOG_DIR, setup_logging

console = Console()
app = typer.Typer(help="SOCKS5 proxy server with optional username/password authentication")


class AuthChoice(str, Enum):
    none = "none"
    password = "password"


def load_credentials(users: list[str], users_file: Path | None) -> CredentialStore:
    """Build the credential store from ``--users-file`` and ``--user`` options.

    Users given on the command line override the file.

    Raises:
        ConfigurationError: If an entry or the file is malformed
    """
    store = CredentialStore.from_file(users_file) if users_file else CredentialStore()
    try:
        inline = CredentialStore.from_entries(users)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    return store.merged(inline)


def build_config(
    auth: AuthChoice,
    store: CredentialStore,
    connect_timeout: float | None,
    idle_timeout: float | None,
    nameservers: list[str],
) -> ServerConfig:
    """Translate CLI options into a validated server configuration."""
    if auth is AuthChoice.password:
        if not len(store):
            msg = "password authentication needs --user or --users-file"
            raise ConfigurationError(msg)
        config = ServerConfig(
            auth_method=Method.PASSWORD,
            password_checker=store.check,
            connect_timeout=connect_timeout,
            idle_timeout=idle_timeout,
            nameservers=tuple(nameservers),
        )
    else:
        if len(store):
            msg = "--user and --users-file require --auth password"
            raise ConfigurationError(msg)
        config = ServerConfig(
            auth_method=Method.NO_AUTH,
            connect_timeout=connect_timeout,
            idle_timeout=idle_timeout,
            nameservers=tuple(nameservers),
        )
    config.validate()
    return config


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[cyan]SOCKS5 Proxy v{__version__}[/cyan]")


@app.command()
def interfaces() -> None:
    """List network interfaces with an IPv4 address."""
    table = Table(title="Network Interfaces")
    table.add_column("Interface", style="cyan")
    table.add_column("IPv4 Address", style="green")
    table.add_column("Status")
    table.add_column("Loopback")

    for iface in list_interfaces():
        status = "[green]up" if iface.is_up else "[red]down"
        table.add_row(iface.name, iface.ip, status, "yes" if iface.is_loopback else "")

    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Address to listen on"),
    port: int = typer.Option(1080, "--port", "-p", min=0, max=65535, help="Port to listen on"),
    interface: str | None = typer.Option(
        None, "--interface", "-i", help="Listen on this interface's IPv4 address instead of --host"
    ),
    auth: AuthChoice = typer.Option(AuthChoice.none, "--auth", help="Required authentication method"),
    user: list[str] = typer.Option([], "--user", "-u", help="Credential as NAME:PASSWORD (repeatable)"),
    users_file: Path | None = typer.Option(
        None, "--users-file", exists=True, dir_okay=False, help="File with one NAME:PASSWORD per line"
    ),
    connect_timeout: float = typer.Option(
        DEFAULT_CONNECT_TIMEOUT, "--connect-timeout", help="Seconds allowed to connect to a target"
    ),
    idle_timeout: float | None = typer.Option(
        None, "--idle-timeout", help="Close connections idle for this many seconds (default: never)"
    ),
    nameserver: list[str] = typer.Option(
        [], "--nameserver", help="Fallback DNS server when system resolution fails (repeatable)"
    ),
    log_file: bool = typer.Option(False, "--log-file", help=f"Also log to {LOG_DIR / 'proxy.log'}"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Start the SOCKS5 proxy server."""
    setup_logging("DEBUG" if debug else "INFO", LOG_DIR / "proxy.log" if log_file else None)

    try:
        if interface:
            host = interface_address(interface)
        store = load_credentials(user, users_file)
        config = build_config(auth, store, connect_timeout, idle_timeout, nameserver)
    except (ConfigurationError, LookupError) as e:
        logger.error(f"Invalid configuration: {e}")
        console.print(f"[red]Error: {e}")
        raise typer.Exit(1) from e

    logger.info(f"Starting SOCKS5 proxy server on {host}:{port} (auth: {auth.value})")
    try:
        run_server(host, port, config)
    except OSError as e:
        logger.exception("Error starting proxy server")
        console.print(f"[red]Error: {e}")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
