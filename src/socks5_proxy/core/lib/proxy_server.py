"""SOCKS proxy server implementation with a thread per connection.

This module implements the connection supervisor:
- Configuration validation before the listening socket is bound
- IPv4 and IPv6 listening addresses
- One daemon thread per accepted connection
- Logging of unexpected handler errors without stopping the accept loop
- Clean shutdown handling

Example:
    # Create and start a proxy server on all interfaces
    run_server("0.0.0.0", 1080, ServerConfig())
"""

import contextlib
import ipaddress
import socket
import socketserver
from typing import TYPE_CHECKING

from loguru import logger

from socks5_proxy.core.utils.utils import format_address

from .dns_handler import DNSResolver
from .socks_handler import SocksHandler

if TYPE_CHECKING:
    from socks5_proxy.core.config import ServerConfig


def _is_ipv6(host: str) -> bool:
    try:
        return isinstance(ipaddress.ip_address(host), ipaddress.IPv6Address)
    except ValueError:
        return False


class SocksProxy(socketserver.ThreadingMixIn, socketserver.TCPServer):
    """SOCKS proxy server implementation."""

    allow_reuse_address = True
    daemon_threads = True
    request_queue_size = 100

    def __init__(
        self,
        server_address: tuple[str, int],
        config: "ServerConfig",
        handler_class: type[socketserver.BaseRequestHandler] = SocksHandler,
        bind_and_activate: bool = True,
    ) -> None:
        """Validate the configuration, then bind the listening socket.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.resolver = DNSResolver(config.nameservers)
        if _is_ipv6(server_address[0]):
            self.address_family = socket.AF_INET6
        super().__init__(server_address, handler_class, bind_and_activate)

    def handle_error(self, request, client_address) -> None:
        """Log errors the handler did not expect and keep serving."""
        logger.exception(f"Unexpected error handling {format_address(client_address)}")


def create_proxy_server(host: str, port: int, config: "ServerConfig") -> SocksProxy:
    """Create a SOCKS proxy server bound to ``host:port``.

    Args:
        host: Host address to bind to
        port: Port number to listen on, 0 for any free port
        config: Server configuration

    Returns:
        SocksProxy: Bound server, ready for ``serve_forever``

    Raises:
        ConfigurationError: If the configuration is invalid
        OSError: If the address cannot be bound
    """
    return SocksProxy((host, port), config)


def run_server(host: str, port: int, config: "ServerConfig") -> None:
    """Serve SOCKS5 clients until interrupted.

    Args:
        host: Host address to bind to
        port: Port number to listen on
        config: Server configuration
    """
    server = create_proxy_server(host, port, config)
    try:
        logger.info(f"listening: {format_address(server.server_address)}")
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server stopping")
    finally:
        with contextlib.suppress(OSError):
            server.server_close()
        logger.info("Server closed")
