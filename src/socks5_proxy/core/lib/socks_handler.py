"""SOCKS protocol handler implementation for the proxy server.

This module runs the SOCKS5 protocol for one accepted connection, according
to RFC 1928 and RFC 1929:

- Method negotiation and optional username/password authentication
- Request parsing and destination resolution (IPv4, IPv6, domain names)
- Dialing the target (CONNECT over TCP, UDP ASSOCIATE over UDP)
- Bi-directional data forwarding

The phases run strictly in that order. Any protocol or transport error ends
this connection only; it is logged with the peer address and the server
keeps accepting.

Example:
    # The handler is automatically used by the SocksProxy server class
    server = SocksProxy((host, port), config)
    server.serve_forever()
"""

import socket
import socketserver
from typing import TYPE_CHECKING

from loguru import logger

from socks5_proxy.core.exceptions import ProxyError
from socks5_proxy.core.lib.dialer import dial_target
from socks5_proxy.core.lib.negotiation import negotiate
from socks5_proxy.core.lib.relay import RelayStats, Session, relay
from socks5_proxy.core.lib.request import resolve_request
from socks5_proxy.core.utils.utils import format_address, format_bytes

if TYPE_CHECKING:
    from socks5_proxy.core.lib.proxy_server import SocksProxy


class SocketStream:
    """Binary stream over a connected socket.

    Reads are unbuffered so no relay bytes are consumed ahead of time, and
    writes always send the whole message.
    """

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    def read(self, size: int) -> bytes:
        return self._sock.recv(size)

    def write(self, data: bytes) -> int:
        self._sock.sendall(data)
        return len(data)


class SocksHandler(socketserver.BaseRequestHandler):
    """Handle incoming SOCKS5 connections."""

    server: "SocksProxy"

    def setup(self) -> None:
        self.request.settimeout(self.server.config.idle_timeout)

    def serve_connection(self) -> RelayStats:
        """Run negotiation, request, dial and relay for this connection."""
        config = self.server.config
        stream = SocketStream(self.request)

        negotiate(stream, config)
        target = resolve_request(stream, self.server.resolver)
        remote = dial_target(stream, target, config.connect_timeout, config.idle_timeout)

        return relay(Session(client=self.request, target=remote, idle_timeout=config.idle_timeout))

    def handle(self) -> None:
        """Handle incoming SOCKS5 connection."""
        peer = format_address(self.client_address)
        logger.info(f"source: {peer}")
        try:
            stats = self.serve_connection()
        except (ProxyError, OSError) as exc:
            logger.warning(f"handle connection failure from {peer}: {exc}")
            return
        logger.info(
            f"closed {peer}: sent {format_bytes(stats.client_to_target)}, "
            f"received {format_bytes(stats.target_to_client)}"
        )
