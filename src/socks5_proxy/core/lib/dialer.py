"""Outbound connections to proxy targets.

CONNECT requests open a TCP connection; UDP ASSOCIATE requests open a
connected UDP socket. Either way the client gets exactly one reply: success
with the outbound socket's local address, or ``CONNECTION_REFUSED`` for any
dial failure.
"""

import ipaddress
import socket
from typing import BinaryIO

from loguru import logger

from socks5_proxy.core.exceptions import TargetConnectionRefusedError
from socks5_proxy.core.lib.request import ResolvedRequest
from socks5_proxy.core.lib.wire import Command, IPAddress, Reply, encode_reply


def bound_address(sock: socket.socket) -> tuple[IPAddress, int]:
    """Return the local endpoint of a socket as an IPv4 or IPv6 address."""
    sockname = sock.getsockname()
    # link-local IPv6 addresses carry a scope suffix
    host = str(sockname[0]).split("%", 1)[0]
    return ipaddress.ip_address(host), sockname[1]


def open_connection(target: ResolvedRequest, connect_timeout: float | None = None) -> socket.socket:
    """Open the transport matching the request's command.

    Raises:
        OSError: If the connection cannot be established
    """
    if target.command == Command.CONNECT:
        return socket.create_connection(target.address, timeout=connect_timeout)

    family = socket.AF_INET6 if isinstance(target.host, ipaddress.IPv6Address) else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_DGRAM)
    try:
        sock.connect(target.address)
    except OSError:
        sock.close()
        raise
    return sock


def dial_target(
    stream: BinaryIO,
    target: ResolvedRequest,
    connect_timeout: float | None = None,
    idle_timeout: float | None = None,
) -> socket.socket:
    """Connect to the target and report the outcome to the client.

    Args:
        stream: Client stream for the reply
        target: Resolved request
        connect_timeout: Seconds allowed for the TCP handshake
        idle_timeout: Timeout applied to the connected socket

    Returns:
        socket.socket: The outbound connection

    Raises:
        TargetConnectionRefusedError: If the dial failed
    """
    try:
        remote = open_connection(target, connect_timeout)
    except OSError as e:
        logger.warning(f"dial {target} failed: {e}")
        encode_reply(stream, Reply.CONNECTION_REFUSED)
        msg = f"connection to {target} refused"
        raise TargetConnectionRefusedError(msg) from e

    try:
        remote.settimeout(idle_timeout)
        host, port = bound_address(remote)
        encode_reply(stream, Reply.SUCCEEDED, host, port)
    except BaseException:
        remote.close()
        raise
    return remote
