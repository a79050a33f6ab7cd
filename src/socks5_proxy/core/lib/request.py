"""Proxy request parsing and destination resolution."""

import ipaddress
from dataclasses import dataclass
from typing import BinaryIO

from loguru import logger

from socks5_proxy.core.exceptions import CommandNotSupportedError
from socks5_proxy.core.lib.dns_handler import DNSResolver
from socks5_proxy.core.lib.wire import AddressType, Command, IPAddress, ProxyRequest, decode_request

SUPPORTED_COMMANDS = (Command.CONNECT, Command.UDP_ASSOCIATE)


@dataclass(frozen=True)
class ResolvedRequest:
    """A proxy request whose destination is a concrete IP address."""

    request: ProxyRequest
    host: IPAddress
    port: int

    @property
    def command(self) -> Command:
        return Command(self.request.command)

    @property
    def address(self) -> tuple[str, int]:
        """Socket address for dialing."""
        return str(self.host), self.port

    def __str__(self) -> str:
        if isinstance(self.host, ipaddress.IPv6Address):
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def resolve_address(request: ProxyRequest, resolver: DNSResolver) -> IPAddress:
    """Turn the request's destination into an IP address.

    Literal addresses are used verbatim. Domain names take the first address
    the resolver returns, whatever its family.
    """
    if request.address_type != AddressType.DOMAIN:
        return request.address  # type: ignore[return-value]
    addresses = resolver.resolve(str(request.address))
    return ipaddress.ip_address(addresses[0])


def resolve_request(stream: BinaryIO, resolver: DNSResolver) -> ResolvedRequest:
    """Read one proxy request and resolve its destination.

    Args:
        stream: Client stream, positioned after negotiation
        resolver: Resolver for domain destinations

    Returns:
        ResolvedRequest: Request ready for the dialer

    Raises:
        CommandNotSupportedError: BIND or an unknown command
        DNSResolutionError: The domain could not be resolved
    """
    request = decode_request(stream)
    host = resolve_address(request, resolver)
    resolved = ResolvedRequest(request=request, host=host, port=request.port)
    logger.info(f"target: {resolved}")

    if request.command not in SUPPORTED_COMMANDS:
        name = request.command.name if isinstance(request.command, Command) else f"{request.command:#04x}"
        msg = f"command {name} not supported"
        raise CommandNotSupportedError(msg)

    return resolved
