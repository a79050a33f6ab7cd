"""DNS resolution using the system resolver and dnspython."""

import socket
from collections.abc import Sequence
from typing import TYPE_CHECKING, Final, NoReturn, cast

import dns.exception
import dns.resolver
from loguru import logger

from socks5_proxy.core.exceptions import DNSResolutionError

if TYPE_CHECKING:
    from dns.resolver import Resolver

# DNS resolver constants
DEFAULT_TIMEOUT: Final = 1.0  # seconds
DEFAULT_LIFETIME: Final = 3.0  # seconds
RECORD_TYPES: Final = ("A", "AAAA")


class DNSResolver:
    """Resolve domain names to an ordered list of IP address strings.

    The system resolver is tried first. When it fails and fallback
    nameservers are configured, they are queried with dnspython for A then
    AAAA records. The resolver holds no mutable state after construction and
    is shared by all connection threads.
    """

    def __init__(self, nameservers: Sequence[str] = ()) -> None:
        """Initialize the resolver.

        Args:
            nameservers: Fallback nameservers; empty disables the fallback
        """
        self.nameservers = tuple(nameservers)
        self.resolver: "Resolver | None" = None
        if self.nameservers:
            self.resolver = cast("Resolver", dns.resolver.Resolver(configure=False))
            self.resolver.timeout = DEFAULT_TIMEOUT
            self.resolver.lifetime = DEFAULT_LIFETIME
            self.resolver.nameservers = list(self.nameservers)

    def _try_system_dns(self, domain: str) -> list[str]:
        """Try resolving using system DNS."""
        try:
            addrinfo = socket.getaddrinfo(domain, None, proto=socket.IPPROTO_TCP)
        except (socket.gaierror, UnicodeError) as e:
            logger.debug(f"System DNS resolution failed for {domain}: {e}")
            return []
        addresses: list[str] = []
        for *_, sockaddr in addrinfo:
            address = str(sockaddr[0])
            if address not in addresses:
                addresses.append(address)
        return addresses

    def _try_configured_resolver(self, domain: str) -> list[str]:
        """Try resolving using the fallback nameservers."""
        if self.resolver is None:
            return []
        addresses: list[str] = []
        for record_type in RECORD_TYPES:
            try:
                answer = self.resolver.resolve(domain, record_type)
            except dns.exception.DNSException as e:
                logger.debug(f"Configured resolver failed for {domain} ({record_type}): {e}")
                continue
            addresses.extend(str(rdata) for rdata in answer)
        return addresses

    def _raise_dns_error(self, msg: str) -> NoReturn:
        """Raise a DNS resolution error.

        Args:
            msg: Error message

        Raises:
            DNSResolutionError: Always raised with the given message
        """
        raise DNSResolutionError(msg)

    def resolve(self, domain: str) -> list[str]:
        """Resolve domain name to IP addresses.

        Args:
            domain: Domain name to resolve

        Returns:
            list[str]: Resolved addresses in resolver order, never empty

        Raises:
            DNSResolutionError: If resolution fails or yields no address
        """
        if addresses := self._try_system_dns(domain):
            return addresses

        if addresses := self._try_configured_resolver(domain):
            return addresses

        error_msg = f"Could not resolve {domain} using any available method"
        logger.debug(error_msg)
        self._raise_dns_error(error_msg)
