"""Network interface lookup for choosing a listening address.

This module provides functionality for:
- Listing network interfaces that are up and carry an IPv4 address
- Resolving an interface name to the address the proxy should bind

Example:
    host = interface_address("eth0")
    run_server(host, 1080, config)
"""

import socket
from dataclasses import dataclass

import psutil


@dataclass
class NetworkInterface:
    """Network interface representation with its key properties.

    Attributes:
        name: Interface name (e.g., 'en0', 'eth0')
        ip: IPv4 address assigned to the interface
        is_up: Boolean indicating if the interface is up and running
        is_loopback: Boolean indicating if this is a loopback interface
    """

    name: str
    ip: str
    is_up: bool
    is_loopback: bool


def list_interfaces() -> list[NetworkInterface]:
    """Return every interface that has an IPv4 address, sorted by name."""
    stats = psutil.net_if_stats()
    interfaces = []
    for name, addrs in psutil.net_if_addrs().items():
        ipv4 = next((addr.address for addr in addrs if addr.family == socket.AF_INET), None)
        if not ipv4:
            continue

        iface_stats = stats.get(name)
        interfaces.append(
            NetworkInterface(
                name=name,
                ip=ipv4,
                is_up=bool(iface_stats and iface_stats.isup),
                is_loopback=ipv4.startswith("127."),
            )
        )
    return sorted(interfaces, key=lambda iface: iface.name)


def interface_address(name: str) -> str:
    """Return the IPv4 address of an interface that is up.

    Raises:
        LookupError: If the interface is unknown, down, or has no IPv4 address
    """
    for iface in list_interfaces():
        if iface.name != name:
            continue
        if not iface.is_up:
            msg = f"interface {name} is down"
            raise LookupError(msg)
        return iface.ip
    msg = f"interface {name} not found or has no IPv4 address"
    raise LookupError(msg)
