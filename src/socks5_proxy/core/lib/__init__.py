"""Core proxy library components."""

from .proxy_server import SocksProxy, create_proxy_server, run_server
from .relay import RelayStats, Session, relay
from .socks_handler import SocksHandler

__all__ = [
    "create_proxy_server",
    "relay",
    "RelayStats",
    "run_server",
    "Session",
    "SocksHandler",
    "SocksProxy",
]
