"""Core proxy functionality and main entry point for the SOCKS proxy server.

This module serves as the main entry point for the SOCKS proxy server functionality.
It provides a clean interface to the underlying proxy implementation by exposing
only the necessary components through its public API.

Example:
    from socks5_proxy.core.config import ServerConfig
    from socks5_proxy.core.proxy import run_server

    # Start a SOCKS proxy server on localhost:1080 without authentication
    run_server("127.0.0.1", 1080, ServerConfig())

Attributes:
    __all__ (list): List of public components exposed by this module
"""

from .lib import SocksProxy, create_proxy_server, run_server

__all__ = ["SocksProxy", "create_proxy_server", "run_server"]
