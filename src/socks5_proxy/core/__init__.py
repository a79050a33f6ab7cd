"""Core proxy server implementation.

This package contains the core components of the SOCKS proxy server:
- Wire codec for the SOCKS5 message layouts
- Method negotiation and username/password authentication
- Request parsing and DNS resolution
- Target dialing and the bi-directional relay
- Threaded server implementation
- Configuration, credentials and exception handling

The core package provides all the fundamental functionality needed
to run a SOCKS proxy server, while keeping the implementation details
separate from the command-line interface.
"""
