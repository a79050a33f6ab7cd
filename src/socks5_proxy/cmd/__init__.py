"""Command line interface modules.

This package provides the command-line tools for:
- Starting the SOCKS5 proxy server
- Loading credentials for username/password authentication
- Listing network interfaces to listen on
- Error reporting and logging

The command modules provide user-friendly interfaces to the core
proxy server functionality.
"""
