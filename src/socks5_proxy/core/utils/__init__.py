"""Utility functions and helpers."""

from socks5_proxy.core.utils.log_config import LOG_DIR, setup_logging
from socks5_proxy.core.utils.utils import format_address, format_bytes

__all__ = ["LOG_DIR", "format_address", "format_bytes", "setup_logging"]
