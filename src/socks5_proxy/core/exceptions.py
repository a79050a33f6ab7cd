"""Custom exceptions for the proxy server.

This module defines the exceptions raised by the SOCKS5 protocol engine.
Every failure a single client connection can hit derives from ``ProxyError``,
so the connection handler can log it and drop that connection without
touching the accept loop:

- Protocol violations (version, reserved field, address type, command)
- Authentication failures
- Target dial failures
- DNS resolution failures

Configuration problems derive from ``ConfigurationError`` and are raised
before the server binds its listening socket.

Example:
    try:
        negotiate(stream, config)
    except NoAcceptableMethodError as e:
        logger.warning(f"handshake rejected: {e}")
"""


class ProxyError(Exception):
    """Base exception for proxy errors."""


class MalformedMessageError(ProxyError):
    """Raised when a message is truncated or carries an invalid length."""


class VersionNotSupportedError(ProxyError):
    """Raised when the client speaks a SOCKS version other than 5."""


class MethodVersionNotSupportedError(ProxyError):
    """Raised when the sub-negotiation version is not 1."""


class NoAcceptableMethodError(ProxyError):
    """Raised when the client does not offer the configured auth method."""


class PasswordAuthFailureError(ProxyError):
    """Raised when the password checker rejects the client's credentials."""


class CommandNotSupportedError(ProxyError):
    """Raised for BIND and unknown request commands."""


class InvalidReservedFieldError(ProxyError):
    """Raised when the request's reserved byte is not zero."""


class AddressTypeNotSupportedError(ProxyError):
    """Raised for request address types other than IPv4, IPv6 and domain."""


class TargetConnectionRefusedError(ProxyError):
    """Raised when the outbound connection to the target cannot be opened."""


class DNSResolutionError(ProxyError):
    """Raised when DNS resolution fails."""


class ConfigurationError(ProxyError):
    """Base exception for invalid server configuration."""


class PasswordCheckerNotSetError(ConfigurationError):
    """Raised when password auth is configured without a checker."""


class CredentialFileError(ConfigurationError):
    """Raised when a users file cannot be parsed."""
