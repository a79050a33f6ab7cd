"""Authentication method negotiation.

Runs the first phase of every connection: the client offers a list of
methods, the server accepts the configured one or refuses with
``Method.NO_ACCEPTABLE``. For username/password the RFC 1929
sub-negotiation follows and the credentials are handed to the configured
checker.

The choice is written exactly once, and the sub-negotiation result at most
once, before any byte of the request phase is read.
"""

from typing import TYPE_CHECKING, BinaryIO

from loguru import logger

from socks5_proxy.core.exceptions import NoAcceptableMethodError, PasswordAuthFailureError, PasswordCheckerNotSetError
from socks5_proxy.core.lib.wire import (
    Method,
    decode_greeting,
    decode_password_credential,
    encode_choice,
    encode_password_result,
)

if TYPE_CHECKING:
    from socks5_proxy.core.config import ServerConfig


def negotiate(stream: BinaryIO, config: "ServerConfig") -> Method:
    """Perform SOCKS5 method negotiation.

    Args:
        stream: Client stream
        config: Server configuration holding the required method

    Returns:
        Method: The method agreed with the client

    Raises:
        NoAcceptableMethodError: The client did not offer the configured method
        PasswordAuthFailureError: The checker rejected the credentials
    """
    greeting = decode_greeting(stream)
    if config.auth_method not in greeting.methods:
        encode_choice(stream, Method.NO_ACCEPTABLE)
        offered = ", ".join(f"{method:#04x}" for method in greeting.methods) or "none"
        msg = f"method {config.auth_method:#04x} not offered (offered: {offered})"
        raise NoAcceptableMethodError(msg)

    encode_choice(stream, config.auth_method)

    if config.auth_method == Method.PASSWORD:
        authenticate_password(stream, config)

    return config.auth_method


def authenticate_password(stream: BinaryIO, config: "ServerConfig") -> None:
    """Run the username/password sub-negotiation."""
    if config.password_checker is None:
        msg = "password authentication requires a password checker"
        raise PasswordCheckerNotSetError(msg)

    credential = decode_password_credential(stream)
    if not config.password_checker(credential.username, credential.password):
        encode_password_result(stream, success=False)
        msg = f"authentication failed for user {credential.username!r}"
        raise PasswordAuthFailureError(msg)

    encode_password_result(stream, success=True)
    logger.debug(f"user {credential.username!r} authenticated")
