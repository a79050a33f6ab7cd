"""Binary message layouts of the SOCKS5 protocol.

This module encodes and decodes every fixed message exchanged with a client,
according to RFC 1928 and RFC 1929:

- Method negotiation (greeting and server choice)
- Username/password sub-negotiation (credential and result)
- Proxy request and reply

All multi-byte integers are big-endian. The functions operate on binary
streams: anything offering ``read(n)`` for decoding and ``write(data)`` for
encoding, such as a socket file or ``io.BytesIO``.

Decoders raise a specific ``ProxyError`` subclass for each kind of malformed
input, so callers can decide whether a reply code applies.

Example:
    greeting = decode_greeting(stream)
    encode_choice(stream, Method.NO_AUTH)
"""

import ipaddress
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO, Final

from socks5_proxy.core.exceptions import (
    AddressTypeNotSupportedError,
    InvalidReservedFieldError,
    MalformedMessageError,
    MethodVersionNotSupportedError,
    VersionNotSupportedError,
)

# Protocol constants
SOCKS_VERSION: Final = 0x05
SUBNEGOTIATION_VERSION: Final = 0x01
RESERVED: Final = 0x00

PASSWORD_AUTH_SUCCESS: Final = 0x00
PASSWORD_AUTH_FAILURE: Final = 0x01

IPV4_LENGTH: Final = 4
IPV6_LENGTH: Final = 16
MAX_FIELD_LENGTH: Final = 255

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

UNSPECIFIED_ADDRESS: Final = ipaddress.IPv4Address(0)


class Method(IntEnum):
    """Authentication method identifiers."""

    NO_AUTH = 0x00
    GSSAPI = 0x01
    PASSWORD = 0x02
    NO_ACCEPTABLE = 0xFF


class Command(IntEnum):
    """Request commands."""

    CONNECT = 0x01
    BIND = 0x02
    UDP_ASSOCIATE = 0x03


class AddressType(IntEnum):
    """Address types carried in requests and replies."""

    IPV4 = 0x01
    DOMAIN = 0x03
    IPV6 = 0x04


class Reply(IntEnum):
    """Reply codes."""

    SUCCEEDED = 0x00
    GENERAL_FAILURE = 0x01
    NOT_ALLOWED = 0x02
    NETWORK_UNREACHABLE = 0x03
    HOST_UNREACHABLE = 0x04
    CONNECTION_REFUSED = 0x05
    TTL_EXPIRED = 0x06
    COMMAND_NOT_SUPPORTED = 0x07
    ADDRESS_TYPE_NOT_SUPPORTED = 0x08


_KNOWN_COMMANDS: Final = frozenset(command.value for command in Command)


@dataclass(frozen=True)
class ClientGreeting:
    """Method negotiation message sent by the client."""

    version: int
    methods: tuple[int, ...]


@dataclass(frozen=True)
class PasswordCredential:
    """Username/password pair from the sub-negotiation."""

    username: bytes
    password: bytes


@dataclass(frozen=True)
class ProxyRequest:
    """Proxy request sent by the client.

    Attributes:
        version: Protocol version (always 5 once decoded)
        command: Command byte; a ``Command`` member when known, else the raw int
        address_type: How ``address`` was encoded on the wire
        address: IP address object for literals, name string for domains
        port: Destination port
    """

    version: int
    command: int
    address_type: AddressType
    address: IPAddress | str
    port: int


@dataclass(frozen=True)
class ProxyReply:
    """Reply to a proxy request, describing the server's bound endpoint."""

    version: int
    reply: int
    address_type: AddressType
    address: IPAddress | str
    port: int


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes from a stream.

    Raw socket files may return short reads, so this keeps reading until the
    requested amount has arrived.

    Raises:
        MalformedMessageError: If the stream ends first
    """
    buf = b""
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            msg = f"stream closed after {len(buf)} of {size} bytes"
            raise MalformedMessageError(msg)
        buf += chunk
    return buf


def _read_byte(stream: BinaryIO) -> int:
    return read_exact(stream, 1)[0]


def _check_version(version: int) -> None:
    if version != SOCKS_VERSION:
        msg = f"protocol version {version} not supported"
        raise VersionNotSupportedError(msg)


def _length_prefixed(value: bytes, field: str) -> bytes:
    if len(value) > MAX_FIELD_LENGTH:
        msg = f"{field} longer than {MAX_FIELD_LENGTH} bytes"
        raise ValueError(msg)
    return struct.pack("!B", len(value)) + value


# Method negotiation


def decode_greeting(stream: BinaryIO) -> ClientGreeting:
    """Read the client's method negotiation message."""
    version, nmethods = struct.unpack("!BB", read_exact(stream, 2))
    _check_version(version)
    methods = read_exact(stream, nmethods)
    return ClientGreeting(version=version, methods=tuple(methods))


def encode_greeting(stream: BinaryIO, methods: list[int]) -> None:
    stream.write(struct.pack("!BB", SOCKS_VERSION, len(methods)) + bytes(methods))


def encode_choice(stream: BinaryIO, method: int) -> None:
    """Write the server's chosen method (``Method.NO_ACCEPTABLE`` to refuse)."""
    stream.write(struct.pack("!BB", SOCKS_VERSION, method))


def decode_choice(stream: BinaryIO) -> int:
    version, method = struct.unpack("!BB", read_exact(stream, 2))
    _check_version(version)
    return method


# Username/password sub-negotiation


def decode_password_credential(stream: BinaryIO) -> PasswordCredential:
    """Read a username/password sub-negotiation request.

    Raises:
        MethodVersionNotSupportedError: If the sub-negotiation version is not 1
        MalformedMessageError: If the message is truncated
    """
    version = _read_byte(stream)
    if version != SUBNEGOTIATION_VERSION:
        msg = f"sub-negotiation version {version} not supported"
        raise MethodVersionNotSupportedError(msg)
    username = read_exact(stream, _read_byte(stream))
    password = read_exact(stream, _read_byte(stream))
    return PasswordCredential(username=username, password=password)


def encode_password_credential(stream: BinaryIO, username: bytes, password: bytes) -> None:
    stream.write(
        struct.pack("!B", SUBNEGOTIATION_VERSION)
        + _length_prefixed(username, "username")
        + _length_prefixed(password, "password")
    )


def encode_password_result(stream: BinaryIO, success: bool) -> None:
    """Write the sub-negotiation status."""
    status = PASSWORD_AUTH_SUCCESS if success else PASSWORD_AUTH_FAILURE
    stream.write(struct.pack("!BB", SUBNEGOTIATION_VERSION, status))


def decode_password_result(stream: BinaryIO) -> bool:
    version, status = struct.unpack("!BB", read_exact(stream, 2))
    if version != SUBNEGOTIATION_VERSION:
        msg = f"sub-negotiation version {version} not supported"
        raise MethodVersionNotSupportedError(msg)
    return status == PASSWORD_AUTH_SUCCESS


# Requests and replies


def _decode_address(stream: BinaryIO, address_type: int) -> tuple[IPAddress | str, int]:
    if address_type == AddressType.IPV4:
        address: IPAddress | str = ipaddress.IPv4Address(read_exact(stream, IPV4_LENGTH))
    elif address_type == AddressType.IPV6:
        address = ipaddress.IPv6Address(read_exact(stream, IPV6_LENGTH))
    elif address_type == AddressType.DOMAIN:
        raw = read_exact(stream, _read_byte(stream))
        try:
            address = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            msg = f"domain name is not valid UTF-8: {raw!r}"
            raise MalformedMessageError(msg) from e
    else:
        msg = f"address type {address_type:#04x} not supported"
        raise AddressTypeNotSupportedError(msg)
    (port,) = struct.unpack("!H", read_exact(stream, 2))
    return address, port


def _encode_address(address: IPAddress | str, port: int) -> bytes:
    if isinstance(address, ipaddress.IPv4Address):
        body = struct.pack("!B", AddressType.IPV4) + address.packed
    elif isinstance(address, ipaddress.IPv6Address):
        body = struct.pack("!B", AddressType.IPV6) + address.packed
    else:
        body = struct.pack("!B", AddressType.DOMAIN) + _length_prefixed(address.encode("utf-8"), "domain name")
    return body + struct.pack("!H", port)


def decode_request(stream: BinaryIO) -> ProxyRequest:
    """Read the client's proxy request.

    Raises:
        VersionNotSupportedError: If the version is not 5
        InvalidReservedFieldError: If the reserved byte is not zero
        AddressTypeNotSupportedError: If the address type is unknown
        MalformedMessageError: If the message is truncated
    """
    version, command, reserved, address_type = struct.unpack("!BBBB", read_exact(stream, 4))
    _check_version(version)
    if reserved != RESERVED:
        msg = f"reserved field is {reserved:#04x}"
        raise InvalidReservedFieldError(msg)
    address, port = _decode_address(stream, address_type)
    return ProxyRequest(
        version=version,
        # unknown commands are rejected by the request resolver
        command=Command(command) if command in _KNOWN_COMMANDS else command,
        address_type=AddressType(address_type),
        address=address,
        port=port,
    )


def encode_request(stream: BinaryIO, command: int, address: IPAddress | str, port: int) -> None:
    stream.write(struct.pack("!BBB", SOCKS_VERSION, command, RESERVED) + _encode_address(address, port))


def encode_reply(
    stream: BinaryIO,
    code: int,
    bound_addr: IPAddress = UNSPECIFIED_ADDRESS,
    bound_port: int = 0,
) -> None:
    """Write a reply carrying the server's bound address and port."""
    stream.write(struct.pack("!BBB", SOCKS_VERSION, code, RESERVED) + _encode_address(bound_addr, bound_port))


def decode_reply(stream: BinaryIO) -> ProxyReply:
    version, code, reserved, address_type = struct.unpack("!BBBB", read_exact(stream, 4))
    _check_version(version)
    if reserved != RESERVED:
        msg = f"reserved field is {reserved:#04x}"
        raise InvalidReservedFieldError(msg)
    address, port = _decode_address(stream, address_type)
    return ProxyReply(
        version=version,
        reply=code,
        address_type=AddressType(address_type),
        address=address,
        port=port,
    )
