"""Server configuration consumed by the protocol engine.

The configuration is built once at startup and shared read-only by every
connection thread. It carries the required authentication method, the
password checker used by the username/password sub-negotiation, and the
optional dial/idle timeouts.

Example:
    config = ServerConfig(auth_method=Method.PASSWORD, password_checker=store.check)
    config.validate()
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Final

from socks5_proxy.core.exceptions import ConfigurationError, PasswordCheckerNotSetError
from socks5_proxy.core.lib.wire import Method

PasswordChecker = Callable[[bytes, bytes], bool]

DEFAULT_CONNECT_TIMEOUT: Final = 10.0  # seconds

SUPPORTED_METHODS: Final = (Method.NO_AUTH, Method.PASSWORD)


@dataclass(frozen=True)
class ServerConfig:
    """Settings shared by all connections of one server.

    Attributes:
        auth_method: The single authentication method clients must offer
        password_checker: ``(username, password) -> bool``, called concurrently
            from connection threads; required for ``Method.PASSWORD``
        connect_timeout: Seconds allowed for dialing a target, ``None`` to block
        idle_timeout: Seconds a session may pass with no traffic either way, ``None`` for no limit
        nameservers: Fallback nameservers for domain resolution
    """

    auth_method: Method = Method.NO_AUTH
    password_checker: PasswordChecker | None = None
    connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT
    idle_timeout: float | None = None
    nameservers: Sequence[str] = field(default_factory=tuple)

    def validate(self) -> None:
        """Check the configuration before any connection is accepted.

        Raises:
            PasswordCheckerNotSetError: Password auth without a checker
            ConfigurationError: Unsupported method or non-positive timeout
        """
        if self.auth_method not in SUPPORTED_METHODS:
            msg = f"authentication method {self.auth_method!r} not supported"
            raise ConfigurationError(msg)
        if self.auth_method == Method.PASSWORD and self.password_checker is None:
            msg = "password authentication requires a password checker"
            raise PasswordCheckerNotSetError(msg)
        for name in ("connect_timeout", "idle_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                msg = f"{name} must be positive, got {value}"
                raise ConfigurationError(msg)
