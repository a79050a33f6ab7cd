"""Read-only username/password store.

The store maps usernames to passwords and exposes ``check`` as the password
checker handed to ``ServerConfig``. It is never mutated after construction,
so connection threads can call ``check`` concurrently.

Users files hold one ``username:password`` per line. Blank lines and lines
starting with ``#`` are ignored.

Example:
    store = CredentialStore.from_file(Path("users.txt"))
    config = ServerConfig(auth_method=Method.PASSWORD, password_checker=store.check)
"""

import hmac
from collections.abc import Iterable, Mapping
from pathlib import Path

from loguru import logger

from socks5_proxy.core.exceptions import CredentialFileError


def parse_user_entry(entry: str) -> tuple[str, str]:
    """Split a ``username:password`` entry.

    The password may itself contain colons; the username may not be empty.

    Raises:
        ValueError: If the entry has no colon or an empty username
    """
    username, sep, password = entry.partition(":")
    if not sep or not username:
        msg = f"expected 'username:password', got {entry!r}"
        raise ValueError(msg)
    return username, password


class CredentialStore:
    """Immutable username -> password mapping."""

    def __init__(self, users: Mapping[str, str] | None = None) -> None:
        self._users: dict[bytes, bytes] = {
            name.encode("utf-8"): password.encode("utf-8") for name, password in (users or {}).items()
        }

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, username: str) -> bool:
        return username.encode("utf-8") in self._users

    @classmethod
    def from_entries(cls, entries: Iterable[str]) -> "CredentialStore":
        users = dict(parse_user_entry(entry) for entry in entries)
        return cls(users)

    @classmethod
    def from_file(cls, path: Path) -> "CredentialStore":
        """Load a users file.

        Args:
            path: File with one ``username:password`` per line

        Returns:
            CredentialStore: Store holding every user in the file

        Raises:
            CredentialFileError: If the file is unreadable or a line is malformed
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            msg = f"cannot read users file {path}: {e}"
            raise CredentialFileError(msg) from e

        users: dict[str, str] = {}
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                username, password = parse_user_entry(line)
            except ValueError as e:
                msg = f"{path}:{lineno}: {e}"
                raise CredentialFileError(msg) from e
            if username in users:
                logger.warning(f"{path}:{lineno}: duplicate user {username!r}, last entry wins")
            users[username] = password

        logger.debug(f"Loaded {len(users)} users from {path}")
        return cls(users)

    def merged(self, other: "CredentialStore") -> "CredentialStore":
        """Return a new store with ``other``'s users taking precedence."""
        store = CredentialStore()
        store._users = {**self._users, **other._users}
        return store

    def check(self, username: bytes, password: bytes) -> bool:
        """Password checker for the username/password sub-negotiation."""
        expected = self._users.get(username)
        if expected is None:
            return False
        return hmac.compare_digest(expected, password)
