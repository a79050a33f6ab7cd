"""Bi-directional byte relay between a client and its target.

Each direction is copied by its own thread. When either direction stops,
because of end-of-stream, a transport error or an idle session, both sockets
are shut down so the other direction unblocks too. ``relay`` joins both
threads and closes both sockets before returning, so no half-open session
outlives the call.

A socket timeout only wakes a reader up. The session ends on it only when
neither direction has moved data for ``Session.idle_timeout`` seconds, so a
one-way download keeps the session alive while the client stays silent.

Transport errors are logged but never change the outcome: a finished relay
is the signal of record.
"""

import contextlib
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Final

from loguru import logger

BUFFER_SIZE: Final = 32 * 1024
DATAGRAM_BUFFER_SIZE: Final = 65535


@dataclass
class RelayStats:
    """Bytes copied in each direction of one session."""

    client_to_target: int = 0
    target_to_client: int = 0

    @property
    def total(self) -> int:
        return self.client_to_target + self.target_to_client


@dataclass
class Session:
    """Client connection and target connection, owned together."""

    client: socket.socket
    target: socket.socket
    idle_timeout: float | None = None
    last_activity: float = field(default_factory=time.monotonic)
    closed: threading.Event = field(default_factory=threading.Event)

    def touch(self) -> None:
        """Record traffic in either direction."""
        self.last_activity = time.monotonic()

    def idle_for(self) -> float:
        return time.monotonic() - self.last_activity

    def expired(self) -> bool:
        """Whether the session went quiet for longer than ``idle_timeout``."""
        return self.idle_timeout is None or self.idle_for() >= self.idle_timeout

    def shutdown(self) -> None:
        """Stop traffic on both sockets, waking any blocked reader."""
        self.closed.set()
        for sock in (self.client, self.target):
            with contextlib.suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)

    def close(self) -> None:
        for sock in (self.client, self.target):
            with contextlib.suppress(OSError):
                sock.close()


def _copy(session: Session, source: socket.socket, destination: socket.socket, stats: RelayStats, counter: str) -> None:
    datagrams = source.type == socket.SOCK_DGRAM
    bufsize = DATAGRAM_BUFFER_SIZE if datagrams else BUFFER_SIZE
    try:
        while not session.closed.is_set():
            try:
                data = source.recv(bufsize)
            except TimeoutError:
                if not session.expired():
                    continue
                logger.debug(f"relay {counter} stopped: idle for {session.idle_for():.1f}s")
                break
            # an empty datagram is still a datagram
            if not data and not datagrams:
                break
            session.touch()
            destination.sendall(data)
            session.touch()
            setattr(stats, counter, getattr(stats, counter) + len(data))
    except OSError as e:
        logger.debug(f"relay {counter} stopped: {e}")
    finally:
        session.shutdown()


def relay(session: Session) -> RelayStats:
    """Copy bytes both ways until either side finishes.

    Args:
        session: Connected client and target sockets

    Returns:
        RelayStats: Byte counts for the teardown log
    """
    stats = RelayStats()
    threads = [
        threading.Thread(
            target=_copy,
            args=(session, session.client, session.target, stats, "client_to_target"),
            name="relay-client-to-target",
            daemon=True,
        ),
        threading.Thread(
            target=_copy,
            args=(session, session.target, session.client, stats, "target_to_client"),
            name="relay-target-to-client",
            daemon=True,
        ),
    ]
    try:
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
    finally:
        session.shutdown()
        session.close()
    return stats
