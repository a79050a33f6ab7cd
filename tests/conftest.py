"""Shared fixtures: in-memory streams, echo targets and a running proxy."""

import io
import socket
import socketserver
import threading

import pytest

from socks5_proxy.core.config import ServerConfig
from socks5_proxy.core.exceptions import DNSResolutionError
from socks5_proxy.core.lib.proxy_server import SocksProxy
from socks5_proxy.core.lib.socks_handler import SocketStream
from socks5_proxy.core.lib.wire import (
    Method,
    decode_choice,
    decode_password_result,
    decode_reply,
    encode_greeting,
    encode_password_credential,
    encode_request,
)

TIMEOUT = 5.0


class FakeStream:
    """Client stream double: reads from ``inbound``, records writes in ``outbound``."""

    def __init__(self, data: bytes = b"") -> None:
        self.inbound = io.BytesIO(data)
        self.outbound = io.BytesIO()

    def read(self, size: int) -> bytes:
        return self.inbound.read(size)

    def write(self, data: bytes) -> int:
        return self.outbound.write(data)

    @property
    def written(self) -> bytes:
        return self.outbound.getvalue()

    @property
    def unread(self) -> bytes:
        return self.inbound.getvalue()[self.inbound.tell() :]


class StubResolver:
    """Resolver double returning fixed answers."""

    def __init__(self, answers: dict[str, list[str]] | None = None) -> None:
        self.answers = answers or {}
        self.queries: list[str] = []

    def resolve(self, domain: str) -> list[str]:
        self.queries.append(domain)
        addresses = self.answers.get(domain, [])
        if not addresses:
            raise DNSResolutionError(f"Could not resolve {domain}")
        return addresses


class _EchoHandler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        while data := self.request.recv(4096):
            self.request.sendall(data)


class _EchoServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    allow_reuse_address = True
    daemon_threads = True


@pytest.fixture
def stream_factory():
    return FakeStream


@pytest.fixture
def tcp_echo_server():
    """TCP echo server on 127.0.0.1; yields its address."""
    server = _EchoServer(("127.0.0.1", 0), _EchoHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server.server_address
    server.shutdown()
    server.server_close()


@pytest.fixture
def udp_echo_server():
    """UDP echo socket on 127.0.0.1; yields its address."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(0.2)
    stop = threading.Event()

    def serve() -> None:
        while not stop.is_set():
            try:
                data, peer = sock.recvfrom(65535)
            except TimeoutError:
                continue
            except OSError:
                return
            sock.sendto(data, peer)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield sock.getsockname()
    stop.set()
    thread.join(timeout=TIMEOUT)
    sock.close()


@pytest.fixture
def closed_port() -> int:
    """A local TCP port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def start_proxy():
    """Start SocksProxy instances on 127.0.0.1 in background threads."""
    servers: list[SocksProxy] = []

    def start(config: ServerConfig | None = None) -> SocksProxy:
        server = SocksProxy(("127.0.0.1", 0), config or ServerConfig())
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


class SocksClient:
    """Minimal blocking SOCKS5 client for end-to-end tests."""

    def __init__(self, proxy_address: tuple[str, int]) -> None:
        self.sock = socket.create_connection(proxy_address, timeout=TIMEOUT)
        self.stream = SocketStream(self.sock)

    def greet(self, methods: list[int] | None = None) -> int:
        encode_greeting(self.stream, methods if methods is not None else [Method.NO_AUTH])
        return decode_choice(self.stream)

    def login(self, username: bytes, password: bytes) -> bool:
        encode_password_credential(self.stream, username, password)
        return decode_password_result(self.stream)

    def request(self, command: int, address, port: int):
        encode_request(self.stream, command, address, port)
        return decode_reply(self.stream)

    def recv_exactly(self, size: int) -> bytes:
        buf = b""
        while len(buf) < size:
            chunk = self.sock.recv(size - len(buf))
            if not chunk:
                break
            buf += chunk
        return buf

    def close(self) -> None:
        self.sock.close()


@pytest.fixture
def socks_client():
    clients: list[SocksClient] = []

    def connect(proxy_address: tuple[str, int]) -> SocksClient:
        client = SocksClient(proxy_address)
        clients.append(client)
        return client

    yield connect
    for client in clients:
        client.close()


@pytest.fixture
def stub_resolver():
    return StubResolver
