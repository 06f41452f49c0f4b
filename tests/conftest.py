"""Test fixtures for vlcctrl tests."""

import os
import socket
import threading
import time
from collections.abc import Generator

import pytest

# Qt must not try to reach a display server in CI
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

VLC_GREETING = (
    b"VLC media player 3.0.20 Vetinari\n"
    b"Command Line Interface initialized. Type `help' for help.\n"
    b"> "
)


class FakeRcServer:
    """Threaded stand-in for VLC's rc interface on a loopback port.

    Each received command is recorded, then answered with the lines
    registered for it in ``replies`` (nothing if unregistered).
    """

    def __init__(self, greeting: bytes = VLC_GREETING) -> None:
        self.greeting = greeting
        self.replies: dict[str, list[str]] = {}
        self.received: list[str] = []
        self.connections = 0
        self.close_after: str | None = None  # drop the client after this command

        self._clients: list[socket.socket] = []
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen()
        self.host, self.port = self._sock.getsockname()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def wait_received(self, count: int, timeout: float = 2.0) -> list[str]:
        """Block until at least ``count`` commands were received."""
        deadline = time.monotonic() + timeout
        while len(self.received) < count and time.monotonic() < deadline:
            time.sleep(0.01)
        return self.received

    def close(self) -> None:
        """Stop accepting and drop all clients."""
        self._sock.close()
        for client in self._clients:
            try:
                client.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            client.close()

    def _serve(self) -> None:
        while True:
            try:
                client, _ = self._sock.accept()
            except OSError:
                return
            self.connections += 1
            self._clients.append(client)
            threading.Thread(target=self._handle, args=(client,), daemon=True).start()

    def _handle(self, client: socket.socket) -> None:
        try:
            if self.greeting:
                client.sendall(self.greeting)
            buffer = b""
            while True:
                data = client.recv(4096)
                if not data:
                    return
                buffer += data
                while b"\n" in buffer:
                    raw, buffer = buffer.split(b"\n", 1)
                    command = raw.decode().strip()
                    self.received.append(command)
                    if command == self.close_after:
                        client.close()
                        return
                    for reply in self.replies.get(command, []):
                        client.sendall(f"{reply}\r\n".encode())
        except OSError:
            return


@pytest.fixture
def rc_server() -> Generator[FakeRcServer, None, None]:
    """Fixture providing a fake VLC rc server on a random port."""
    server = FakeRcServer()
    yield server
    server.close()


@pytest.fixture
def unused_port() -> int:
    """Return a loopback port nothing is listening on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
