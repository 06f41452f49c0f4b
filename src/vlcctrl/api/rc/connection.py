"""Blocking connection to VLC's rc interface.

The socket is opened lazily on the first command and reused for every
following one. Replies are read line by line from an internal buffer.

Example:
    conn = RcConnection("localhost", 9595)
    conn.send("play", expect_reply=False)
    print(conn.send("get_title"))
"""

import logging
import socket
import threading
from typing import Self

from vlcctrl.api.rc.protocol import RcError, strip_prompt

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9595
CONNECT_TIMEOUT = 5.0
READ_TIMEOUT = 10.0
RECV_SIZE = 4096

# VLC prints a two line banner to every new rc client
GREETING_LINES = 2
GREETING_PREFIXES = ("VLC media player", "Command Line Interface initialized")


class RcConnectionError(RcError):
    """The rc socket could not be opened, or was reset or closed."""


class RcTimeoutError(RcError):
    """No complete reply line arrived within the configured timeout."""


class RcConnection:
    """Line-oriented connection to a VLC rc endpoint.

    A lock serializes each request/reply exchange. Replies spanning
    several lines must be read with ``query`` so no other command can
    interleave.

    Attributes:
        host: rc interface hostname or IP.
        port: rc interface port.
        connect_timeout: Seconds to wait for the TCP connection.
        read_timeout: Seconds to wait for a reply line, or None to block.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        connect_timeout: float = CONNECT_TIMEOUT,
        read_timeout: float | None = READ_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

        self._sock: socket.socket | None = None
        self._buffer = b""
        self._lock = threading.Lock()
        self._greeting_left = 0

    @property
    def is_connected(self) -> bool:
        """Return True if the socket is open."""
        return self._sock is not None

    def connect(self) -> None:
        """Open the socket if it is not open yet.

        Raises:
            RcConnectionError: If the connection is refused or fails.
            RcTimeoutError: If the connection attempt times out.
        """
        with self._lock:
            self._ensure_connected()

    def close(self) -> None:
        """Close the socket. The next command reopens it."""
        with self._lock:
            self._close()

    def __enter__(self) -> Self:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, *_: object) -> None:
        """Context manager exit."""
        self.close()

    def send(self, command: str, expect_reply: bool = True) -> str | None:
        """Send a command and optionally read its one-line reply.

        Args:
            command: Command line without terminator.
            expect_reply: Whether VLC answers this command with a line.

        Returns:
            The reply with prompt decoration removed, or None if no reply
            was expected.

        Raises:
            RcConnectionError: On socket failure or EOF.
            RcTimeoutError: If the reply does not arrive in time.
        """
        with self._lock:
            self._ensure_connected()
            self._write(command)
            if not expect_reply:
                return None
            return self._read_line()

    def read_line(self) -> str:
        """Read the next reply line.

        Raises:
            RcConnectionError: On socket failure or EOF.
            RcTimeoutError: If no line arrives in time.
        """
        with self._lock:
            self._ensure_connected()
            return self._read_line()

    def query(self, command: str, line_count: int) -> list[str]:
        """Send a command and read a fixed number of reply lines atomically.

        Args:
            command: Command line without terminator.
            line_count: Number of reply lines to read.

        Returns:
            Reply lines in the order they were received.
        """
        with self._lock:
            self._ensure_connected()
            self._write(command)
            return [self._read_line() for _ in range(line_count)]

    def _ensure_connected(self) -> None:
        """Open the socket if needed (lock held)."""
        if self._sock is not None:
            return

        try:
            sock = socket.create_connection(
                (self.host, self.port), timeout=self.connect_timeout
            )
        except TimeoutError as e:
            raise RcTimeoutError(
                f"Connection to {self.host}:{self.port} timed out"
            ) from e
        except OSError as e:
            raise RcConnectionError(
                f"Failed to connect to {self.host}:{self.port}: {e}"
            ) from e

        self._sock = sock
        self._buffer = b""
        # VLC's banner is skipped by the first read, never waited for here
        self._greeting_left = GREETING_LINES
        sock.settimeout(self.read_timeout)
        logger.info("Connected to VLC rc at %s:%d", self.host, self.port)

    def _write(self, command: str) -> None:
        assert self._sock is not None
        logger.debug("rc command: %s", command)
        try:
            self._sock.sendall(f"{command}\n".encode())
        except OSError as e:
            self._close()
            raise RcConnectionError(f"Failed to send {command!r}: {e}") from e

    def _read_line(self) -> str:
        """Read one reply line, skipping VLC's banner after a fresh connect."""
        while True:
            reply = self._read_reply()
            if self._greeting_left and reply.startswith(GREETING_PREFIXES):
                self._greeting_left -= 1
                logger.debug("VLC greeting: %s", reply)
                continue
            self._greeting_left = 0
            return reply

    def _read_reply(self) -> str:
        try:
            line = self._recv_line()
        except TimeoutError as e:
            # A late reply would be taken as the answer to the next command
            self._close()
            raise RcTimeoutError(
                f"No reply from {self.host}:{self.port} within {self.read_timeout}s"
            ) from e
        reply = strip_prompt(line)
        logger.debug("rc reply: %s", reply)
        return reply

    def _recv_line(self) -> str:
        """Read one raw line from the buffer, receiving as needed.

        Raises:
            TimeoutError: If the socket timeout expires.
            RcConnectionError: On socket failure or EOF.
        """
        assert self._sock is not None
        while b"\n" not in self._buffer:
            try:
                chunk = self._sock.recv(RECV_SIZE)
            except TimeoutError:
                # subclass of OSError, callers decide what a timeout means
                raise
            except OSError as e:
                self._close()
                raise RcConnectionError(f"Read from {self.host}:{self.port} failed: {e}") from e
            if not chunk:
                self._close()
                raise RcConnectionError(f"Connection closed by {self.host}:{self.port}")
            self._buffer += chunk

        raw, self._buffer = self._buffer.split(b"\n", 1)
        return raw.decode("utf-8", errors="replace")

    def _close(self) -> None:
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logger.debug("Expected error during rc disconnect: %s", e)
        finally:
            self._sock = None
            self._buffer = b""
            logger.info("Disconnected from VLC rc")
