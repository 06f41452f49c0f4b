"""VLC subprocess supervisor using QProcess.

Manages the lifecycle of a local VLC process that exposes the rc
interface: start (attached or detached), stop, and state tracking.

An attached VLC is tied to this process: it is stopped when the
interpreter exits or receives SIGINT, and its own death is reported
through ``QProcess.finished`` (delivered by the Qt event loop). A
daemonized VLC is started with ``QProcess.startDetached`` in its own
session and is left alone when this process goes away.

All playback control goes through the rc connection (see
``vlcctrl.api.rc``) - this module only manages the subprocess.

Usage:
    from vlcctrl.core.vlc_server import VlcServer

    server = VlcServer("localhost", 9595, headless=True)
    server.state_changed.connect(on_state)
    pid = server.start()
"""

from __future__ import annotations

import atexit
import logging
import os
import signal
import threading
from dataclasses import dataclass
from enum import StrEnum
from types import FrameType
from typing import Any

from PySide6.QtCore import QObject, QProcess, Signal

from vlcctrl.core.platform import Platform, strategy_for

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9595
MAX_PORT = 65535
START_TIMEOUT_MS = 5000

# rc flags are managed here and must not be overridden through extra_args
_BLOCKED_ARGS = frozenset({"--rc-host"})


class VlcStartError(OSError):
    """The VLC process could not be started."""


class ServerState(StrEnum):
    """Lifecycle state of the supervised VLC process."""

    STOPPED = "stopped"
    RUNNING = "running"
    DAEMONIZED = "daemonized"


@dataclass(frozen=True)
class _Tracked:
    """State, pid and process handle, replaced together.

    ``process`` is only set for an attached VLC; a daemonized one is
    known by its pid alone.
    """

    state: ServerState
    pid: int | None = None
    process: QProcess | None = None


_STOPPED = _Tracked(ServerState.STOPPED)


class _InterruptHook:
    """Process-wide SIGINT handler shared by all attached servers.

    Installed when the first server registers and put back when the last
    one leaves. On SIGINT every registered server is stopped, then the
    handler that was active before is called.
    """

    def __init__(self) -> None:
        self._servers: list[VlcServer] = []
        self._previous: Any = None
        self._installed = False
        # the handler runs on the main thread, possibly inside add/remove
        self._lock = threading.RLock()

    @property
    def installed(self) -> bool:
        """Return True if the handler is installed."""
        return self._installed

    def add(self, server: VlcServer) -> None:
        """Register an attached server and install the handler if needed."""
        with self._lock:
            if server not in self._servers:
                self._servers.append(server)
            if self._installed:
                return
            if threading.current_thread() is not threading.main_thread():
                logger.debug("Not in main thread, SIGINT hook skipped")
                return
            try:
                self._previous = signal.signal(signal.SIGINT, self.handle)
            except (OSError, ValueError) as e:
                logger.debug("SIGINT hook not installed: %s", e)
                return
            self._installed = True

    def remove(self, server: VlcServer) -> None:
        """Unregister a server, restoring the previous handler when none is left."""
        with self._lock:
            if server in self._servers:
                self._servers.remove(server)
            if self._servers or not self._installed:
                return
            # signal handlers can only be changed from the main thread; a
            # handler left behind finds no servers and just chains
            if threading.current_thread() is not threading.main_thread():
                return
            if signal.getsignal(signal.SIGINT) != self.handle:
                # Someone chained on top of us and still calls us as their
                # previous handler, so ours must keep chaining correctly
                logger.debug("SIGINT handler replaced elsewhere, leaving chain intact")
                return
            signal.signal(signal.SIGINT, self._previous)
            self._previous = None
            self._installed = False

    def handle(self, signum: int, frame: FrameType | None) -> None:
        """SIGINT handler: stop attached VLCs, then defer to the previous handler."""
        with self._lock:
            servers = list(self._servers)
            previous = self._previous
        for server in servers:
            server.handle_parent_exit()
        if callable(previous):
            previous(signum, frame)
        elif previous == signal.SIG_DFL:
            raise KeyboardInterrupt


_interrupt_hook = _InterruptHook()


class VlcServer(QObject):
    """Manages a local VLC subprocess with the rc interface enabled.

    Signals:
        state_changed: Emitted on every transition (state string).
        process_exited: Emitted when an attached VLC dies on its own (pid).

    Example:
        server = VlcServer(headless=True)
        server.state_changed.connect(lambda s: print(f"VLC: {s}"))
        server.start()
        ...
        server.stop()
    """

    state_changed = Signal(str)  # "stopped", "running", "daemonized"
    process_exited = Signal(int)  # pid of the attached VLC that exited

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        headless: bool = False,
        extra_args: list[str] | None = None,
        platform: Platform | None = None,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            host: Address the rc interface binds to.
            port: Port the rc interface listens on.
            headless: Run VLC without a graphical interface.
            extra_args: Additional VLC command line arguments.
            platform: Platform family to launch for, detected if None.
            parent: Optional parent QObject.

        Raises:
            ValueError: If host is empty, port is out of range, or
                extra_args contain blocked flags.
        """
        super().__init__(parent)
        if not host.strip():
            msg = "Host must not be empty or whitespace-only"
            raise ValueError(msg)
        if not (1 <= port <= MAX_PORT):
            msg = f"Port must be 1–{MAX_PORT}, got {port}"
            raise ValueError(msg)

        self.host = host
        self.port = port
        self.headless = headless
        self._extra_args: list[str] = []
        self.set_extra_args(extra_args or [])

        self._strategy = strategy_for(platform)
        self._lock = threading.RLock()
        self._tracked = _STOPPED
        self._exit_hook_installed = False

    # -- Queries ---------------------------------------------------------------

    @property
    def state(self) -> ServerState:
        """Return the current lifecycle state."""
        return self._tracked.state

    @property
    def pid(self) -> int | None:
        """Return the pid of the tracked VLC, None when stopped."""
        return self._tracked.pid

    @property
    def is_running(self) -> bool:
        """Return True if a VLC process is tracked (attached or daemonized)."""
        return self._tracked.state is not ServerState.STOPPED

    is_started = is_running

    @property
    def is_stopped(self) -> bool:
        """Return True if no VLC process is tracked."""
        return self._tracked.state is ServerState.STOPPED

    @property
    def is_daemonized(self) -> bool:
        """Return True if VLC was started detached."""
        return self._tracked.state is ServerState.DAEMONIZED

    @property
    def extra_args(self) -> list[str]:
        """Return a copy of the extra VLC arguments."""
        return self._extra_args.copy()

    @property
    def rc_host(self) -> str:
        """Return the "host:port" the rc interface binds to."""
        return f"{self.host}:{self.port}"

    def set_extra_args(self, args: list[str]) -> None:
        """Set additional CLI arguments for VLC.

        Takes effect on the next start.

        Args:
            args: List of extra arguments.

        Raises:
            ValueError: If args contain blocked flags managed internally.
        """
        blocked = [a for a in args if a in _BLOCKED_ARGS or a.split("=", 1)[0] in _BLOCKED_ARGS]
        if blocked:
            msg = f"Blocked arguments (managed internally): {blocked}"
            raise ValueError(msg)
        self._extra_args = list(args)

    # -- Lifecycle -------------------------------------------------------------

    def start(self, detached: bool = False) -> int:
        """Start VLC in a subprocess.

        Does nothing if VLC is already running or daemonized.

        Args:
            detached: Start VLC as a daemon that outlives this process.

        Returns:
            The pid of the (possibly pre-existing) VLC process.

        Raises:
            VlcStartError: If the process could not be started. The state
                stays stopped.
        """
        with self._lock:
            existing = self._tracked.pid
            if existing is not None:
                logger.debug("VLC already %s (pid %d)", self._tracked.state, existing)
                return existing

            if detached:
                pid = self._launch_detached()
                self._tracked = _Tracked(ServerState.DAEMONIZED, pid)
            else:
                process = self._launch()
                pid = process.processId()
                self._tracked = _Tracked(ServerState.RUNNING, pid, process)
                self._install_hooks()
            state = self._tracked.state

        logger.info("VLC %s (pid %d)", state, pid)
        self.state_changed.emit(state)
        return pid

    def daemonize(self) -> int:
        """Start VLC as a daemon. See ``start``."""
        return self.start(detached=True)

    def stop(self) -> int | None:
        """Terminate the tracked VLC process.

        Sends SIGTERM and returns without waiting for the process to exit.

        Returns:
            The pid that was terminated, or None if VLC was not running.
        """
        with self._lock:
            tracked = self._tracked
            if tracked.pid is None:
                return None

            logger.info("Stopping VLC (pid %d, SIGTERM)", tracked.pid)
            if tracked.process is not None:
                tracked.process.terminate()
                self._release(tracked.process)
            else:
                try:
                    os.kill(tracked.pid, signal.SIGTERM)
                except ProcessLookupError:
                    logger.debug("VLC (pid %d) already gone", tracked.pid)
            self._tracked = _STOPPED
            if tracked.state is ServerState.RUNNING:
                self._remove_hooks()

        self.state_changed.emit(ServerState.STOPPED)
        return tracked.pid

    def handle_child_exit(self, pid: int, returncode: int | None = None) -> bool:
        """Record that a VLC child process has exited.

        Only an attached VLC is affected: the exit of a daemonized or
        already stopped process is ignored.

        Args:
            pid: pid of the process that exited.
            returncode: Its exit status, if known.

        Returns:
            True if the state was reset to stopped.
        """
        with self._lock:
            tracked = self._tracked
            if tracked.state is not ServerState.RUNNING or tracked.pid != pid:
                return False
            self._tracked = _STOPPED
            self._remove_hooks()
            if tracked.process is not None:
                tracked.process.deleteLater()

        logger.warning("VLC (pid %d) exited on its own (code %s)", pid, returncode)
        self.process_exited.emit(pid)
        self.state_changed.emit(ServerState.STOPPED)
        return True

    def handle_parent_exit(self) -> None:
        """Stop an attached VLC because this process is exiting.

        A daemonized VLC is left running.
        """
        if self._tracked.state is not ServerState.RUNNING:
            return
        logger.info("Interpreter exiting, stopping attached VLC")
        self.stop()

    # -- Internals -------------------------------------------------------------

    def _build_args(self) -> list[str]:
        """Build VLC CLI arguments."""
        return ["--extraintf", "rc", "--rc-host", self.rc_host, *self._extra_args]

    def _new_process(self, parent: QObject | None) -> QProcess:
        """Create a QProcess for VLC with its standard streams on the null device."""
        process = QProcess(parent)
        null = self._strategy.null_device
        process.setStandardInputFile(null)
        process.setStandardOutputFile(null)
        process.setStandardErrorFile(null)
        process.setProgram(self._strategy.binary(self.headless))
        process.setArguments(self._build_args())
        logger.info("Starting VLC: %r %r", process.program(), process.arguments())
        return process

    def _launch(self) -> QProcess:
        """Start an attached VLC and wait until it is running."""
        process = self._new_process(self)
        process.start()
        if not process.waitForStarted(START_TIMEOUT_MS):
            program, error = process.program(), process.errorString()
            process.deleteLater()
            logger.error("Failed to start VLC (%s): %s", program, error)
            msg = f"Could not start {program}: {error}"
            raise VlcStartError(msg)

        if self._strategy.child_exit_notification:
            # processId() is 0 once the process is gone
            pid = process.processId()
            process.finished.connect(
                lambda exit_code, _status: self.handle_child_exit(pid, exit_code)
            )
        else:
            logger.debug("Child-exit notification not supported, not watching VLC")
        return process

    def _launch_detached(self) -> int:
        """Start VLC in its own session and return its pid."""
        if not self._strategy.new_session:
            logger.debug("No session isolation for detached VLC on this platform")
        process = self._new_process(None)
        started, pid = process.startDetached()
        if not started:
            logger.error("Failed to start detached VLC (%s)", process.program())
            msg = f"Could not start {process.program()}: {process.errorString()}"
            raise VlcStartError(msg)
        return pid

    def _release(self, process: QProcess) -> None:
        """Stop tracking a terminated QProcess; it is deleted once reaped."""
        if self._strategy.child_exit_notification:
            try:
                process.finished.disconnect()
            except RuntimeError:
                logger.debug("finished already disconnected")
        process.finished.connect(process.deleteLater)

    def _install_hooks(self) -> None:
        """Stop the attached VLC on interpreter exit and on SIGINT."""
        if not self._exit_hook_installed:
            atexit.register(self.handle_parent_exit)
            self._exit_hook_installed = True
        _interrupt_hook.add(self)

    def _remove_hooks(self) -> None:
        if self._exit_hook_installed:
            atexit.unregister(self.handle_parent_exit)
            self._exit_hook_installed = False
        _interrupt_hook.remove(self)
