"""Platform detection and VLC launch strategies.

The platform is detected once and mapped to a LaunchStrategy that
describes how VLC is invoked there: which binary, where the standard
streams go, and whether a detached child can get its own session.
"""

from __future__ import annotations

import logging
import os
import platform
import signal
from dataclasses import dataclass, replace
from enum import StrEnum

logger = logging.getLogger(__name__)

VLC_BINARY = "vlc"
CVLC_BINARY = "cvlc"
MACOS_VLC_BINARY = "/Applications/VLC.app/Contents/MacOS/VLC"


class Platform(StrEnum):
    """Platform families with distinct VLC invocation rules."""

    WINDOWS = "windows"
    MACOS = "macos"
    UNIX = "unix"


@dataclass(frozen=True)
class LaunchStrategy:
    """How VLC is spawned on one platform family.

    Attributes:
        gui_binary: Binary started when not headless.
        headless_binary: Binary started in headless mode.
        null_device: Target for stdin, stdout and stderr.
        new_session: Whether a detached child can get its own session.
        child_exit_notification: Whether the death of an attached child
            can be observed and reported.
    """

    gui_binary: str
    headless_binary: str
    null_device: str
    new_session: bool
    child_exit_notification: bool

    def binary(self, headless: bool) -> str:
        """Return the binary to start.

        Args:
            headless: True to run VLC without a graphical interface.
        """
        return self.headless_binary if headless else self.gui_binary


# Windows has no process groups, and /dev/null may not be emulated there
STRATEGIES: dict[Platform, LaunchStrategy] = {
    Platform.WINDOWS: LaunchStrategy(
        gui_binary=VLC_BINARY,
        headless_binary=CVLC_BINARY,
        null_device="NUL",
        new_session=False,
        child_exit_notification=False,
    ),
    Platform.MACOS: LaunchStrategy(
        gui_binary=MACOS_VLC_BINARY,
        headless_binary=MACOS_VLC_BINARY,
        null_device="/dev/null",
        new_session=True,
        child_exit_notification=True,
    ),
    Platform.UNIX: LaunchStrategy(
        gui_binary=VLC_BINARY,
        headless_binary=CVLC_BINARY,
        null_device="/dev/null",
        new_session=True,
        child_exit_notification=True,
    ),
}


def detect_platform() -> Platform:
    """Detect the platform family of the running interpreter."""
    if os.environ.get("OS") == "Windows_NT":
        return Platform.WINDOWS

    system = platform.system().lower()
    if system == "windows":
        return Platform.WINDOWS
    if system == "darwin":
        return Platform.MACOS
    return Platform.UNIX


def strategy_for(target: Platform | None = None) -> LaunchStrategy:
    """Return the launch strategy for a platform.

    Args:
        target: Platform family, or None to detect the current one.
    """
    if target is None:
        target = detect_platform()
    strategy = STRATEGIES[target]
    # Windows-like environments (e.g. MSYS) may still lack SIGCHLD semantics
    if strategy.child_exit_notification and not hasattr(signal, "SIGCHLD"):
        logger.debug("No child-exit notification available on %s", target)
        strategy = replace(strategy, child_exit_notification=False)
    return strategy
