"""Core layer: VLC process supervision and configuration.

Classes:
    VlcServer: Starts, daemonizes and stops a local VLC process.
    ConfigManager: QSettings wrapper for configuration.
"""

from vlcctrl.core.config import ConfigManager
from vlcctrl.core.platform import LaunchStrategy, Platform, detect_platform, strategy_for
from vlcctrl.core.vlc_server import ServerState, VlcServer, VlcStartError

__all__ = [
    "ConfigManager",
    "LaunchStrategy",
    "Platform",
    "ServerState",
    "VlcServer",
    "VlcStartError",
    "detect_platform",
    "strategy_for",
]
