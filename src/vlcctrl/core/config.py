"""Configuration manager using QSettings for persistent storage."""

import logging

from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9595
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 10.0
MAX_PORT = 65535

# VLC server settings keys
_KEY_HOST = "server/host"
_KEY_PORT = "server/port"
_KEY_HEADLESS = "server/headless"
_KEY_EXTRA_ARGS = "server/extra_args"

# rc connection settings keys
_KEY_CONNECT_TIMEOUT = "connection/connect_timeout"
_KEY_READ_TIMEOUT = "connection/read_timeout"


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\vlcctrl\\vlcctrl
    - macOS: ~/Library/Preferences/com.vlcctrl.vlcctrl.plist
    - Linux: ~/.config/vlcctrl/vlcctrl.conf

    Example:
        config = ConfigManager()
        server = VlcServer(config.get_host(), config.get_port(), config.get_headless())
    """

    def __init__(self, organization: str = "vlcctrl", application: str = "vlcctrl") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    # -- VLC server settings ---------------------------------------------------

    def get_host(self) -> str:
        """Return the rc interface host (default "localhost")."""
        value = self._settings.value(_KEY_HOST, DEFAULT_HOST, str)
        return str(value) if value else DEFAULT_HOST

    def set_host(self, host: str) -> None:
        """Set the rc interface host.

        Args:
            host: Hostname or IP.
        """
        self._settings.setValue(_KEY_HOST, host)

    def get_port(self) -> int:
        """Return the rc interface port.

        Returns:
            Port number (default 9595).
        """
        try:
            value = int(self._settings.value(_KEY_PORT, DEFAULT_PORT, int))  # type: ignore[arg-type]
        except (TypeError, ValueError) as e:
            logger.warning("Invalid stored port, using %d: %s", DEFAULT_PORT, e)
            return DEFAULT_PORT
        return max(1, min(MAX_PORT, value))

    def set_port(self, port: int) -> None:
        """Set the rc interface port.

        Args:
            port: Port number (1-65535).
        """
        self._settings.setValue(_KEY_PORT, max(1, min(MAX_PORT, port)))

    def get_headless(self) -> bool:
        """Return whether VLC runs without a graphical interface (default False)."""
        return bool(self._settings.value(_KEY_HEADLESS, False, bool))

    def set_headless(self, headless: bool) -> None:
        """Enable or disable headless mode.

        Args:
            headless: True to start cvlc instead of vlc.
        """
        self._settings.setValue(_KEY_HEADLESS, headless)

    def get_extra_args(self) -> list[str]:
        """Return additional VLC CLI arguments.

        Stored as a whitespace-separated string.

        Returns:
            List of arguments, empty if none.
        """
        value = self._settings.value(_KEY_EXTRA_ARGS, "", str)
        return str(value).split() if value else []

    def set_extra_args(self, args: list[str]) -> None:
        """Set additional VLC CLI arguments.

        Args:
            args: List of arguments (must not contain whitespace).
        """
        self._settings.setValue(_KEY_EXTRA_ARGS, " ".join(args))

    # -- rc connection settings ------------------------------------------------

    def get_connect_timeout(self) -> float:
        """Return the rc connect timeout in seconds (default 5.0)."""
        return self._get_positive_float(_KEY_CONNECT_TIMEOUT, DEFAULT_CONNECT_TIMEOUT)

    def set_connect_timeout(self, seconds: float) -> None:
        """Set the rc connect timeout.

        Args:
            seconds: Timeout in seconds (must be positive).
        """
        self._settings.setValue(_KEY_CONNECT_TIMEOUT, float(seconds))

    def get_read_timeout(self) -> float | None:
        """Return the rc read timeout in seconds.

        Returns:
            Timeout in seconds (default 10.0), or None when stored as 0
            (block until a reply arrives).
        """
        value = self._get_positive_float(_KEY_READ_TIMEOUT, DEFAULT_READ_TIMEOUT, allow_zero=True)
        return value or None

    def set_read_timeout(self, seconds: float | None) -> None:
        """Set the rc read timeout.

        Args:
            seconds: Timeout in seconds, or None/0 to block forever.
        """
        self._settings.setValue(_KEY_READ_TIMEOUT, float(seconds or 0))

    def _get_positive_float(self, key: str, default: float, allow_zero: bool = False) -> float:
        raw = self._settings.value(key, default)
        try:
            value = float(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.warning("Invalid value %r for %s, using %s", raw, key, default)
            return default
        if value < 0 or (value == 0 and not allow_zero):
            logger.warning("Out of range value %r for %s, using %s", value, key, default)
            return default
        return value

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
