"""VLC playback controls over the rc interface.

Thin wrappers that translate playback operations into rc commands and
interpret VLC's replies. Numeric queries are lenient: a reply that is not
an integer resolves to a documented default instead of raising.

Example:
    with VlcClient("localhost", 9595) as vlc:
        vlc.play("http://example.org/media.mp3")
        print(vlc.title(), vlc.progress())
"""

import logging
from pathlib import Path
from typing import Self

from vlcctrl.api.rc.connection import RcConnection
from vlcctrl.api.rc.protocol import (
    CMD_ADD,
    CMD_FRAME,
    CMD_GET_LENGTH,
    CMD_GET_TIME,
    CMD_GET_TITLE,
    CMD_IS_PLAYING,
    CMD_PAUSE,
    CMD_PLAY,
    CMD_SEEK,
    CMD_STATUS,
    CMD_STOP,
    CMD_VOLUME,
    STATUS_LINE_COUNT,
    format_command,
    parse_int,
    parse_status,
)
from vlcctrl.api.rc.types import RcStatus

logger = logging.getLogger(__name__)


def media_arg(media: str | Path) -> str:
    """Convert a media argument into the string VLC expects.

    Args:
        media: A URL or path string, or a filesystem Path.

    Returns:
        The string to pass to the "add" command.

    Raises:
        TypeError: If media is neither a str nor a Path.
    """
    if isinstance(media, Path):
        return str(media.expanduser().resolve())
    if isinstance(media, str):
        return media
    msg = f"Can not play media of type {type(media).__name__}"
    raise TypeError(msg)


class VlcClient:
    """Playback controls for a VLC instance.

    Attributes:
        connection: The rc connection all commands go through.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 9595,
        connection: RcConnection | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            host: rc interface hostname or IP.
            port: rc interface port.
            connection: Existing connection to reuse (host/port are ignored).
        """
        self.connection = connection if connection is not None else RcConnection(host, port)

    def connect(self) -> None:
        """Open the rc connection now instead of on the first command."""
        self.connection.connect()

    def disconnect(self) -> None:
        """Close the rc connection."""
        self.connection.close()

    @property
    def is_connected(self) -> bool:
        """Return True if the rc socket is open."""
        return self.connection.is_connected

    def __enter__(self) -> Self:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, *_: object) -> None:
        """Context manager exit."""
        self.disconnect()

    # -------------------------------------------------------------------------
    # Playback Control
    # -------------------------------------------------------------------------

    def play(self, media: str | Path | None = None) -> None:
        """Play new media, or resume the current one.

        Args:
            media: URL or path to enqueue and play. None resumes playback.
        """
        if media is None:
            self.connection.send(CMD_PLAY, expect_reply=False)
        else:
            self.connection.send(format_command(CMD_ADD, media_arg(media)), expect_reply=False)

    def pause(self) -> None:
        """Toggle pause."""
        self.connection.send(CMD_PAUSE, expect_reply=False)

    def seek(self, seconds: int = 0) -> None:
        """Seek to an absolute position.

        Args:
            seconds: Position in seconds (truncated to an integer).
        """
        self.connection.send(format_command(CMD_SEEK, int(seconds)), expect_reply=False)

    def stop(self) -> None:
        """Stop playback."""
        self.connection.send(CMD_STOP, expect_reply=False)

    def frame(self) -> None:
        """Advance one frame."""
        self.connection.send(CMD_FRAME, expect_reply=False)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def title(self) -> str:
        """Return the title of the media being played."""
        return self.connection.send(CMD_GET_TITLE)  # type: ignore[return-value]

    def time(self) -> int:
        """Return the playback position in seconds, 0 if unknown."""
        return parse_int(self.connection.send(CMD_GET_TIME))

    def length(self) -> int:
        """Return the media length in seconds, 0 if unknown."""
        return parse_int(self.connection.send(CMD_GET_LENGTH))

    def progress(self) -> int:
        """Return playback progress as an integer percentage."""
        length = self.length()
        if length == 0:
            return 0
        return 100 * self.time() // length

    def is_playing(self) -> bool:
        """Return True if VLC reports media being played."""
        return self.connection.send(CMD_IS_PLAYING) == "1"

    def is_stopped(self) -> bool:
        """Return True if VLC reports playback stopped."""
        return self.connection.send(CMD_IS_PLAYING) == "0"

    def volume(self) -> int:
        """Return the current volume level, 0 if unknown."""
        return parse_int(self.connection.send(CMD_VOLUME))

    def set_volume(self, level: object) -> int | None:
        """Set the volume level.

        Args:
            level: New volume level. Anything ``int()`` accepts.

        Returns:
            The level sent to VLC, or None if level is not an integer
            (nothing is sent in that case).
        """
        try:
            value = int(level)  # type: ignore[call-overload]
        except (TypeError, ValueError):
            logger.debug("Ignoring invalid volume level %r", level)
            return None
        self.connection.send(format_command(CMD_VOLUME, value), expect_reply=False)
        return value

    def status(self) -> RcStatus:
        """Return the media path, volume and state reported by VLC.

        Raises:
            RcProtocolError: If a status line does not match its pattern.
        """
        lines = self.connection.query(CMD_STATUS, STATUS_LINE_COUNT)
        return parse_status(lines)
