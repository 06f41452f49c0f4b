"""VLC rc protocol data types."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RcStatus:
    """Reply to VLC's "status" command.

    Values are kept as the raw strings VLC printed.

    Attributes:
        file: Path of the media being played (without the file:// prefix).
        volume: Audio volume level (VLC scale, 256 = 100%).
        state: Playback state - "playing", "paused" or "stopped".
    """

    file: str
    volume: str
    state: str

    @property
    def is_playing(self) -> bool:
        """Return True if currently playing."""
        return self.state == "playing"

    @property
    def is_paused(self) -> bool:
        """Return True if paused."""
        return self.state == "paused"

    @property
    def is_stopped(self) -> bool:
        """Return True if stopped."""
        return self.state == "stopped"
