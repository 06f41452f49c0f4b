"""VLC rc protocol parsing utilities.

VLC's rc interface uses a simple line-based text protocol:
- Commands are sent as plain text lines ("get_time", "seek 42")
- Replies are plain lines, sometimes prefixed by the "> " prompt
- The "status" command answers with three parenthesised lines:
  "( new input: file:///path )", "( audio volume: 256 )", "( state playing )"

Reference: https://wiki.videolan.org/Documentation:Modules/rc/
"""

import logging
import re

from vlcctrl.api.rc.types import RcStatus

logger = logging.getLogger(__name__)


class RcError(Exception):
    """Base class for VLC rc errors."""


class RcProtocolError(RcError):
    """VLC replied with a line that does not match the expected shape."""

    def __init__(self, field: str, line: str) -> None:
        self.field = field
        self.line = line
        super().__init__(f"Unexpected {field} line in status reply: {line!r}")


# Commands without a reply
CMD_PLAY = "play"
CMD_ADD = "add"
CMD_PAUSE = "pause"
CMD_SEEK = "seek"
CMD_STOP = "stop"
CMD_FRAME = "frame"

# Commands answered with a single line
CMD_GET_TITLE = "get_title"
CMD_GET_TIME = "get_time"
CMD_GET_LENGTH = "get_length"
CMD_IS_PLAYING = "is_playing"
CMD_VOLUME = "volume"

# Answered with STATUS_LINE_COUNT lines
CMD_STATUS = "status"

# Status reply patterns, in the order VLC prints them
STATUS_PATTERNS: dict[str, re.Pattern[str]] = {
    "file": re.compile(r"\( new input: file://(.*) \)"),
    "volume": re.compile(r"\( audio volume: (\d+) \)"),
    "state": re.compile(r"\( state (.*) \)"),
}
STATUS_LINE_COUNT = len(STATUS_PATTERNS)

PROMPT = "> "


def format_command(command: str, *args: object) -> str:
    """Format an rc command with arguments.

    Args:
        command: The rc command name.
        *args: Command arguments, converted with ``str``.

    Returns:
        Formatted command string (without newline).
    """
    if not args:
        return command
    return f"{command} {' '.join(str(arg) for arg in args)}"


def strip_prompt(line: str) -> str:
    """Remove line terminators and leading "> " prompts from a reply line."""
    line = line.rstrip("\r\n")
    while line.startswith(PROMPT):
        line = line[len(PROMPT) :]
    # A bare prompt with trailing whitespace stripped
    if line == PROMPT.rstrip():
        return ""
    return line


def parse_int(reply: str | None, default: int = 0) -> int:
    """Parse an integer reply, falling back to ``default`` on failure.

    VLC answers numeric queries with an empty line when nothing is
    playing, so a failed parse is expected and not an error.

    Args:
        reply: Raw reply line.
        default: Value returned when the reply is not an integer.

    Returns:
        The parsed integer, or ``default``.
    """
    try:
        return int(reply)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.debug("Non-integer reply %r, using default %d", reply, default)
        return default


def parse_status(lines: list[str]) -> RcStatus:
    """Parse the three "status" lines into an RcStatus.

    Lines are matched positionally: media path, volume, state.

    Args:
        lines: Exactly STATUS_LINE_COUNT reply lines.

    Returns:
        RcStatus instance.

    Raises:
        RcProtocolError: If a line does not match its pattern.
        ValueError: If the number of lines is wrong.
    """
    if len(lines) != STATUS_LINE_COUNT:
        msg = f"Expected {STATUS_LINE_COUNT} status lines, got {len(lines)}"
        raise ValueError(msg)

    values: dict[str, str] = {}
    for (field, pattern), line in zip(STATUS_PATTERNS.items(), lines, strict=True):
        match = pattern.search(line)
        if match is None:
            raise RcProtocolError(field, line)
        values[field] = match.group(1)

    return RcStatus(**values)
