"""VLC rc (remote control) protocol client."""

from vlcctrl.api.rc.client import VlcClient, media_arg
from vlcctrl.api.rc.connection import RcConnection, RcConnectionError, RcTimeoutError
from vlcctrl.api.rc.protocol import RcError, RcProtocolError
from vlcctrl.api.rc.types import RcStatus

__all__ = [
    "RcConnection",
    "RcConnectionError",
    "RcError",
    "RcProtocolError",
    "RcStatus",
    "RcTimeoutError",
    "VlcClient",
    "media_arg",
]
