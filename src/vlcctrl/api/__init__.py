"""API clients for VLC's rc interface."""

from vlcctrl.api.rc import (
    RcConnection,
    RcConnectionError,
    RcError,
    RcProtocolError,
    RcTimeoutError,
    VlcClient,
)

__all__ = [
    "RcConnection",
    "RcConnectionError",
    "RcError",
    "RcProtocolError",
    "RcTimeoutError",
    "VlcClient",
]
