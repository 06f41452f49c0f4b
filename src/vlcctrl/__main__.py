"""Command line entry point for vlcctrl."""

import argparse
import logging
import sys
import time

from PySide6.QtCore import QCoreApplication

from vlcctrl.api.rc import RcConnection, RcError, VlcClient
from vlcctrl.core.config import ConfigManager
from vlcctrl.core.vlc_server import VlcServer

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.5


def build_parser(config: ConfigManager) -> argparse.ArgumentParser:
    """Build the argument parser, with defaults taken from config."""
    parser = argparse.ArgumentParser(
        prog="vlcctrl",
        description="vlcctrl - control a VLC media player over its rc interface",
    )
    parser.add_argument("--host", default=config.get_host(), help="rc interface host")
    parser.add_argument("--port", type=int, default=config.get_port(), help="rc interface port")
    parser.add_argument(
        "--headless",
        action="store_true",
        default=config.get_headless(),
        help="start cvlc (no graphical interface)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("serve", help="start VLC and stop it on Ctrl-C")
    commands.add_parser("daemon", help="start VLC detached and print its pid")
    commands.add_parser("status", help="print media, volume and state")
    send = commands.add_parser("send", help="send a raw rc command")
    send.add_argument("words", nargs="+", help="command and arguments")
    send.add_argument("--no-reply", action="store_true", help="do not wait for a reply")
    return parser


def serve(server: VlcServer) -> int:
    """Run an attached VLC until it exits or is interrupted."""
    # QProcess reports the death of VLC through the Qt event loop
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    pid = server.start()
    print(f"VLC running (pid {pid}) on {server.rc_host}, Ctrl-C to stop")
    try:
        while server.is_running:
            app.processEvents()
            time.sleep(POLL_INTERVAL)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the vlcctrl command line.

    Returns:
        Exit code (0 for success).
    """
    config = ConfigManager()
    args = build_parser(config).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command in ("serve", "daemon"):
        server = VlcServer(args.host, args.port, args.headless, config.get_extra_args())
        try:
            if args.command == "serve":
                return serve(server)
            print(server.daemonize())
        except OSError as e:
            print(f"Could not start VLC: {e}", file=sys.stderr)
            return 1
        return 0

    connection = RcConnection(
        args.host,
        args.port,
        connect_timeout=config.get_connect_timeout(),
        read_timeout=config.get_read_timeout(),
    )
    try:
        with VlcClient(connection=connection) as vlc:
            if args.command == "status":
                status = vlc.status()
                print(f"file: {status.file}\nvolume: {status.volume}\nstate: {status.state}")
            else:
                reply = connection.send(" ".join(args.words), expect_reply=not args.no_reply)
                if reply is not None:
                    print(reply)
    except RcError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
