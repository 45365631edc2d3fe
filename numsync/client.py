#!/usr/bin/env python3
"""
numsync Client Entry Point

Connects to a numsync server, starts the poller, and reads the local
value from stdin. Every second the poller sends the local value to the
server if it changed (or asks for the server value if not) and prints
the reply.

Usage:
    python -m numsync.client                     # Connect to localhost:1234
    python -m numsync.client -h 10.0.0.5         # Connect to specific host
    python -m numsync.client -p 8080 -d          # Custom port, debug logging

Console:
    <enter>      print the local value
    <integer>    set the local value
    q            quit
"""

import argparse
import logging
import sys

from .config.args import port_number
from .config.log import setup_logging
from .config.settings import settings
from .console import run_console
from .network.context import NetworkContext
from .network.lines import terminator_for
from .network.poller import Poller
from .state.cell import SharedValue


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments. -h is the host, so help is --help only."""
    parser = argparse.ArgumentParser(
        prog="numsync-client",
        description="numsync: shared number client",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        add_help=False,
    )

    parser.add_argument(
        "--help",
        action="help",
        help="Show this help message and exit",
    )

    parser.add_argument(
        "-p", "--port",
        type=port_number,
        default=settings.PORT,
        help="Server port",
    )

    parser.add_argument(
        "-h", "--host",
        type=str,
        default=settings.CLIENT_HOST,
        help="Server host",
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=settings.POLL_INTERVAL,
        help="Seconds between polls",
    )

    parser.add_argument(
        "--terminator",
        choices=["newline", "nul"],
        default=settings.TERMINATOR,
        help="Request line terminator",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point for the client."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    with NetworkContext() as context:
        try:
            sock = context.connect(args.host, args.port)
        except (OSError, OverflowError) as e:
            logger.error(f"can't connect to port {args.port}: {e}")
            return 1

        cell = SharedValue()
        poller = Poller(
            sock,
            cell,
            context=context,
            interval=args.interval,
            terminator=terminator_for(args.terminator),
        )
        poller.start()

        try:
            run_console(cell)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            poller.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
