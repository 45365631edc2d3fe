#!/usr/bin/env python3
"""
numsync Server Entry Point

Starts the shared number server and an interactive console on stdin.

Usage:
    python -m numsync.server                 # Default settings (0.0.0.0:1234)
    python -m numsync.server -p 8080         # Custom port
    python -m numsync.server -d              # Enable debug logging

Console:
    <enter>      print the server value
    <integer>    set the server value
    q            quit

Environment Variables:
    NUMSYNC_HOST             - Server bind address
    NUMSYNC_PORT             - Server port
    NUMSYNC_MAX_CONNECTIONS  - Concurrent connection cap (0 = unbounded)
    NUMSYNC_DEBUG            - Enable debug mode (true/false)
"""

import argparse
import logging
import sys

from .config.args import port_number
from .config.log import setup_logging
from .config.settings import settings
from .console import run_console
from .network.context import NetworkContext
from .network.tcp_server import NumberServer
from .state.cell import SharedValue


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="numsync-server",
        description="numsync: shared number server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "-p", "--port",
        type=port_number,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--max-connections",
        type=int,
        default=settings.MAX_CONNECTIONS,
        help="Maximum concurrent connections (0 = unbounded)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    with NetworkContext() as context:
        cell = SharedValue()
        server = NumberServer(
            host=args.host,
            port=args.port,
            cell=cell,
            context=context,
            max_connections=args.max_connections,
        )

        try:
            server.start()
        except (OSError, OverflowError) as e:
            logger.error(f"can't serve port {args.port}: {e}")
            return 1

        logger.info(f"Serving port {server.port}")

        try:
            run_console(cell, prompt="> ")
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            server.stop()
            logger.debug(f"Server stats: {server.get_stats()}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
