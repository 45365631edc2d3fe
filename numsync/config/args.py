"""Argument types shared by the server and client command lines."""

import argparse


def port_number(value: str) -> int:
    """argparse type for a TCP port: an integer in 0-65535."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port number: {value!r}")
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port must be 0-65535, got {port}")
    return port
