"""
Network Context

Owns every socket the process opens. Create one at startup, hand it to
the server or poller, and close it on the way out; closing it shuts down
all sockets still open, which unblocks any thread waiting on them.
"""

import logging
import socket
import threading
from typing import Set

from ..config.settings import settings

logger = logging.getLogger(__name__)


class NetworkContext:
    """
    Process-wide socket bookkeeping.

    Usage:
        with NetworkContext() as net:
            sock = net.connect('localhost', 1234)
            ...
        # every socket opened through net is closed here
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sockets: Set[socket.socket] = set()
        self._closed = False

    def _track(self, sock: socket.socket) -> socket.socket:
        with self._lock:
            if self._closed:
                sock.close()
                raise RuntimeError("network context is closed")
            self._sockets.add(sock)
        return sock

    def open_listener(self, host: str, port: int, backlog: int = None) -> socket.socket:
        """
        Bind and listen on (host, port).

        Raises:
            OSError: If the port cannot be bound (in use, permission denied)
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(backlog if backlog is not None else settings.LISTEN_BACKLOG)
        except Exception:
            sock.close()
            raise
        logger.debug(f"Listening on {sock.getsockname()}")
        return self._track(sock)

    def accept(self, listener: socket.socket):
        """Accept one connection on listener and track it."""
        conn, addr = listener.accept()
        return self._track(conn), addr

    def connect(self, host: str, port: int) -> socket.socket:
        """
        Open a client connection to (host, port).

        Raises:
            OSError: If the connection cannot be established
        """
        sock = socket.create_connection((host, port))
        logger.debug(f"Connected to {host}:{port}")
        return self._track(sock)

    def release(self, sock: socket.socket) -> None:
        """Shut down and close one socket, forgetting it."""
        with self._lock:
            self._sockets.discard(sock)
        close_socket(sock)

    def open_count(self) -> int:
        """Number of sockets currently tracked."""
        with self._lock:
            return len(self._sockets)

    def close(self) -> None:
        """Close every tracked socket. Further opens raise RuntimeError."""
        with self._lock:
            self._closed = True
            sockets = list(self._sockets)
            self._sockets.clear()
        for sock in sockets:
            close_socket(sock)

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def close_socket(sock: socket.socket) -> None:
    # shutdown() wakes threads blocked in recv()/accept() on Linux; close() alone does not
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass  # not connected, or already shut down
    sock.close()
