"""
Threaded TCP Server Module

This module implements the numsync server: a listener that accepts
connections in a loop and a handler per connection, each running in its
own thread and sharing one SharedValue.

Key pieces:
- NumberServer.listen(): bind the listen socket
- NumberServer.accept_loop(): accept connections and spawn handlers
- ConnectionHandler.run(): read requests, apply them, send replies
"""

import logging
import socket
import threading
from typing import Optional

from ..config.settings import settings
from ..protocol.commands import Reply, RequestType
from ..protocol.parser import ProtocolParser
from ..state.cell import SharedValue
from .context import NetworkContext, close_socket
from .lines import LineReader

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Serves one client connection until it closes.

    Each iteration reads one request line, applies it to the shared value,
    and writes the resulting value back. Read errors and EOF end this
    handler only; the shared value and other connections are unaffected.

    Attributes:
        conn: The connected socket, owned by this handler
        addr: Peer address
        cell: The SharedValue shared with every other handler
    """

    def __init__(
            self,
            conn: socket.socket,
            addr,
            cell: SharedValue,
            server: "NumberServer" = None,
    ):
        self.conn = conn
        self.addr = addr
        self.cell = cell
        self.server = server
        self.parser = ProtocolParser()
        self.reader = LineReader(conn)
        self.requests_handled = 0

    def run(self) -> None:
        """
        Handle the connection until EOF or a read error.

        Protocol flow:
            1. Read a line from the client
            2. Parse it with ProtocolParser
            3. Apply it to the SharedValue
            4. Send the value back, terminated like the request
            5. Repeat
        """
        logger.debug(f"Client connected: {self.addr}")

        try:
            while True:
                try:
                    line, terminator = self.reader.read_line()
                except OSError as exc:
                    logger.debug(f"Client {self.addr} closed: {exc}")
                    break

                if line is None:
                    logger.debug(f"Client disconnected: {self.addr}")
                    break

                logger.debug(f"{self.addr}: {line}")
                value = self._apply(line)
                reply = self.parser.format_reply(Reply(value), terminator or "\n")

                try:
                    self.conn.sendall(reply.encode("ascii"))
                except OSError as exc:
                    logger.debug(f"Client {self.addr} closed during reply: {exc}")
                    break

        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {self.addr}: {exc}")
        finally:
            self._close()

    def _apply(self, line: str) -> int:
        """Apply one request line to the shared value and return the result."""
        request = self.parser.parse_request(line)
        self.requests_handled += 1

        if request.type == RequestType.WRITE:
            value = self.cell.set(request.value)
        else:
            if request.type == RequestType.UNKNOWN:
                logger.warning(f"unknown request ``{request.raw}''")
            value = self.cell.get()

        if self.server is not None:
            self.server.record_request(request.type)
        return value

    def _close(self) -> None:
        if self.server is not None:
            self.server.release_handler(self)
        else:
            close_socket(self.conn)


class NumberServer:
    """
    Thread-per-connection TCP server for the shared number.

    Every accepted connection gets its own ConnectionHandler thread. All
    handlers receive the same SharedValue object, whose lock is the only
    point where connections contend.

    Usage:
        server = NumberServer(host='0.0.0.0', port=1234)
        server.listen()
        server.accept_loop()  # Runs until the listen socket is closed

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 1234); updated after binding port 0
        cell: The SharedValue shared by all connections
        max_connections: Concurrent connection cap, 0 for unbounded
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            cell: SharedValue = None,
            context: NetworkContext = None,
            max_connections: int = None,
    ):
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.cell = cell if cell is not None else SharedValue()
        self.context = context if context is not None else NetworkContext()
        self.max_connections = (
            max_connections if max_connections is not None else settings.MAX_CONNECTIONS
        )

        # Server state
        self._listener: Optional[socket.socket] = None
        self._accept_thread: Optional[threading.Thread] = None
        self._slots = (
            threading.BoundedSemaphore(self.max_connections)
            if self.max_connections > 0 else None
        )
        self._state_lock = threading.Lock()
        self._handlers = set()
        self._running = False
        self._connection_count = 0
        self._total_requests = 0
        self._unknown_requests = 0

    def listen(self) -> None:
        """
        Bind the listen socket.

        Raises:
            OSError: If the port cannot be served
        """
        if self._listener is not None:
            return

        self._listener = self.context.open_listener(self.host, self.port)
        self.port = self._listener.getsockname()[1]
        self._running = True
        logger.debug(f"serving port {self.port}")

    def accept_loop(self) -> None:
        """
        Accept connections until the listen socket fails.

        Each accepted connection is served by a new daemon thread. When
        max_connections is set, a slot is taken before each accept and
        returned when the handler exits, so accepting pauses at the cap.
        """
        if self._listener is None:
            self.listen()
        listener = self._listener

        try:
            while True:
                if self._slots is not None:
                    self._slots.acquire()

                logger.debug("waiting for client connection...")
                try:
                    conn, addr = self.context.accept(listener)
                except (OSError, RuntimeError) as exc:
                    if self._slots is not None:
                        self._slots.release()
                    logger.debug(f"Accept loop ending: {exc}")
                    break

                logger.debug(f"got a client connection from {addr[0]} on port {addr[1]}")
                self._spawn(conn, addr)
        finally:
            self._close_listener()

    def _spawn(self, conn: socket.socket, addr) -> None:
        handler = ConnectionHandler(conn, addr, self.cell, server=self)
        with self._state_lock:
            self._handlers.add(handler)
            self._connection_count += 1

        thread = threading.Thread(
            target=handler.run,
            name=f"numsync-client-{addr[0]}:{addr[1]}",
            daemon=True,
        )
        thread.start()

    def release_handler(self, handler: ConnectionHandler) -> None:
        """Forget a finished handler, close its socket and free its slot."""
        with self._state_lock:
            known = handler in self._handlers
            self._handlers.discard(handler)
        self.context.release(handler.conn)
        if known and self._slots is not None:
            self._slots.release()

    def record_request(self, request_type: RequestType) -> None:
        """Count one handled request for get_stats()."""
        with self._state_lock:
            self._total_requests += 1
            if request_type == RequestType.UNKNOWN:
                self._unknown_requests += 1

    def _close_listener(self) -> None:
        listener, self._listener = self._listener, None
        self._running = False
        if listener is not None:
            self.context.release(listener)

    def start(self) -> None:
        """
        Bind and run the accept loop in a background thread.

        Returns once the listen socket is ready, so callers can connect
        immediately.

        Raises:
            OSError: If the port cannot be served
        """
        if self._accept_thread is not None and self._accept_thread.is_alive():
            return

        self.listen()
        self._accept_thread = threading.Thread(
            target=self.accept_loop,
            name="numsync-listener",
            daemon=True,
        )
        self._accept_thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop accepting and close every open connection.

        Closing the listen socket ends the accept loop; closing each
        connection socket wakes its handler, which then exits.
        """
        self._close_listener()

        with self._state_lock:
            handlers = list(self._handlers)
        for handler in handlers:
            self.context.release(handler.conn)

        if self._accept_thread is not None:
            self._accept_thread.join(timeout)
            self._accept_thread = None

    def is_running(self) -> bool:
        """Check if the server is currently accepting connections."""
        return self._running

    def active_connections(self) -> int:
        """Number of handlers currently serving a connection."""
        with self._state_lock:
            return len(self._handlers)

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with connection counts, request counts and the
            current shared value.
        """
        with self._state_lock:
            return {
                "running": self._running,
                "host": self.host,
                "port": self.port,
                "total_connections": self._connection_count,
                "active_connections": len(self._handlers),
                "total_requests": self._total_requests,
                "unknown_requests": self._unknown_requests,
                "value": self.cell.get(),
            }


def run_server(host: str = None, port: int = None, cell: SharedValue = None) -> None:
    """
    Convenience function to create and run the server in this thread.

    Args:
        host: Bind address (default from settings)
        port: Port number (default from settings)
        cell: Shared value to serve (a new one starting at 0 if omitted)

    Usage:
        run_server(port=1234)
    """
    with NetworkContext() as context:
        server = NumberServer(host=host, port=port, cell=cell, context=context)
        server.listen()
        server.accept_loop()
