"""
Client Poller Module

The poller owns the client's connection. Once per tick it compares the
local SharedValue with the last value it sent, sends ``write <n>`` if the
value changed and ``read`` otherwise, then prints the server's reply.
"""

import logging
import socket
import sys
import threading
from typing import Optional, TextIO

from ..config.settings import settings
from ..protocol.commands import Request
from ..protocol.parser import ProtocolParser
from ..state.cell import SharedValue
from .context import NetworkContext, close_socket
from .lines import LineReader, terminator_for

logger = logging.getLogger(__name__)


class Poller:
    """
    Fixed-interval client loop pushing local changes to the server.

    Change detection is level-triggered: every tick sends something, and
    a local value that goes away and comes back within one tick is never
    sent. A dropped connection ends the loop for good; there is no
    reconnect.

    Usage:
        with NetworkContext() as net:
            sock = net.connect('localhost', 1234)
            poller = Poller(sock, SharedValue(), context=net)
            poller.start()

    Attributes:
        sock: The connected socket, owned by this poller
        cell: The local SharedValue, written elsewhere and read here
        interval: Seconds to sleep between ticks
        last_sent: The last value pushed with a write request
        last_reply: The last value the server replied with
    """

    def __init__(
            self,
            sock: socket.socket,
            cell: SharedValue,
            context: NetworkContext = None,
            interval: float = None,
            terminator: str = None,
            output: TextIO = None,
    ):
        self.sock = sock
        self.cell = cell
        self.context = context
        self.interval = interval if interval is not None else settings.POLL_INTERVAL
        self.terminator = terminator if terminator is not None else terminator_for(settings.TERMINATOR)
        self.output = output
        self.parser = ProtocolParser()
        self.reader = LineReader(sock)

        self.last_sent = 0
        self.last_reply: Optional[int] = None
        self.ticks = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._close_lock = threading.Lock()
        self._closed = False

    def build_request(self) -> Request:
        """
        Decide this tick's request from the local value.

        Records the value as sent when a write is built.
        """
        current = self.cell.get()
        if current != self.last_sent:
            self.last_sent = current
            return Request.write(current)
        return Request.read()

    def tick(self) -> bool:
        """
        Run one send/receive exchange.

        Returns:
            False when the connection is gone and the loop should end
        """
        request = self.build_request()
        line = self.parser.format_request(request, self.terminator)

        try:
            self.sock.sendall(line.encode("ascii"))
            reply, _ = self.reader.read_line()
        except OSError as exc:
            logger.debug(f"connection closed: {exc}")
            return False

        if reply is None:
            logger.debug("end of file")
            return False

        self.ticks += 1
        try:
            self.last_reply = self.parser.parse_reply(reply).value
        except ValueError:
            logger.warning(f"unexpected reply ``{reply}''")
        print(reply, file=self.output or sys.stdout, flush=True)
        return True

    def run(self) -> None:
        """Tick until the connection ends or stop() is called, then close the socket."""
        try:
            while not self._stop.is_set():
                if not self.tick():
                    break
                if self._stop.wait(self.interval):
                    break
        finally:
            self.close()

    def start(self) -> None:
        """Run the loop in a background daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self.run, name="numsync-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Ask the loop to finish and wait for it."""
        self._stop.set()
        self.close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def close(self) -> None:
        """Release the socket. Safe to call more than once."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        if self.context is not None:
            self.context.release(self.sock)
        else:
            close_socket(self.sock)
