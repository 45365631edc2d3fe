"""
Line Framing over Blocking Sockets

Requests and replies are ASCII lines terminated by a newline or a NUL
byte. A single recv() may carry part of a line or several lines, so
LineReader keeps whatever follows the first terminator for the next call.
"""

import socket
from typing import Optional, Tuple

from ..config.settings import settings

TERMINATORS = (b"\n", b"\x00")


def terminator_for(name: str) -> str:
    """Map a configured terminator name ('newline' or 'nul') to its character."""
    name = name.lower()
    if name in ("newline", "nl", "lf"):
        return "\n"
    if name in ("nul", "null", "zero"):
        return "\x00"
    raise ValueError(f"unknown line terminator {name!r}")


class LineReader:
    """
    Reads terminated lines from a connected socket.

    Usage:
        reader = LineReader(sock)
        line, terminator = reader.read_line()
        if line is None:
            ...  # peer closed the connection

    A run of more than max_length bytes with no terminator is returned
    as one truncated line, with terminator None.
    """

    def __init__(self, sock: socket.socket, max_length: int = None, chunk_size: int = None):
        self.sock = sock
        self.max_length = max_length if max_length is not None else settings.MAX_LINE_LENGTH
        self.chunk_size = chunk_size if chunk_size is not None else settings.READ_CHUNK_SIZE
        self._buffer = b""

    def _split(self) -> Optional[Tuple[bytes, bytes]]:
        positions = [
            (self._buffer.find(term), term)
            for term in TERMINATORS
            if term in self._buffer
        ]
        if positions:
            index, term = min(positions)
            if index <= self.max_length:
                line = self._buffer[:index]
                self._buffer = self._buffer[index + 1:]
                return line, term

        if len(self._buffer) > self.max_length:
            line = self._buffer[:self.max_length]
            self._buffer = self._buffer[self.max_length:]
            return line, None

        return None

    def read_line(self) -> Tuple[Optional[str], Optional[str]]:
        """
        Block until one line is available.

        Returns:
            (line, terminator) with the terminator stripped from line and
            returned as a one-character string (None when truncated or
            when the peer closed after a partial line). Returns (None, None)
            on EOF with nothing buffered.

        Raises:
            OSError: If the socket read fails
        """
        while True:
            found = self._split()
            if found is not None:
                line, term = found
                return self._decode(line), term.decode("ascii") if term else None

            chunk = self.sock.recv(self.chunk_size)
            if not chunk:
                if self._buffer:
                    line, self._buffer = self._buffer, b""
                    return self._decode(line), None
                return None, None
            self._buffer += chunk

    @staticmethod
    def _decode(line: bytes) -> str:
        return line.rstrip(b"\r").decode("ascii", errors="replace")
