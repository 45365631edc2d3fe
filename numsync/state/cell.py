"""
Shared State Cell

A single integer guarded by a mutual-exclusion lock. The server keeps one
for the number every connection reads and writes; the client keeps one
as its local mirror, written by the console and read by the poller.
"""

import threading


class SharedValue:
    """
    Thread-safe integer cell.

    Only get() and set() touch the value, and both hold the lock for the
    whole access, so no caller can observe a partially applied write.
    Concurrent set() calls are ordered only by the lock: the last writer
    to acquire it wins.

    Usage:
        cell = SharedValue()
        cell.set(5)
        cell.get()  # 5

    The lock is never held across I/O; callers copy the value out and
    release before touching a socket.
    """

    def __init__(self, value: int = 0):
        self._lock = threading.Lock()
        self._value = int(value)

    def get(self) -> int:
        """Return the current value."""
        with self._lock:
            return self._value

    def set(self, value: int) -> int:
        """
        Replace the current value.

        Args:
            value: The new value

        Returns:
            The value now stored
        """
        value = int(value)
        with self._lock:
            self._value = value
            return self._value

    def __repr__(self) -> str:
        return f"SharedValue({self.get()})"
