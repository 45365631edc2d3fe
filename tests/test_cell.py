"""
Tests for the Shared State Cell

These tests verify the SharedValue class:
- get(): Read the current value
- set(): Replace the value
- Mutual exclusion under concurrent writers

Run with: python -m pytest tests/test_cell.py -v
"""

import threading
import pytest
from numsync.state.cell import SharedValue


class TestSharedValueBasic:
    """Test get() and set()."""

    def test_starts_at_zero(self, cell: SharedValue):
        """A new cell holds 0."""
        assert cell.get() == 0

    def test_initial_value(self):
        """An explicit initial value is kept."""
        assert SharedValue(42).get() == 42

    def test_set_then_get(self, cell: SharedValue):
        """get() returns what set() stored."""
        cell.set(5)
        assert cell.get() == 5

    def test_set_returns_stored_value(self, cell: SharedValue):
        """set() returns the new value."""
        assert cell.set(-7) == -7

    def test_last_set_wins(self, cell: SharedValue):
        """Sequential writes leave the last one."""
        for i in range(10):
            cell.set(i)
        assert cell.get() == 9

    def test_get_does_not_mutate(self, cell: SharedValue):
        """Reading is idempotent."""
        cell.set(3)
        for _ in range(5):
            assert cell.get() == 3

    def test_large_values(self, cell: SharedValue):
        """Values beyond 32 bits are kept exactly."""
        cell.set(2 ** 40)
        assert cell.get() == 2 ** 40

    def test_rejects_non_integer(self, cell: SharedValue):
        """Non-numeric input raises and leaves the value alone."""
        cell.set(1)
        with pytest.raises(ValueError):
            cell.set("abc")
        assert cell.get() == 1

    def test_repr(self, cell: SharedValue):
        cell.set(8)
        assert repr(cell) == "SharedValue(8)"


class TestSharedValueConcurrency:
    """Test the cell under many threads."""

    def test_concurrent_writers_leave_a_written_value(self, cell: SharedValue):
        """After concurrent writes the value is one of the written values."""
        written = list(range(1, 21))

        def writer(n: int):
            for _ in range(200):
                cell.set(n)

        threads = [threading.Thread(target=writer, args=(n,)) for n in written]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert cell.get() in written

    def test_readers_only_see_written_values(self, cell: SharedValue):
        """Readers running alongside writers never see anything unwritten."""
        allowed = {0, 111, -222}
        seen = set()
        stop = threading.Event()

        def writer():
            while not stop.is_set():
                cell.set(111)
                cell.set(-222)

        def reader():
            for _ in range(2000):
                seen.add(cell.get())

        w = threading.Thread(target=writer)
        readers = [threading.Thread(target=reader) for _ in range(4)]
        w.start()
        for r in readers:
            r.start()
        for r in readers:
            r.join()
        stop.set()
        w.join()

        assert seen <= allowed
