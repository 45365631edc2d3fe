"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import time
import pytest
from contextlib import closing
from typing import Callable, Generator

from numsync.network.context import NetworkContext
from numsync.network.tcp_server import NumberServer
from numsync.protocol.parser import ProtocolParser
from numsync.state.cell import SharedValue


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


def wait_for(condition: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll condition until it holds or timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


# ============================================================================
# State and Protocol Fixtures
# ============================================================================

@pytest.fixture
def cell() -> SharedValue:
    """Create a fresh SharedValue starting at 0."""
    return SharedValue()


@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest.fixture
def network() -> Generator[NetworkContext, None, None]:
    """A NetworkContext closed after the test."""
    with NetworkContext() as context:
        yield context


@pytest.fixture
def server(server_port: int, network: NetworkContext) -> Generator[NumberServer, None, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a NumberServer on a free port
    2. Starts its accept loop in a background thread
    3. Yields the server for testing
    4. Stops it after the test
    """
    srv = NumberServer(host='127.0.0.1', port=server_port, context=network)
    srv.start()

    yield srv

    srv.stop()


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Provides a simple async context manager interface for
    sending requests and receiving replies.

    Usage:
        async with AsyncClient('127.0.0.1', 1234) as client:
            reply = await client.send_command("write 5")
            assert reply == "5"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except Exception:
                pass

    async def send_command(self, command: str) -> str:
        """
        Send a request and receive the reply.

        Args:
            command: Request line (newline will be added if missing)

        Returns:
            Reply string (stripped of trailing newline)
        """
        if not command.endswith('\n'):
            command += '\n'

        self.writer.write(command.encode())
        await self.writer.drain()

        response = await self.reader.readline()
        return response.decode().strip()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                reply = await client.send_command("read")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


@pytest.fixture
def raw_connection(server: NumberServer) -> Generator[socket.socket, None, None]:
    """A plain blocking socket connected to the server."""
    sock = socket.create_connection(('127.0.0.1', server.port), timeout=5)
    yield sock
    sock.close()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
