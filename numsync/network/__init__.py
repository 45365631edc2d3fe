"""Network module for numsync."""

from .context import NetworkContext
from .lines import LineReader
from .poller import Poller
from .tcp_server import ConnectionHandler, NumberServer

__all__ = [
    "ConnectionHandler",
    "LineReader",
    "NetworkContext",
    "NumberServer",
    "Poller",
]
