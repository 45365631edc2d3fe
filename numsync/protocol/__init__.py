"""Protocol module for numsync."""

from .commands import Reply, Request, RequestType
from .parser import ProtocolParser

__all__ = [
    "Reply",
    "Request",
    "RequestType",
    "ProtocolParser",
]
