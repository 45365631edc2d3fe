"""
Protocol Request and Reply Definitions

This module defines the data structures exchanged over the wire.
"""

from dataclasses import dataclass
from enum import Enum, auto


class RequestType(Enum):
    """Enumeration of supported request types."""
    READ = auto()
    WRITE = auto()
    UNKNOWN = auto()


@dataclass
class Request:
    """
    Represents a parsed protocol request.

    Attributes:
        type: The type of request (READ, WRITE, UNKNOWN)
        value: The new value for WRITE requests (None otherwise)
        raw: The original request line, terminator stripped
    """
    type: RequestType
    value: int = None
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the request is one the server understands."""
        if self.type == RequestType.WRITE:
            return self.value is not None
        return self.type == RequestType.READ

    @classmethod
    def read(cls) -> "Request":
        """Create a READ request."""
        return cls(type=RequestType.READ, raw="read")

    @classmethod
    def write(cls, value: int) -> "Request":
        """Create a WRITE request for the given value."""
        return cls(type=RequestType.WRITE, value=int(value), raw=f"write {int(value)}")


@dataclass
class Reply:
    """
    Represents a server reply: the value after applying a request.

    Attributes:
        value: The server's current value
    """
    value: int
