"""
Protocol Parser Module

This module handles parsing of request lines and formatting of replies.
"""

import re

from .commands import Reply, Request, RequestType

_WRITE_PATTERN = re.compile(r"write\s+([+-]?\d+)(?:\s.*)?")
_INTEGER_PATTERN = re.compile(r"[+-]?\d+")


class ProtocolParser:
    """
    Parser for the numsync text protocol.

    Protocol Format:
        Request:  read\\n | write <integer>\\n
        Reply:    <integer>\\n

    Lines may also be terminated by a NUL byte instead of a newline.
    Request keywords are case-sensitive. A write takes the first integer
    after the keyword and ignores anything following it; a line that is
    not exactly ``read`` or ``write <integer>...`` parses as UNKNOWN.
    """

    def parse_request(self, data: str) -> Request:
        """
        Parse a raw request line into a Request object.

        Args:
            data: Raw request line (may include a trailing terminator)

        Returns:
            Request object. Returns type=UNKNOWN for anything unrecognized.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.parse_request("write -12").value
            -12
            >>> parser.parse_request("read").type == RequestType.READ
            True
            >>> parser.parse_request("READ").type == RequestType.UNKNOWN
            True
        """
        raw = data.strip("\r\n\x00")

        if raw == "read":
            return Request(type=RequestType.READ, raw=raw)

        match = _WRITE_PATTERN.fullmatch(raw)
        if match:
            return Request(type=RequestType.WRITE, value=int(match.group(1)), raw=raw)

        return Request(type=RequestType.UNKNOWN, raw=raw)

    def format_request(self, request: Request, terminator: str = "\n") -> str:
        """
        Format a Request object into a protocol line.

        Examples:
            >>> ProtocolParser().format_request(Request.write(7))
            'write 7\\n'
        """
        if request.type == RequestType.WRITE:
            return f"write {request.value}{terminator}"
        if request.type == RequestType.READ:
            return f"read{terminator}"
        raise ValueError(f"cannot format {request.type.name} request")

    def format_reply(self, reply: Reply, terminator: str = "\n") -> str:
        """
        Format a Reply into a decimal line, with a leading '-' for negatives.

        Examples:
            >>> ProtocolParser().format_reply(Reply(-5))
            '-5\\n'
        """
        return f"{int(reply.value):d}{terminator}"

    def parse_reply(self, data: str) -> Reply:
        """
        Parse a reply line.

        Raises:
            ValueError: If the line is not a decimal integer
        """
        raw = data.strip("\r\n\x00 \t")
        if not _INTEGER_PATTERN.fullmatch(raw):
            raise ValueError(f"malformed reply {raw!r}")
        return Reply(int(raw))
