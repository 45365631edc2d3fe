"""
Interactive Console

The foreground loop for both programs. Each input line is one of:

    q            quit
    (blank)      print the current value
    <integer>    set the value

Anything else is ignored. On the server the console edits the shared
value directly; on the client it edits the local value the poller pushes.
"""

import re
import sys
from typing import Optional, TextIO

from .state.cell import SharedValue

_LEADING_INTEGER = re.compile(r"[+-]?\d+")


def handle_line(cell: SharedValue, line: str, output: TextIO = None) -> bool:
    """
    Apply one console line to the cell.

    Returns:
        False if the line asks to quit, True otherwise
    """
    text = line.lstrip()

    if text.startswith("q"):
        return False

    if not text:
        print(cell.get(), file=output or sys.stdout)
        return True

    match = _LEADING_INTEGER.match(text)
    if match:
        cell.set(int(match.group()))
    return True


def run_console(
        cell: SharedValue,
        stdin: TextIO = None,
        output: TextIO = None,
        prompt: Optional[str] = None,
) -> None:
    """
    Read lines until 'q' or end of input.

    Args:
        cell: The value to print and set
        stdin: Input stream (default sys.stdin)
        output: Output stream (default sys.stdout)
        prompt: Printed before each line when given
    """
    stdin = stdin or sys.stdin
    output = output or sys.stdout

    while True:
        if prompt:
            output.write(prompt)
            output.flush()

        line = stdin.readline()
        if not line:
            break
        if not handle_line(cell, line, output):
            break
