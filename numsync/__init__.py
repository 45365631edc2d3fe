"""
numsync: Shared Number Server and Client

A client/server pair that keeps one integer in sync across any number
of clients, communicating over raw TCP sockets with a line-oriented
ASCII protocol.
"""

__version__ = "1.0.0"
