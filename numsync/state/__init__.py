"""Shared state module for numsync."""

from .cell import SharedValue

__all__ = ["SharedValue"]
