"""Exceptions raised by the Bloom filter package."""
from __future__ import annotations


class InvalidParameters(ValueError):
    """Filter or bit array parameters that cannot produce a usable filter."""


class OutOfRange(IndexError):
    """A bit index outside ``[0, size)``."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"bit index {index} not in bitmap of {size} bits")
        self.index = index
        self.size = size
