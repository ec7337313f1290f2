"""Fixed-length bit vector packed into unsigned 64-bit words.

Bit ``i`` lives in word ``i >> 6`` at offset ``i & 63``. The word array is
allocated once and only ever written in place, so the length never changes
after construction.
"""
from __future__ import annotations

import sys
from array import array
from typing import Tuple

from bf_xx.errors import InvalidParameters, OutOfRange

_WORD_BITS = 64
_WORD_BYTES = 8


def _word_count(length: int) -> int:
    return (length + _WORD_BITS - 1) // _WORD_BITS


def _check_length(length: int) -> None:
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidParameters("length must be an integer")
    if length <= 0:
        raise InvalidParameters("length must be positive")


class BitArray:
    """Packed bitset with O(1) get/set and in-place clear."""

    __slots__ = ("_length", "_words")

    def __init__(self, length: int) -> None:
        _check_length(length)

        self._length = length
        self._words = array("Q", bytes(_word_count(length) * _WORD_BYTES))

    def __len__(self) -> int:
        return self._length

    def _locate(self, index: int) -> Tuple[int, int]:
        if not 0 <= index < self._length:
            raise OutOfRange(index, self._length)
        return index >> 6, 1 << (index & 63)

    def get(self, index: int) -> bool:
        """Return the bit at ``index``."""
        word_index, mask = self._locate(index)
        return bool(self._words[word_index] & mask)

    def set(self, index: int) -> None:
        """Set the bit at ``index`` to 1."""
        word_index, mask = self._locate(index)
        self._words[word_index] |= mask

    def clear_all(self) -> None:
        """Reset every bit to 0 without reallocating."""
        self._words[:] = array("Q", bytes(len(self._words) * _WORD_BYTES))

    def count(self) -> int:
        """Number of bits currently set."""
        return sum(bin(word).count("1") for word in self._words)

    def copy(self) -> "BitArray":
        clone = BitArray(self._length)
        clone._words[:] = self._words
        return clone

    def to_bytes(self) -> bytes:
        """Raw word storage as little-endian bytes."""
        if sys.byteorder == "little":
            return self._words.tobytes()
        swapped = array("Q", self._words)
        swapped.byteswap()
        return swapped.tobytes()

    @classmethod
    def from_bytes(cls, data: bytes, length: int) -> "BitArray":
        """Rebuild a bit array of ``length`` bits from :meth:`to_bytes` output.

        Raises:
            InvalidParameters: If ``data`` has the wrong size for ``length``
                or has bits set past the end of the array.
        """
        _check_length(length)
        expected = _word_count(length) * _WORD_BYTES
        if len(data) != expected:
            raise InvalidParameters(
                f"bitmap of {length} bits needs {expected} bytes, got {len(data)}"
            )

        words = array("Q")
        words.frombytes(bytes(data))
        if sys.byteorder != "little":
            words.byteswap()

        tail = length & 63
        if tail and words[-1] >> tail:
            raise InvalidParameters("bitmap has bits set beyond its length")

        bits = cls.__new__(cls)
        bits._length = length
        bits._words = words
        return bits
