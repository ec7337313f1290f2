"""Bloom filter using two seeded xxHash64 calls per item.

Positions come from Kirsch-Mitzenmacher double hashing over a pair of hashes
computed with a per-instance random seed and a salt derived from it, so two
filters built with the same parameters still spread items differently unless
they are given the same ``seed``.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from bf_xx.bit_array import BitArray
from bf_xx.errors import InvalidParameters
from bf_xx.hashing import (
    DEFAULT_HASHER,
    Item,
    as_bytes,
    bit_offsets,
    check_seed,
    derive_salt,
    get_hasher,
    hash_pair,
    random_seed,
)
from bf_xx.sizing import compute_bitmap_size, estimated_false_positive_rate, optimal_k_num

logger = logging.getLogger(__name__)


class BloomFilter:
    """Bloom filter backed by a packed 64-bit word bitset."""

    __slots__ = ("_size", "_num_hashes", "_seed", "_seeds", "_hasher_name", "_hasher", "_bits")

    def __init__(
        self,
        size: int,
        num_hashes: int,
        *,
        seed: Optional[int] = None,
        hasher: str = DEFAULT_HASHER,
        bits: Optional[BitArray] = None,
    ) -> None:
        """Initialize a Bloom filter.

        Args:
            size: Number of bits in the filter.
            num_hashes: Number of bit positions per item.
            seed: 64-bit hash seed. A random one is drawn when omitted.
            hasher: Name of the 64-bit hash to use (``"xxh64"`` or ``"mmh3"``).
            bits: Existing bit array of ``size`` bits to take ownership of.

        Raises:
            InvalidParameters: If any parameter is out of range.
        """
        if isinstance(num_hashes, bool) or not isinstance(num_hashes, int):
            raise InvalidParameters("num_hashes must be an integer")
        if num_hashes <= 0:
            raise InvalidParameters("num_hashes must be positive")
        hash_fn = get_hasher(hasher)
        seed = random_seed() if seed is None else check_seed(seed)

        if bits is None:
            bits = BitArray(size)
        elif len(bits) != size:
            raise InvalidParameters(f"bit array has {len(bits)} bits, expected {size}")

        self._bits = bits
        self._size = size
        self._num_hashes = num_hashes
        self._seed = seed
        self._seeds = (seed, derive_salt(seed))
        self._hasher_name = hasher
        self._hasher = hash_fn
        logger.debug("bloom filter: %d bits, %d hashes, hasher=%s", size, num_hashes, hasher)

    @classmethod
    def new_with_rate(
        cls,
        capacity: int,
        false_positive_rate: float,
        *,
        seed: Optional[int] = None,
        hasher: str = DEFAULT_HASHER,
    ) -> "BloomFilter":
        """Size a filter for ``capacity`` items at ``false_positive_rate``.

        >>> bloom = BloomFilter.new_with_rate(1_000_000, 1e-6)
        >>> bloom.check_and_add(42)
        False
        >>> bloom.check(42)
        True
        >>> bloom.clear()
        >>> bloom.check_and_add(42)
        False
        """
        bitmap_size = compute_bitmap_size(capacity, false_positive_rate)
        return cls.new_with_size(bitmap_size, capacity, seed=seed, hasher=hasher)

    @classmethod
    def new_with_size(
        cls,
        bit_budget: int,
        capacity: int,
        *,
        seed: Optional[int] = None,
        hasher: str = DEFAULT_HASHER,
    ) -> "BloomFilter":
        """Build a filter of exactly ``bit_budget`` bits for ``capacity`` items."""
        num_hashes = optimal_k_num(bit_budget, capacity)
        return cls(bit_budget, num_hashes, seed=seed, hasher=hasher)

    @classmethod
    def from_existing(
        cls,
        bitmap: bytes,
        bitmap_size: int,
        k: int,
        *,
        seed: int,
        hasher: str = DEFAULT_HASHER,
    ) -> "BloomFilter":
        """Rebuild a filter from the output of :meth:`bitmap` and its parameters."""
        bits = BitArray.from_bytes(bitmap, bitmap_size)
        return cls(bitmap_size, k, seed=seed, hasher=hasher, bits=bits)

    @property
    def size(self) -> int:
        """Number of bits in the filter."""
        return self._size

    @property
    def num_hashes(self) -> int:
        """Number of bit positions checked and set per item."""
        return self._num_hashes

    @property
    def hasher(self) -> str:
        """Name of the 64-bit hash used for positions."""
        return self._hasher_name

    @property
    def bit_array(self) -> BitArray:
        """Snapshot of the bit array for inspection.

        Changes to the returned array do not affect the filter.
        """
        return self._bits.copy()

    def bits_set(self) -> int:
        """Number of bits currently set."""
        return self._bits.count()

    def bitmap(self) -> bytes:
        """Return a copy of the raw bit array bytes."""
        return self._bits.to_bytes()

    def copy(self) -> "BloomFilter":
        """Return an independent filter with the same parameters, seed and bits."""
        return type(self)(
            self._size,
            self._num_hashes,
            seed=self._seed,
            hasher=self._hasher_name,
            bits=self._bits.copy(),
        )

    def false_positive_rate(self, items_count: int) -> float:
        """Expected false positive rate once ``items_count`` distinct items are in."""
        return estimated_false_positive_rate(self._size, self._num_hashes, items_count)

    def _hashes(self, item: Item) -> Tuple[int, int]:
        return hash_pair(self._hasher, as_bytes(item), self._seeds)

    def offsets(self, item: Item) -> List[int]:
        """The ``num_hashes`` bit positions for ``item``."""
        return list(bit_offsets(self._hashes(item), self._num_hashes, self._size))

    def add(self, item: Item) -> None:
        """Record the presence of ``item``."""
        bits = self._bits
        for bit_offset in bit_offsets(self._hashes(item), self._num_hashes, self._size):
            bits.set(bit_offset)

    def update(self, items: Iterable[Item]) -> None:
        """Insert all ``items`` into the filter."""
        for item in items:
            self.add(item)

    def check(self, item: Item) -> bool:
        """Check if ``item`` may be present.

        There can be false positives, but no false negatives.
        """
        bits = self._bits
        for bit_offset in bit_offsets(self._hashes(item), self._num_hashes, self._size):
            if not bits.get(bit_offset):
                return False
        return True

    def check_and_add(self, item: Item) -> bool:
        """Record ``item`` and return whether it was already (probably) present."""
        bits = self._bits
        found = True
        for bit_offset in bit_offsets(self._hashes(item), self._num_hashes, self._size):
            if not bits.get(bit_offset):
                found = False
                bits.set(bit_offset)
        return found

    def clear(self) -> None:
        """Clear all of the bits in the filter, removing all items from the set."""
        self._bits.clear_all()
        logger.debug("bloom filter cleared (%d bits)", self._size)

    def __contains__(self, item: Item) -> bool:
        return self.check(item)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self._size}, num_hashes={self._num_hashes}, hasher={self._hasher_name!r})"
