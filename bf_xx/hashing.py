"""Seeded hashing and Kirsch-Mitzenmacher position derivation.

Each item is hashed twice with the same 64-bit hash under two different
seeds: the filter's seed and a salt derived from it with the SplitMix64
finaliser. The ``k`` bit positions are then ``(h1 + i * h2) mod m`` computed
with wrapping 64-bit arithmetic, so any ``k`` costs two hash calls.
"""
from __future__ import annotations

import secrets
from typing import Callable, Dict, Iterator, Tuple, Union

import mmh3
import xxhash

from bf_xx.errors import InvalidParameters

MASK64 = (1 << 64) - 1
MASK32 = (1 << 32) - 1

_SM64_GAMMA = 0x9E3779B97F4A7C15
_SM64_M1 = 0xBF58476D1CE4E5B9
_SM64_M2 = 0x94D049BB133111EB

Item = Union[bytes, bytearray, memoryview, str, int]
Hasher = Callable[[bytes, int], int]


def _xxh64(data: bytes, seed: int) -> int:
    return xxhash.xxh64(data, seed=seed).intdigest()


def _murmur3(data: bytes, seed: int) -> int:
    # mmh3 seeds are 32-bit; keep the low half of the x64 128-bit digest.
    return mmh3.hash128(data, seed & MASK32, x64arch=True, signed=False) & MASK64


HASHERS: Dict[str, Hasher] = {
    "xxh64": _xxh64,
    "mmh3": _murmur3,
}
DEFAULT_HASHER = "xxh64"


def get_hasher(name: str) -> Hasher:
    try:
        return HASHERS[name]
    except KeyError:
        raise InvalidParameters(
            f"unknown hasher {name!r}, expected one of {sorted(HASHERS)}"
        ) from None


def random_seed() -> int:
    """Draw a fresh 64-bit seed."""
    return secrets.randbits(64)


def check_seed(seed: int) -> int:
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise InvalidParameters("seed must be an integer")
    if not 0 <= seed <= MASK64:
        raise InvalidParameters("seed must fit in 64 unsigned bits")
    return seed


def derive_salt(seed: int) -> int:
    """Return a second seed, distinct from ``seed``, via SplitMix64."""
    z = (seed + _SM64_GAMMA) & MASK64
    z = (z ^ (z >> 30)) * _SM64_M1 & MASK64
    z = (z ^ (z >> 27)) * _SM64_M2 & MASK64
    z ^= z >> 31
    if z == seed:
        z ^= _SM64_GAMMA
    return z


def as_bytes(item: Item) -> bytes:
    """Convert ``item`` to the byte string that gets hashed.

    Bytes-like objects pass through, strings are UTF-8 encoded and integers
    in ``[-2**63, 2**64)`` become 8 little-endian bytes.

    Raises:
        TypeError: For any other type.
        ValueError: For integers that do not fit in 64 bits.
    """
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)
    if isinstance(item, str):
        return item.encode("utf-8")
    if isinstance(item, int) and not isinstance(item, bool):
        if not -(1 << 63) <= item <= MASK64:
            raise ValueError(f"integer item {item} does not fit in 64 bits")
        return (item & MASK64).to_bytes(8, "little")
    raise TypeError(f"cannot hash item of type {type(item).__name__}; pass bytes")


def hash_pair(hasher: Hasher, data: bytes, seeds: Tuple[int, int]) -> Tuple[int, int]:
    """Two independent 64-bit hashes of ``data``."""
    return hasher(data, seeds[0]), hasher(data, seeds[1])


def bit_offsets(hashes: Tuple[int, int], num_hashes: int, size: int) -> Iterator[int]:
    """Yield the ``num_hashes`` bit positions for a hash pair."""
    h1, h2 = hashes
    for i in range(num_hashes):
        yield ((h1 + i * h2) & MASK64) % size
