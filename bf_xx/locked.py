"""Bloom filter safe to share between threads.

Mutations and state snapshots run under one lock. ``check`` does not take
the lock; a concurrent insert can only make it see the bits before or after
that insert.
"""
from __future__ import annotations

import threading
from typing import Iterable

from bf_xx.bit_array import BitArray
from bf_xx.bloom_filter import BloomFilter
from bf_xx.hashing import Item


class LockedBloomFilter(BloomFilter):
    """:class:`BloomFilter` whose mutators hold ``lock``."""

    __slots__ = ("lock",)

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.lock = threading.Lock()

    def add(self, item: Item) -> None:
        with self.lock:
            super().add(item)

    def update(self, items: Iterable[Item]) -> None:
        items = list(items)
        with self.lock:
            for item in items:
                BloomFilter.add(self, item)

    def check_and_add(self, item: Item) -> bool:
        with self.lock:
            return super().check_and_add(item)

    def clear(self) -> None:
        with self.lock:
            super().clear()

    @property
    def bit_array(self) -> BitArray:
        with self.lock:
            return self._bits.copy()

    def bits_set(self) -> int:
        with self.lock:
            return super().bits_set()

    def bitmap(self) -> bytes:
        with self.lock:
            return super().bitmap()

    def copy(self) -> "LockedBloomFilter":
        with self.lock:
            return super().copy()
