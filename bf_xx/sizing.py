"""Optimal Bloom filter parameters.

For ``n`` expected items and a target false positive rate ``p``::

    m = ceil(-n * ln(p) / ln(2)^2)
    k = round(m / n * ln(2))

``k`` is rounded to the nearest integer with halves going up (away from
zero, since it is always positive). Both values are floored at 1.
"""
from __future__ import annotations

import math

from bf_xx.errors import InvalidParameters

LN_2 = math.log(2.0)
LN_2_SQUARED = LN_2 * LN_2


def _check_positive_int(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameters(f"{name} must be an integer")
    if value <= 0:
        raise InvalidParameters(f"{name} must be positive")


def _check_rate(fp_p: float) -> None:
    if isinstance(fp_p, bool) or not isinstance(fp_p, (int, float)):
        raise InvalidParameters("false_positive_rate must be a number")
    # NaN fails both comparisons.
    if not 0.0 < fp_p < 1.0:
        raise InvalidParameters("false_positive_rate must be in (0, 1)")


def round_half_up(x: float) -> int:
    """Round a non-negative float to the nearest integer, halves up."""
    whole = math.floor(x)
    # x - floor(x) is exact; x + 0.5 is not.
    return whole + 1 if x - whole >= 0.5 else whole


def compute_bitmap_size(items_count: int, fp_p: float) -> int:
    """Return the number of bits needed for ``items_count`` items at rate ``fp_p``."""
    _check_positive_int("capacity", items_count)
    _check_rate(fp_p)
    return max(1, math.ceil(-(items_count * math.log(fp_p)) / LN_2_SQUARED))


def optimal_k_num(bitmap_size: int, items_count: int) -> int:
    """Return the hash round count minimising false positives for ``bitmap_size`` bits."""
    _check_positive_int("bit_budget", bitmap_size)
    _check_positive_int("capacity", items_count)
    return max(1, round_half_up(bitmap_size / items_count * LN_2))


def estimated_false_positive_rate(bitmap_size: int, num_hashes: int, items_count: int) -> float:
    """Expected false positive rate after inserting ``items_count`` distinct items."""
    _check_positive_int("bit_budget", bitmap_size)
    _check_positive_int("num_hashes", num_hashes)
    if isinstance(items_count, bool) or not isinstance(items_count, int) or items_count < 0:
        raise InvalidParameters("items_count must be a non-negative integer")
    return (1.0 - math.exp(-num_hashes * items_count / bitmap_size)) ** num_hashes
