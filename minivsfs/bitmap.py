"""Allocation bitmaps: bit ``i`` set means unit ``i`` is in use (LSB first)."""
from __future__ import annotations

from typing import MutableSequence, Optional


def get_bit(bitmap: MutableSequence[int], index: int) -> bool:
    byte_idx, bit_idx = divmod(index, 8)
    if byte_idx >= len(bitmap):
        return False
    return bool(bitmap[byte_idx] & (1 << bit_idx))


def set_bit(bitmap: MutableSequence[int], index: int) -> None:
    byte_idx, bit_idx = divmod(index, 8)
    if byte_idx >= len(bitmap):
        raise IndexError(f"Bit {index} outside a {len(bitmap)}-byte bitmap")
    bitmap[byte_idx] |= 1 << bit_idx


def find_and_set_first_free(bitmap: MutableSequence[int], capacity: int) -> Optional[int]:
    """Claim the lowest clear bit below *capacity*.

    Returns the claimed index, or None when every bit in range is set.
    """
    limit = min(capacity, len(bitmap) * 8)
    for index in range(limit):
        if not get_bit(bitmap, index):
            set_bit(bitmap, index)
            return index
    return None


def count_set(bitmap: MutableSequence[int], capacity: int) -> int:
    return sum(1 for index in range(capacity) if get_bit(bitmap, index))


__all__ = ["count_set", "find_and_set_first_free", "get_bit", "set_bit"]
