"""Horspool skip tables.

A table maps every byte value to the minimum distance, in bytes, a candidate window
may move after comparing a byte at its trailing edge (forward) or leading edge
(backward) without passing over a possible match.
"""

from __future__ import annotations

from collections.abc import Sequence

TABLE_SIZE = 256


def _align(table: list[int], mask: int) -> list[int]:
    # Round up to a multiple of the unit size so skips land on unit boundaries
    if mask:
        return [(v + mask) & ~mask for v in table]
    return table


def forward_skips(needle: Sequence[int], mask: int = 0) -> list[int]:
    """Skip table for left-to-right scanning, keyed on the window's last byte."""
    n = len(needle)
    table = [n] * TABLE_SIZE
    limit = n - 1
    for i in range(limit):
        table[needle[i]] = limit - i
    return _align(table, mask)


def backward_skips(needle: Sequence[int], mask: int = 0) -> list[int]:
    """Skip table for right-to-left scanning, keyed on the window's first byte."""
    n = len(needle)
    table = [n] * TABLE_SIZE
    for i in range(n - 1, 0, -1):
        table[needle[i]] = i
    return _align(table, mask)
