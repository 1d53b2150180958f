"""Backward search: rightmost match at or before a 1-based start position."""

from __future__ import annotations

from bytefind.core.buffer import Buffer
from bytefind.core.cursor import INVALID, Cursor, validate
from bytefind.core.errors import MalformedText, UsageError
from bytefind.core.skips import backward_skips

# Largest signed 64-bit position; the default start means "search everything".
MAX_POSITION = 2**63 - 1


def rfind_raw(haystack: Buffer, needle: Buffer, start: int = MAX_POSITION) -> int:
    """Byte position of the last `needle` at/before `start`, or 0."""
    if start <= 0:
        return 0
    data = haystack.data
    size = haystack.size
    pat = needle.data
    n = needle.size
    if n > size:
        return 0

    if start > 1:
        # Clamp to the last position where the needle still fits
        if start - 1 > size - n:
            start = size - n + 1
        found = start
        offset = start - 1
    else:
        found = 1
        offset = 0
    if n == 0:
        return found

    if n > 1:
        skips = backward_skips(pat)
        while True:
            if data[offset : offset + n] == pat:
                return found
            skip = skips[data[offset]]
            if skip > offset:
                return 0
            offset -= skip
            found -= skip

    first = pat[0]
    while True:
        if data[offset] == first:
            return found
        if offset <= 0:
            return 0
        offset -= 1
        found -= 1


def rfind_text(haystack: Buffer, needle: Buffer, start: int = MAX_POSITION) -> int:
    """Codepoint position of the last `needle` at/before `start`, or 0.

    The haystack is decoded forward up to the (clamped) start, then the scan walks
    back with `Cursor.retreat`.

    Raises:
        MalformedText: If the needle or the scanned part of the haystack fails to decode
    """
    if start <= 0:
        return 0
    validate(needle)
    encoding = haystack.encoding.value
    n = needle.size
    # An odd trailing UTF-16 byte is not part of the needle
    pat = bytes(needle.data[:n])
    if n > haystack.size:
        return 0

    cur = Cursor(haystack)
    found = 1
    while found < start and cur.remaining > n:
        last = cur.offset
        if cur.advance() == INVALID:
            raise MalformedText(encoding)
        if cur.remaining < n:
            # Overran the last fitting window; keep the previous codepoint boundary
            cur.offset = last
            break
        found += 1
    if n == 0:
        return found

    data = cur.data
    if n > haystack.encoding.unit_size:
        skips = backward_skips(pat, haystack.encoding.mask)
        floor = cur.offset
        while True:
            if cur.offset <= floor:
                if data[cur.offset : cur.offset + n] == pat:
                    return found
                skip = skips[data[cur.offset]]
                if skip > cur.offset:
                    return 0
                floor = cur.offset - skip
            if cur.offset <= 0:
                return 0
            if cur.retreat() == INVALID:
                raise MalformedText(encoding)
            found -= 1

    first = Cursor(needle).lead()
    while True:
        if cur.lead() == first:
            return found
        if cur.offset <= 0:
            return 0
        if cur.retreat() == INVALID:
            raise MalformedText(encoding)
        found -= 1


def rfind(haystack: Buffer, needle: Buffer, start: int = MAX_POSITION) -> int:
    """Rightmost match of `needle` in `haystack` at or before `start` (1-based).

    Returns the 1-based position (bytes for raw, codepoints for text) or 0. A start
    past the last position where the needle fits is clamped to that position; a start
    of 0 or less always returns 0. An empty needle with the default start returns the
    haystack length in units plus one.
    """
    if haystack.encoding is not needle.encoding:
        raise UsageError("haystack and needle encodings differ")
    if haystack.is_text:
        return rfind_text(haystack, needle, start)
    return rfind_raw(haystack, needle, start)
