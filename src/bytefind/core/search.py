"""Forward search: leftmost match at or after a 1-based start position."""

from __future__ import annotations

from bytefind.core.buffer import Buffer
from bytefind.core.cursor import INVALID, Cursor, validate
from bytefind.core.errors import MalformedText, UsageError
from bytefind.core.skips import forward_skips


def _window_matches(data, offset: int, needle, n: int) -> bool:  # type: ignore[no-untyped-def]
    return data[offset : offset + n] == needle


def find_raw(haystack: Buffer, needle: Buffer, start: int = 1) -> int:
    """Byte position of the first `needle` at/after `start`, or 0."""
    data = haystack.data
    size = haystack.size
    pat = needle.data
    n = needle.size

    if start > 1:
        found = start
        offset = start - 1
        if offset > size:
            return 0
    else:
        found = 1
        offset = 0
    if n > size - offset:
        return 0
    if n == 0:
        return found

    if n > 1:
        skips = forward_skips(pat)
        while size - offset >= n:
            if _window_matches(data, offset, pat, n):
                return found
            skip = skips[data[offset + n - 1]]
            offset += skip
            found += skip
        return 0

    first = pat[0]
    while offset < size:
        if data[offset] == first:
            return found
        offset += 1
        found += 1
    return 0


def find_text(haystack: Buffer, needle: Buffer, start: int = 1) -> int:
    """Codepoint position of the first `needle` at/after `start`, or 0.

    Raises:
        MalformedText: If the needle, or the haystack up to the point the scan
            stops, fails to decode
    """
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
        if cur.advance() == INVALID:
            raise MalformedText(encoding)
        found += 1
    if found < start:
        return 0
    if n == 0:
        return found

    data = cur.data
    if n > haystack.encoding.unit_size:
        skips = forward_skips(pat, haystack.encoding.mask)
        floor = cur.offset
        while cur.remaining >= n:
            if cur.offset >= floor:
                if _window_matches(data, cur.offset, pat, n):
                    return found
                skip = skips[data[cur.offset + n - 1]]
                if cur.remaining - skip < n:
                    return 0
                floor = cur.offset + skip
            if cur.advance() == INVALID:
                raise MalformedText(encoding)
            found += 1
        return 0

    first = Cursor(needle).lead()
    while cur.remaining > 0:
        if cur.lead() == first:
            return found
        if cur.advance() == INVALID:
            raise MalformedText(encoding)
        found += 1
    return 0


def find(haystack: Buffer, needle: Buffer, start: int = 1) -> int:
    """Leftmost match of `needle` in `haystack` at or after `start` (1-based).

    Returns the 1-based position (bytes for raw buffers, codepoints for text), or 0
    when there is no match. A `start` of 1 or less searches from the beginning; an
    empty needle matches at the start position.
    """
    if haystack.encoding is not needle.encoding:
        raise UsageError("haystack and needle encodings differ")
    if haystack.is_text:
        return find_text(haystack, needle, start)
    return find_raw(haystack, needle, start)
