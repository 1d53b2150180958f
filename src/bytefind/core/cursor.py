"""Codepoint cursors over encoded buffers.

A cursor is a byte offset into a buffer. `advance` decodes the codepoint that
starts at the offset and steps past it; `retreat` decodes the codepoint that ends
at the offset and steps before it. Both validate well-formedness and return
`INVALID` (leaving the offset where it was) on malformed data.

Decoders return `(codepoint, width)`; width is 0 when the data is invalid.
"""

from __future__ import annotations

from collections.abc import Callable

from bytefind.core.buffer import Buffer, Encoding
from bytefind.core.errors import InvalidOffset, MalformedText

INVALID = -1

Data = bytes | memoryview
Decoder = Callable[[Data, int, int], tuple[int, int]]


def _is_cont(b: int) -> bool:
    return 0x80 <= b < 0xC0


# ---- Forward decoders: (data, offset, end) ----


def _next_raw(data: Data, offset: int, end: int) -> tuple[int, int]:
    if end - offset >= 1:
        return data[offset], 1
    return INVALID, 0


def _next_utf8(data: Data, offset: int, end: int) -> tuple[int, int]:
    avail = end - offset
    if avail < 1:
        return INVALID, 0
    c0 = data[offset]
    if c0 < 0x80:
        return c0, 1
    if 0xC2 <= c0 < 0xE0:
        if avail >= 2 and _is_cont(data[offset + 1]):
            return (c0 & 0x1F) << 6 | data[offset + 1] & 0x3F, 2
        return INVALID, 0
    if 0xE0 <= c0 < 0xF0:
        if avail >= 3 and _is_cont(data[offset + 1]) and _is_cont(data[offset + 2]):
            cp = (c0 & 0x0F) << 12 | (data[offset + 1] & 0x3F) << 6 | data[offset + 2] & 0x3F
            if cp >= 0x800 and not 0xD800 <= cp < 0xE000:
                return cp, 3
        return INVALID, 0
    if 0xF0 <= c0 < 0xF5:
        if (
            avail >= 4
            and _is_cont(data[offset + 1])
            and _is_cont(data[offset + 2])
            and _is_cont(data[offset + 3])
        ):
            cp = (
                (c0 & 0x07) << 18
                | (data[offset + 1] & 0x3F) << 12
                | (data[offset + 2] & 0x3F) << 6
                | data[offset + 3] & 0x3F
            )
            if 0x10000 <= cp < 0x110000:
                return cp, 4
    return INVALID, 0


def _unit(data: Data, offset: int) -> int:
    # Little-endian 16-bit unit
    return data[offset] | data[offset + 1] << 8


def _next_utf16(data: Data, offset: int, end: int) -> tuple[int, int]:
    if end - offset < 2:
        return INVALID, 0
    u0 = _unit(data, offset)
    if u0 < 0xD800 or u0 >= 0xE000:
        return u0, 2
    if u0 < 0xDC00 and end - offset >= 4:
        u1 = _unit(data, offset + 2)
        if 0xDC00 <= u1 < 0xE000:
            return 0x10000 + ((u0 - 0xD800) << 10 | (u1 - 0xDC00)), 4
    return INVALID, 0


# ---- Backward decoders: (data, offset, start) ----


def _prev_raw(data: Data, offset: int, start: int) -> tuple[int, int]:
    if offset - start >= 1:
        return data[offset - 1], 1
    return INVALID, 0


def _prev_utf8(data: Data, offset: int, start: int) -> tuple[int, int]:
    avail = offset - start
    if avail < 1:
        return INVALID, 0
    c1 = data[offset - 1]
    if c1 < 0x80:
        return c1, 1
    if not _is_cont(c1) or avail < 2:
        return INVALID, 0
    c2 = data[offset - 2]
    if 0xC2 <= c2 < 0xE0:
        return (c2 & 0x1F) << 6 | c1 & 0x3F, 2
    if not _is_cont(c2) or avail < 3:
        return INVALID, 0
    c3 = data[offset - 3]
    if 0xE0 <= c3 < 0xF0:
        cp = (c3 & 0x0F) << 12 | (c2 & 0x3F) << 6 | c1 & 0x3F
        if cp >= 0x800 and not 0xD800 <= cp < 0xE000:
            return cp, 3
        return INVALID, 0
    if not _is_cont(c3) or avail < 4:
        return INVALID, 0
    c4 = data[offset - 4]
    if 0xF0 <= c4 < 0xF5:
        cp = (c4 & 0x07) << 18 | (c3 & 0x3F) << 12 | (c2 & 0x3F) << 6 | c1 & 0x3F
        if 0x10000 <= cp < 0x110000:
            return cp, 4
    return INVALID, 0


def _prev_utf16(data: Data, offset: int, start: int) -> tuple[int, int]:
    if offset - start < 2:
        return INVALID, 0
    u1 = _unit(data, offset - 2)
    if u1 < 0xD800 or u1 >= 0xE000:
        return u1, 2
    if u1 >= 0xDC00 and offset - start >= 4:
        u0 = _unit(data, offset - 4)
        if 0xD800 <= u0 < 0xDC00:
            return 0x10000 + ((u0 - 0xD800) << 10 | (u1 - 0xDC00)), 4
    return INVALID, 0


_FORWARD: dict[Encoding, Decoder] = {
    Encoding.RAW: _next_raw,
    Encoding.UTF8: _next_utf8,
    Encoding.UTF16: _next_utf16,
}

_BACKWARD: dict[Encoding, Decoder] = {
    Encoding.RAW: _prev_raw,
    Encoding.UTF8: _prev_utf8,
    Encoding.UTF16: _prev_utf16,
}


class Cursor:
    """Codepoint-granular cursor over a `Buffer`.

    `offset` is the number of bytes before the cursor, `remaining` the number after.
    The offset only ever moves by whole, validated codepoints.
    """

    __slots__ = ("buffer", "data", "end", "offset", "_next", "_prev")

    def __init__(self, buffer: Buffer, offset: int = 0) -> None:
        if offset < 0 or offset > buffer.size:
            raise InvalidOffset(f"offset {offset} outside buffer of {buffer.size} bytes")
        self.buffer = buffer
        self.data = buffer.data
        self.end = buffer.size
        self.offset = offset
        self._next = _FORWARD[buffer.encoding]
        self._prev = _BACKWARD[buffer.encoding]

    @property
    def remaining(self) -> int:
        return self.end - self.offset

    def advance(self) -> int:
        cp, width = self._next(self.data, self.offset, self.end)
        self.offset += width
        return cp

    def retreat(self) -> int:
        cp, width = self._prev(self.data, self.offset, 0)
        self.offset -= width
        return cp

    def lead(self) -> int:
        """Storage unit at the cursor (byte, or 16-bit unit for UTF-16)."""
        if self.buffer.encoding is Encoding.UTF16:
            return _unit(self.data, self.offset)
        return self.data[self.offset]

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Cursor({self.buffer.encoding.value}, offset={self.offset}, remaining={self.remaining})"


def validate(buffer: Buffer) -> None:
    """Decode the whole buffer, raising MalformedText at the first invalid sequence."""
    if not buffer.is_text:
        return
    cur = Cursor(buffer)
    while cur.remaining > 0:
        if cur.advance() == INVALID:
            raise MalformedText(buffer.encoding.value)


def codepoints(buffer: Buffer) -> list[int]:
    """Decode every codepoint (or byte, for raw buffers)."""
    out: list[int] = []
    cur = Cursor(buffer)
    while cur.remaining > 0:
        cp = cur.advance()
        if cp == INVALID:
            raise MalformedText(buffer.encoding.value)
        out.append(cp)
    return out


def position_at(buffer: Buffer, offset: int) -> int:
    """Return the 1-based position of the first codepoint starting at or after `offset`.

    Offsets inside a multi-byte sequence round up to the next codepoint.
    """
    if offset < 0:
        raise InvalidOffset("offset must be >= 0")
    if not buffer.is_text:
        return min(offset, buffer.size) + 1
    cur = Cursor(buffer)
    position = 1
    while cur.offset < offset and cur.remaining > 0:
        if cur.advance() == INVALID:
            raise MalformedText(buffer.encoding.value)
        position += 1
    return position


def byte_offset(buffer: Buffer, position: int) -> int:
    """Return the byte offset of a 1-based unit position.

    Text positions are re-decoded from the start of the buffer, so the result is
    always a codepoint boundary. `len(units) + 1` maps to the end of the buffer.

    Raises:
        InvalidOffset: If position is < 1 or past the end of the buffer
        MalformedText: If decoding fails before the position is reached
    """
    if position < 1:
        raise InvalidOffset("position must be >= 1")
    if not buffer.is_text:
        if position - 1 > buffer.size:
            raise InvalidOffset(f"position {position} past end of buffer")
        return position - 1
    cur = Cursor(buffer)
    for _ in range(position - 1):
        if cur.remaining <= 0:
            raise InvalidOffset(f"position {position} past end of buffer")
        if cur.advance() == INVALID:
            raise MalformedText(buffer.encoding.value)
    return cur.offset
