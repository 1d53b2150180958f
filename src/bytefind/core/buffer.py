"""Encodings and the immutable buffer views searched by the engines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Encoding(Enum):
    """Storage encoding of a buffer."""

    RAW = "raw"  # Positions count bytes
    UTF8 = "utf-8"  # Positions count codepoints, 1-byte units
    UTF16 = "utf-16"  # Positions count codepoints, 2-byte little-endian units

    @property
    def is_text(self) -> bool:
        return self is not Encoding.RAW

    @property
    def unit_size(self) -> int:
        """Bytes per storage unit."""
        return 2 if self is Encoding.UTF16 else 1

    @property
    def mask(self) -> int:
        """Skip-table mask keeping byte skips aligned to storage units."""
        return self.unit_size - 1

    @property
    def codec(self) -> str | None:
        """Python codec used to materialize `str` values, None for raw."""
        if self is Encoding.UTF8:
            return "utf-8"
        if self is Encoding.UTF16:
            return "utf-16-le"
        return None


_ALIASES = {
    "raw": Encoding.RAW,
    "blob": Encoding.RAW,
    "bytes": Encoding.RAW,
    "utf-8": Encoding.UTF8,
    "utf8": Encoding.UTF8,
    "utf-16": Encoding.UTF16,
    "utf16": Encoding.UTF16,
    "utf-16le": Encoding.UTF16,
    "utf-16-le": Encoding.UTF16,
}


def normalize_encoding(value: str | Encoding) -> Encoding:
    """Normalize an encoding name (case-insensitive, common aliases accepted).

    Raises:
        ValueError: If the name is not a supported encoding
    """
    if isinstance(value, Encoding):
        return value
    enc = _ALIASES.get(str(value).strip().lower())
    if enc is None:
        raise ValueError(f"Unknown encoding '{value}'. Expected raw, utf-8 or utf-16.")
    return enc


@dataclass(frozen=True)
class Buffer:
    """Immutable view over encoded data.

    `data` is borrowed for the duration of a call; engines never mutate or keep it.
    UTF-16 data is little-endian and an odd trailing byte is ignored.
    """

    data: bytes | memoryview
    encoding: Encoding = Encoding.RAW

    @classmethod
    def raw(cls, data: bytes | bytearray | memoryview) -> Buffer:
        if isinstance(data, bytearray):
            data = bytes(data)
        elif isinstance(data, memoryview):
            data = data.cast("B") if data.format != "B" or data.ndim != 1 else data
        return cls(data, Encoding.RAW)

    @classmethod
    def text(cls, value: str, encoding: Encoding = Encoding.UTF8) -> Buffer:
        """Encode `value`, passing lone surrogates through so they fail to decode later."""
        if not encoding.is_text:
            raise ValueError("text buffers need a text encoding")
        return cls(value.encode(encoding.codec, "surrogatepass"), encoding)  # type: ignore[arg-type]

    @property
    def size(self) -> int:
        """Usable length in bytes."""
        n = len(self.data)
        if self.encoding is Encoding.UTF16:
            n &= ~1
        return n

    @property
    def units(self) -> int:
        """Length in storage units."""
        return self.size // self.encoding.unit_size

    @property
    def is_text(self) -> bool:
        return self.encoding.is_text

    def __len__(self) -> int:
        return self.size
