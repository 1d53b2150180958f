from __future__ import annotations

from bytefind.core.buffer import Buffer, Encoding

HEX_DIGITS = "0123456789abcdef"


def parse_hex(text: str) -> bytes | None:
    """Parse 'DEADBEEF', 'DE AD BE EF' or '0xDEADBEEF' into bytes; None if not hex."""
    s = text.strip().replace(" ", "").lower()
    if s.startswith("0x"):
        s = s[2:]
    if not s or len(s) % 2 or not all(c in HEX_DIGITS for c in s):
        return None
    try:
        return bytes.fromhex(s)
    except ValueError:
        return None


def parse_pattern(text: str, encoding: Encoding, *, hex_mode: bool | None = None) -> tuple[str, Buffer | None]:
    """Turn user input into a needle buffer for `encoding`.

    hex_mode=True forces hex bytes (used verbatim as encoded data), False forces
    text, None guesses: input that looks like hex pairs is hex, anything else text.
    Returns (kind, buffer) where kind is "bytes" or "text"; buffer is None when
    the input cannot be used.
    """
    if hex_mode is not False:
        data = parse_hex(text)
        if data is not None:
            return ("bytes", Buffer(data, encoding))
        if hex_mode:
            return ("bytes", None)
    if encoding is Encoding.RAW:
        return ("text", Buffer.raw(text.encode("utf-8", "surrogatepass")))
    return ("text", Buffer.text(text, encoding))
