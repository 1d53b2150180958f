from __future__ import annotations

import pytest

from bytefind.core.buffer import Encoding
from bytefind.core.patterns import parse_hex, parse_pattern


@pytest.mark.parametrize(
    "text, expected",
    [
        ("DEADBEEF", b"\xde\xad\xbe\xef"),
        ("de ad be ef", b"\xde\xad\xbe\xef"),
        ("0x0a0B", b"\x0a\x0b"),
        ("  00  ", b"\x00"),
        ("abc", None),
        ("zz", None),
        ("", None),
        ("0x", None),
    ],
)
def test_parse_hex(text: str, expected: bytes | None) -> None:
    assert parse_hex(text) == expected


def test_guess_mode_prefers_hex() -> None:
    kind, buf = parse_pattern("cafe", Encoding.RAW)
    assert kind == "bytes"
    assert buf is not None and bytes(buf.data) == b"\xca\xfe"

    kind, buf = parse_pattern("coffee", Encoding.RAW)
    assert kind == "text"
    assert buf is not None and bytes(buf.data) == b"coffee"


def test_forced_text_and_hex() -> None:
    kind, buf = parse_pattern("cafe", Encoding.RAW, hex_mode=False)
    assert kind == "text" and buf is not None and bytes(buf.data) == b"cafe"
    assert parse_pattern("not hex", Encoding.RAW, hex_mode=True) == ("bytes", None)


def test_text_needles_use_the_haystack_encoding() -> None:
    kind, buf = parse_pattern("é", Encoding.UTF16, hex_mode=False)
    assert kind == "text"
    assert buf is not None and buf.encoding is Encoding.UTF16
    assert bytes(buf.data) == b"\xe9\x00"

    _, raw = parse_pattern("é", Encoding.RAW)
    assert raw is not None and bytes(raw.data) == b"\xc3\xa9"


def test_hex_needles_are_taken_verbatim() -> None:
    _, buf = parse_pattern("41 00", Encoding.UTF16, hex_mode=True)
    assert buf is not None and buf.encoding is Encoding.UTF16
    assert bytes(buf.data) == b"A\x00"
