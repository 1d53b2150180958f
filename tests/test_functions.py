from __future__ import annotations

import pytest

from bytefind.core.buffer import Buffer, Encoding
from bytefind.core.errors import AllocationError, MalformedText, UsageError
from bytefind.core.functions import (
    MIN_POSITION,
    coerce_start,
    entry_point,
    instr,
    number_text,
    rinstr,
)
from bytefind.core.rsearch import MAX_POSITION


def test_instr_text_and_raw() -> None:
    assert instr("abcabc", "ca") == 3
    assert instr(b"abcabcabc", b"bca") == 2
    assert instr(bytearray(b"abcabcabc"), memoryview(b"bca")) == 2
    assert instr("héllo wörld", "ö") == 8


def test_rinstr_text_and_raw() -> None:
    assert rinstr("abcabc", "a") == 4
    assert rinstr("abcabc", "a", 3) == 1
    assert rinstr("abc", "a", 0) == 0
    assert rinstr(b"abcabcabc", b"bca") == 5


@pytest.mark.parametrize("func", [instr, rinstr])
def test_none_propagates(func) -> None:  # type: ignore[no-untyped-def]
    assert func(None, "a") is None
    assert func("a", None) is None
    assert func("a", "a", None) is None
    assert func(None, b"a") is None


@pytest.mark.parametrize("func", [instr, rinstr])
@pytest.mark.parametrize("args", [(), ("a",), ("a", "b", 1, 2)])
def test_wrong_arity_is_usage_error(func, args) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(UsageError) as exc:
        func(*args)
    assert str(exc.value).startswith("malformed call")


@pytest.mark.parametrize("func", [instr, rinstr])
def test_mixed_kinds_are_usage_errors(func) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(UsageError):
        func(b"abc", "a")
    with pytest.raises(UsageError):
        func("abc", b"a")
    with pytest.raises(UsageError):
        func([1], [1])


def test_numbers_are_text() -> None:
    assert instr(12345, 34) == 3
    assert instr(1.5, ".") == 2
    assert rinstr(1212, 12) == 3


@pytest.mark.parametrize(
    "value, text",
    [
        (1.5, "1.5"),
        (100.0, "100.0"),
        (1e20, "1.0e+20"),
        (1e-05, "1.0e-05"),
        (0.1, "0.1"),
        (-2.0, "-2.0"),
        (float("inf"), "Inf"),
        (float("-inf"), "-Inf"),
        (42, "42"),
    ],
)
def test_number_text_matches_sqlite(value: float, text: str) -> None:
    assert number_text(value) == text


def test_reals_are_searched_as_sqlite_renders_them() -> None:
    assert instr(1e20, ".") == 2
    assert instr(1e20, "e+20") == 4
    assert instr(100.0, ".0") == 4


def test_start_coercion() -> None:
    assert instr("abcabc", "a", 2.9) == 4
    assert instr("abcabc", "a", "2") == 4
    assert instr("abcabc", "a", " 4.0 ") == 4
    assert rinstr("abcabc", "a", 3.99) == 1
    with pytest.raises(UsageError):
        instr("abc", "a", b"1")


@pytest.mark.parametrize(
    "text, expected",
    [("12abc", 12), ("2.9", 2), (" -3", -3), ("+7", 7), ("x", 0), ("", 0), ("1e3", 1)],
)
def test_string_start_uses_leading_digits(text: str, expected: int) -> None:
    assert coerce_start(text) == expected


def test_non_numeric_start_searches_from_the_beginning() -> None:
    assert instr("abcabc", "a", "x") == 1
    assert instr("abcabc", "a", "4th") == 4
    assert rinstr("abcabc", "a", "x") == 0


def test_coerce_start_saturates() -> None:
    assert coerce_start(float("inf")) == MAX_POSITION
    assert coerce_start(float("-inf")) == MIN_POSITION
    assert coerce_start(float("nan")) == 0
    assert coerce_start(2**70) == MAX_POSITION
    assert coerce_start(-(2**70)) == MIN_POSITION
    assert coerce_start(-2.5) == -2
    with pytest.raises(UsageError):
        coerce_start(True)


def test_empty_needle() -> None:
    assert instr("héllo", "") == 1
    assert rinstr("héllo", "") == 6
    assert rinstr(b"abc", b"") == 4
    assert instr("", "") == 1


def test_malformed_utf8_and_utf16() -> None:
    # Lone surrogates survive materialization and fail to decode
    with pytest.raises(MalformedText) as exc:
        instr("a\ud800b", "b")
    assert str(exc.value) == "malformed UTF-8 text"
    with pytest.raises(MalformedText) as exc16:
        instr("a\ud800b", "b", encoding="utf-16")
    assert str(exc16.value) == "malformed UTF-16 text"
    with pytest.raises(MalformedText):
        rinstr("a\udc00b", "a")


def test_match_before_malformed_text() -> None:
    assert instr("b\ud800", "b") == 1


def test_utf16_entry_point() -> None:
    assert instr("a😀b", "b", encoding="utf-16") == 3
    assert rinstr("😀a😀", "😀", encoding=Encoding.UTF16) == 3


def test_buffers_pass_through() -> None:
    hay = Buffer.text("abc", Encoding.UTF16)
    assert instr(hay, Buffer.text("c", Encoding.UTF16), encoding="utf-16") == 3
    assert instr(Buffer.raw(b"abc"), b"c") == 3
    with pytest.raises(UsageError):
        instr(hay, Buffer.text("c", Encoding.UTF16))


def test_allocation_failure() -> None:
    class Unencodable(str):
        def encode(self, *args, **kwargs):  # type: ignore[no-untyped-def, override]
            raise MemoryError

    with pytest.raises(AllocationError) as exc:
        instr(Unencodable("abc"), "a")
    assert isinstance(exc.value, MemoryError)


def test_entry_point_binding() -> None:
    fwd16 = entry_point("forward", "utf-16")
    back8 = entry_point("backward", "utf-8")
    assert fwd16("a\ud800", "a") == 1
    assert back8("abab", "ab") == 3
    with pytest.raises(MalformedText) as exc:
        fwd16("\ud800a", "a")
    assert exc.value.encoding == "utf-16"
    with pytest.raises(ValueError):
        entry_point("sideways", "utf-8")
    with pytest.raises(ValueError):
        entry_point("forward", "latin-1")


def test_raw_encoding_is_not_an_entry_point() -> None:
    with pytest.raises(UsageError):
        instr(b"abc", b"a", encoding="raw")
