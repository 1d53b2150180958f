"""Entry points: `instr` and `rinstr` over loosely typed values.

These classify argument kinds, materialize buffers, run the search engine and map
the outcome to a result: an int position (0 when not found), None when any
argument is None, or a raised SearchError.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from numbers import Real
from typing import Any

from bytefind.core.buffer import Buffer, Encoding, normalize_encoding
from bytefind.core.errors import AllocationError, UsageError
from bytefind.core.rsearch import MAX_POSITION, rfind
from bytefind.core.search import find

MIN_POSITION = -(2**63)

_INT_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")

Engine = Callable[[Buffer, Buffer, int], int]


def _is_raw(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def _is_text(value: Any) -> bool:
    # bool is an int subclass; SQLite has no booleans, so they are not accepted
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _kind(value: Any) -> str:
    if isinstance(value, Buffer):
        return "text" if value.is_text else "raw"
    if _is_raw(value):
        return "raw"
    if _is_text(value):
        return "text"
    raise UsageError(f"unsupported value type {type(value).__name__}")


def coerce_start(value: Any) -> int:
    """Coerce a start argument to a signed 64-bit integer.

    Real numbers truncate toward zero and saturate at the 64-bit bounds; NaN is 0.
    Strings convert the way SQLite reads an integer from text: the leading signed
    digits count ("12abc" is 12, "2.9" is 2) and anything else is 0.
    """
    if isinstance(value, str):
        m = _INT_PREFIX.match(value)
        value = int(m.group(1)) if m else 0
    if isinstance(value, bool) or not isinstance(value, Real):
        raise UsageError(f"start must be a number, got {type(value).__name__}")
    if isinstance(value, float):
        if math.isnan(value):
            return 0
        if math.isinf(value):
            return MAX_POSITION if value > 0 else MIN_POSITION
    n = int(value)
    return max(MIN_POSITION, min(MAX_POSITION, n))


def number_text(value: int | float) -> str:
    """Render a number as SQLite renders it as text.

    Integers print in decimal. Reals use 15 significant digits and always keep a
    decimal point: 100.0, 1.5, 1.0e+20. Infinities are Inf and -Inf.
    """
    if not isinstance(value, float):
        return str(value)
    if math.isinf(value):
        return "Inf" if value > 0 else "-Inf"
    if math.isnan(value):
        return "NaN"
    s = f"{value:.15g}"
    mantissa, sep, exponent = s.partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    return mantissa + sep + exponent


def materialize(value: Any, encoding: Encoding) -> Buffer:
    """Build a Buffer for a raw or text value.

    `encoding` is the text encoding of the calling entry point; raw values ignore it.
    """
    if isinstance(value, Buffer):
        if value.is_text and value.encoding is not encoding:
            raise UsageError(
                f"{value.encoding.value} buffer passed to a {encoding.value} function"
            )
        return value
    try:
        if _is_raw(value):
            return Buffer.raw(value)
        if not isinstance(value, str):
            value = number_text(value)
        return Buffer.text(value, encoding)
    except MemoryError as exc:
        raise AllocationError("out of memory materializing search argument") from exc


def _call(engine: Engine, args: tuple[Any, ...], encoding: str | Encoding, default_start: int) -> int | None:
    if len(args) < 2 or len(args) > 3:
        raise UsageError(f"expected 2 or 3 arguments, got {len(args)}")
    enc = normalize_encoding(encoding)
    if not enc.is_text:
        raise UsageError("entry points take a text encoding (utf-8 or utf-16)")

    haystack, needle = args[0], args[1]
    if haystack is None or needle is None:
        return None
    if len(args) == 3:
        if args[2] is None:
            return None
        start = coerce_start(args[2])
    else:
        start = default_start

    if _kind(haystack) != _kind(needle):
        raise UsageError("cannot mix raw and text arguments")
    return engine(materialize(haystack, enc), materialize(needle, enc), start)


def instr(*args: Any, encoding: str | Encoding = Encoding.UTF8) -> int | None:
    """instr(haystack, needle[, start]): leftmost match at/after start (default 1)."""
    return _call(find, args, encoding, 1)


def rinstr(*args: Any, encoding: str | Encoding = Encoding.UTF8) -> int | None:
    """rinstr(haystack, needle[, start]): rightmost match at/before start (default: end)."""
    return _call(rfind, args, encoding, MAX_POSITION)


def entry_point(direction: str, encoding: str | Encoding) -> Callable[..., int | None]:
    """Bind an entry point to a direction ("forward"/"backward") and text encoding."""
    enc = normalize_encoding(encoding)
    if direction == "forward":
        base = instr
    elif direction == "backward":
        base = rinstr
    else:
        raise ValueError(f"Invalid direction '{direction}'. Expected 'forward' or 'backward'.")

    def bound(*args: Any) -> int | None:
        return base(*args, encoding=enc)

    bound.__name__ = f"{base.__name__}_{enc.name.lower()}"
    bound.__doc__ = base.__doc__
    return bound
