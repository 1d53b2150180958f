from __future__ import annotations

from bytefind.core.skips import TABLE_SIZE, backward_skips, forward_skips


def test_forward_table_excludes_last_byte() -> None:
    table = forward_skips(b"abcd")
    assert len(table) == TABLE_SIZE
    assert table[ord("a")] == 3
    assert table[ord("b")] == 2
    assert table[ord("c")] == 1
    assert table[ord("d")] == 4
    assert table[ord("z")] == 4


def test_forward_table_rightmost_occurrence_wins() -> None:
    table = forward_skips(b"abab")
    assert table[ord("a")] == 1
    assert table[ord("b")] == 2


def test_backward_table_excludes_first_byte() -> None:
    table = backward_skips(b"abcd")
    assert table[ord("a")] == 4
    assert table[ord("b")] == 1
    assert table[ord("c")] == 2
    assert table[ord("d")] == 3


def test_backward_table_leftmost_occurrence_wins() -> None:
    table = backward_skips(b"abab")
    assert table[ord("b")] == 1
    assert table[ord("a")] == 2


def test_mask_rounds_up_to_even() -> None:
    table = forward_skips(b"abc", 1)
    assert table[ord("a")] == 2
    assert table[ord("b")] == 2  # 1 -> 2
    assert table[ord("q")] == 4  # 3 -> 4
    assert all(v % 2 == 0 for v in table)
    assert all(v % 2 == 0 for v in backward_skips(b"\x3d\xd8\x00\xde", 1))


def test_single_byte_needle_skips_one() -> None:
    assert set(forward_skips(b"x")) == {1}
    assert set(backward_skips(b"x")) == {1}
