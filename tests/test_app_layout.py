from __future__ import annotations

from pathlib import Path

import pytest

textual = pytest.importorskip("textual")
from textual.widgets import Static  # noqa: E402

from bytefind.app import BytefindApp  # noqa: E402
from bytefind.core.buffer import Buffer, Encoding  # noqa: E402
from bytefind.widgets.hex_view import HexView  # noqa: E402
from bytefind.widgets.search_banner import SearchBanner  # noqa: E402


def test_compose_builds_widgets(tmp_path: Path) -> None:
    p = tmp_path / "small.bin"
    p.write_bytes(bytes(range(128)))
    app = BytefindApp(str(p), encoding=Encoding.UTF16)
    # Exhaust compose to construct widgets without running the app
    widgets = list(app.compose())
    assert isinstance(app.hex_view, HexView)
    assert any(isinstance(w, SearchBanner) for w in widgets)
    assert app.hex_view.haystack.encoding is Encoding.UTF16
    assert app.hex_view.data_size == 128
    app.on_unmount()


def test_compose_missing_file(tmp_path: Path) -> None:
    app = BytefindApp(str(tmp_path / "missing.bin"))
    widgets = list(app.compose())
    assert len(widgets) == 1 and isinstance(widgets[0], Static)
    assert app.hex_view is None


def test_hex_view_renders_rows() -> None:
    view = HexView(Buffer.raw(b"AB\x00" + bytes(range(32, 60))))
    plain = view.render().plain
    lines = plain.splitlines()
    assert lines[0].startswith("00000000  41 42 00")
    assert lines[0].endswith("AB. !\"#$%&'()*+,")
    assert lines[1].startswith("00000010  ")
    assert view.total_rows() == 2


def test_hex_view_empty() -> None:
    view = HexView(Buffer.raw(b""))
    assert view.render().plain == "<empty>"
    assert view.total_rows() == 1


def test_hex_view_groups_utf16_units() -> None:
    view = HexView(Buffer.text("Hié\U0001f600", Encoding.UTF16))
    assert view.bytes_per_row == 16
    line = view.render().plain
    assert line.startswith("00000000  4800 6900 E900 3DD8 00DE ")
    # Surrogate halves are not printable on their own
    assert line.endswith("H i é . . ")
    assert view.in_match(0) is False
