from __future__ import annotations

from math import ceil

from rich.style import Style
from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget

from bytefind.core.buffer import Buffer, Encoding
from bytefind.ui.palette import PALETTE


class HexView(Widget):
    """Read-only hex viewer over a haystack buffer.

    Bytes are grouped in storage units of the haystack encoding (pairs for
    UTF-16) and the cursor always sits on a unit boundary. The right-hand column
    shows printable units as characters. Only the visible rows are rendered and
    the current match span is highlighted.
    """

    DEFAULT_BYTES_PER_ROW = 16
    can_focus = True

    BINDINGS = [
        ("left,h", "cursor_left", "Left"),
        ("right,l", "cursor_right", "Right"),
        ("up,k", "cursor_up", "Up"),
        ("down,j", "cursor_down", "Down"),
        ("pageup", "page_up", "PgUp"),
        ("pagedown", "page_down", "PgDn"),
        ("g", "go_start", "Start"),
        ("G", "go_end", "End"),
    ]

    cursor_offset: int = reactive(0)
    viewport_offset: int = reactive(0)

    def __init__(self, haystack: Buffer, *, bytes_per_row: int | None = None) -> None:
        super().__init__()
        self.haystack = haystack
        self.unit = haystack.encoding.unit_size
        bpr = bytes_per_row or self.DEFAULT_BYTES_PER_ROW
        self.bytes_per_row = max(self.unit, bpr - bpr % self.unit)
        self.cursor_offset = 0
        self.viewport_offset = 0
        self._match: tuple[int, int] | None = None  # (offset, length) in bytes

    @property
    def data_size(self) -> int:
        return len(self.haystack.data)

    def total_rows(self) -> int:
        if self.data_size == 0:
            return 1
        return int(ceil(self.data_size / self.bytes_per_row))

    def visible_rows(self) -> int:
        # Height is unknown until the first layout
        return max(16, self.size.height or 0)

    def set_top_row(self, row: int) -> None:
        max_top = max(0, self.total_rows() - 1)
        self.viewport_offset = max(0, min(row, max_top)) * self.bytes_per_row
        self.refresh()

    # ---- Match overlay ----
    def set_match(self, offset: int, length: int) -> None:
        """Highlight `length` bytes at `offset` and move the cursor there."""
        self._match = (offset, max(1, length))
        self.set_cursor(offset)

    def clear_match(self) -> None:
        self._match = None
        self.refresh()

    def in_match(self, off: int) -> bool:
        if self._match is None:
            return False
        start, length = self._match
        return start <= off < start + length

    # ---- Rendering ----
    def _unit_style(self, off: int, chunk: bytes) -> Style:
        if off <= self.cursor_offset < off + self.unit:
            return Style(bgcolor=PALETTE.hex_cursor_bg, color=PALETTE.hex_selected_fg)
        if self.in_match(off):
            return Style(color=PALETTE.search_hit_fg, bgcolor=PALETTE.search_hit_bg, bold=True)
        if not any(chunk):
            return Style(color=PALETTE.hex_zero_fg)
        return Style(color=PALETTE.hex_byte_fg)

    def text_column(self, row: bytes) -> str:
        """Printable characters for one row, one cell per byte."""
        if self.haystack.encoding is Encoding.UTF16:
            out = []
            for i in range(0, len(row) - 1, 2):
                ch = chr(row[i] | row[i + 1] << 8)
                out.append((ch if ch.isprintable() and not 0xD800 <= ord(ch) < 0xE000 else ".") + " ")
            return "".join(out)
        return "".join(chr(b) if 32 <= b <= 126 else "." for b in row)

    def render(self) -> Text:
        bpr = self.bytes_per_row
        unit = self.unit
        cells = bpr // unit
        data = self.haystack.data
        start_row = self.viewport_offset // bpr
        text = Text()
        for i in range(self.visible_rows()):
            offset = (start_row + i) * bpr
            if offset >= self.data_size:
                break
            row = bytes(data[offset : offset + bpr])
            line = Text(f"{offset:08X}  ", style=PALETTE.hex_offset_fg)
            for cell in range(0, len(row), unit):
                chunk = row[cell : cell + unit]
                line.append(chunk.hex().upper(), style=self._unit_style(offset + cell, chunk))
                line.append(" ")
            missing = cells - ceil(len(row) / unit)
            line.append((" " * (2 * unit + 1)) * missing + " ")
            line.append(self.text_column(row), style=PALETTE.ascii_fg)
            text.append_text(line)
            text.append("\n")
        if not text.plain:
            return Text("<empty>", style=PALETTE.status_dim)
        return text[:-1]

    # ---- Cursor movement ----
    def set_cursor(self, offset: int) -> None:
        last = max(0, self.data_size - 1)
        offset = max(0, min(offset, last))
        self.cursor_offset = offset - offset % self.unit
        self.ensure_cursor_visible()
        self.refresh()
        if hasattr(self.app, "on_hex_cursor_moved"):
            self.app.on_hex_cursor_moved(self.cursor_offset)  # type: ignore[attr-defined]

    def ensure_cursor_visible(self) -> None:
        bpr = self.bytes_per_row
        top = self.viewport_offset
        bottom = top + self.visible_rows() * bpr - 1
        row = self.cursor_offset // bpr
        if self.cursor_offset < top:
            self.viewport_offset = row * bpr
        elif self.cursor_offset > bottom:
            # Keep the cursor's row at the bottom
            self.set_top_row(max(0, row - self.visible_rows() + 1))

    # ---- Actions (bound in BINDINGS) ----
    def action_cursor_left(self) -> None:
        self.set_cursor(self.cursor_offset - self.unit)

    def action_cursor_right(self) -> None:
        self.set_cursor(self.cursor_offset + self.unit)

    def action_cursor_up(self) -> None:
        self.set_cursor(self.cursor_offset - self.bytes_per_row)

    def action_cursor_down(self) -> None:
        self.set_cursor(self.cursor_offset + self.bytes_per_row)

    def _page(self, delta: int) -> None:
        col = self.cursor_offset - self.viewport_offset
        row = self.viewport_offset // self.bytes_per_row
        self.set_top_row(row + delta * self.visible_rows())
        self.set_cursor(self.viewport_offset + col)

    def action_page_up(self) -> None:
        self._page(-1)

    def action_page_down(self) -> None:
        self._page(1)

    def action_go_start(self) -> None:
        self.set_cursor(0)

    def action_go_end(self) -> None:
        self.set_cursor(self.data_size - 1)
