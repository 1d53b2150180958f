from __future__ import annotations

import logging
import os

from rich.text import Text
from textual.app import App, ComposeResult
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, Label, Static

from bytefind.core.buffer import Buffer, Encoding
from bytefind.core.cursor import byte_offset, position_at
from bytefind.core.errors import MalformedText
from bytefind.core.io import MappedFile
from bytefind.core.patterns import parse_pattern
from bytefind.core.rsearch import rfind
from bytefind.core.search import find
from bytefind.ui.palette import PALETTE
from bytefind.widgets.hex_view import HexView
from bytefind.widgets.search_banner import SearchBanner

log = logging.getLogger(__name__)


class BytefindApp(App):
    """Textual hex browser with find next / find previous."""

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("/", "open_search", "Search"),
        ("n", "search_next", "Next"),
        ("p", "search_prev", "Prev"),
        ("escape", "cancel_search", "Clear"),
        ("?", "open_help", "Help"),
    ]

    def __init__(self, path: str, *, encoding: Encoding = Encoding.RAW) -> None:
        super().__init__()
        self._path = path
        self._encoding = encoding
        self._file: MappedFile | None = None
        self._haystack: Buffer | None = None
        self.hex_view: HexView | None = None
        self.title = f"bytefind: {os.path.basename(path)}"
        self.status = Static(id="status")
        self.banner = SearchBanner()
        self._last_search: tuple[str, Buffer] | None = None  # (input text, needle)
        self._hit: int = 0  # position of the current hit, 0 if none
        self._status_hint: str = ""

    def compose(self) -> ComposeResult:  # noqa: D401 - Textual API
        # Delay opening until compose to give clear UI errors
        try:
            self._file = MappedFile(self._path)
        except FileNotFoundError:
            yield Static(f"Error: file not found: {self._path}")
            return

        self._haystack = self._file.buffer(self._encoding)
        self.hex_view = HexView(self._haystack)
        yield Header(show_clock=False, id="header")
        yield self.banner
        yield self.hex_view
        yield self.status
        yield Footer()

    def on_mount(self) -> None:
        self.update_status()
        if self.hex_view is not None:
            self.set_focus(self.hex_view)

    def on_unmount(self) -> None:
        if self._file is not None:
            self._file.close()

    # ---- Search ----
    def action_open_search(self) -> None:
        self.push_screen(SearchScreen(), self._search_submit)

    def action_cancel_search(self) -> None:
        self._last_search = None
        self._hit = 0
        self.banner.clear()
        if self.hex_view is not None:
            self.hex_view.clear_match()
        self.set_status_hint("")

    def action_search_next(self) -> None:
        if self._last_search is None or self.hex_view is None or self._haystack is None:
            return
        self._run_search(forward=True, start=self._hit + 1 if self._hit else None)

    def action_search_prev(self) -> None:
        if self._last_search is None or self.hex_view is None or self._haystack is None:
            return
        self._run_search(forward=False, start=self._hit - 1 if self._hit else None)

    def search(self, text: str, *, forward: bool = True) -> int:
        """Set the needle and jump to the first hit from the cursor. Returns the position."""
        if self._haystack is None:
            return 0
        _kind, needle = parse_pattern(text, self._encoding)
        if needle is None:
            self.set_status_hint("[invalid pattern]")
            return 0
        self._last_search = (text, needle)
        self._hit = 0
        return self._run_search(forward=forward, start=None)

    def _run_search(self, *, forward: bool, start: int | None) -> int:
        """Search from `start`, or from the cursor position when it is None."""
        assert self._last_search is not None and self._haystack is not None
        text, needle = self._last_search
        try:
            if start is None:
                start = self._cursor_position()
            if forward:
                pos = find(self._haystack, needle, start)
            else:
                pos = rfind(self._haystack, needle, start)
        except MalformedText as e:
            log.debug("search aborted: %s", e)
            self.set_status_hint(f"[{e}]")
            return 0

        if pos:
            self._hit = pos
            if self.hex_view is not None:
                self.hex_view.set_match(byte_offset(self._haystack, pos), needle.size)
            self._status_hint = ""
        else:
            self._status_hint = "[no further match]" if self._hit else "[no match]"
        self.banner.update_search(text, self._encoding.value, self._hit)
        self.update_status()
        return pos

    def _cursor_position(self) -> int:
        if self.hex_view is None or self._haystack is None:
            return 1
        return position_at(self._haystack, self.hex_view.cursor_offset)

    def _search_submit(self, value: str | None) -> None:
        if not value:
            return
        self.search(value)

    # ---- Status ----
    def on_hex_cursor_moved(self, offset: int) -> None:
        self.update_status()

    def set_status_hint(self, text: str | None) -> None:
        self._status_hint = text or ""
        self.update_status()

    def update_status(self) -> None:
        if self.hex_view is None or self._haystack is None:
            self.status.update(Text("bytefind"))
            return
        name = os.path.basename(self._path)
        cur = self.hex_view.cursor_offset
        data = self._haystack.data
        b_hex = f"{data[cur]:02X}" if cur < len(data) else "--"
        text = Text()
        text.append(
            f"{name} | {len(data)} bytes | {self._encoding.value} | "
            f"cursor: 0x{cur:08X} [{b_hex}]",
            style=PALETTE.status_fg,
        )
        if self._hit:
            text.append(f" | hit @ {self._hit}", style=PALETTE.search_hit_fg)
        if self._status_hint:
            text.append(f"  {self._status_hint}", style=PALETTE.status_error)
        self.status.update(text)

    def action_open_help(self) -> None:
        self.push_screen(HelpScreen())


# ---- Simple modals ----


class SearchScreen(ModalScreen[str | None]):
    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Label("Search (text, or hex bytes e.g. DE AD BE EF):")
        self._input = Input(placeholder="pattern")
        yield self._input

    def on_mount(self) -> None:  # type: ignore[override]
        self.set_focus(self._input)

    def on_input_submitted(self, event: Input.Submitted) -> None:  # type: ignore[override]
        self.dismiss(event.value)

    def on_key(self, event) -> None:  # type: ignore[override]
        if event.key == "escape":
            self.dismiss(None)


class HelpScreen(ModalScreen[None]):
    def compose(self) -> ComposeResult:  # type: ignore[override]
        text = (
            "Navigation: h/j/k/l, arrows, PgUp/PgDn, g start, G end\n"
            "Search: / to open, n next match, p previous match, Esc clear\n"
            "Positions are bytes for raw files and codepoints for UTF-8/UTF-16\n"
            "Press any key to close"
        )
        yield Static(text)

    def on_key(self, event) -> None:  # type: ignore[override]
        self.dismiss(None)
