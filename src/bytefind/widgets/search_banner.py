"""Green search banner that appears above the hex view."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from bytefind.ui.palette import PALETTE


class SearchBanner(Static):
    """Banner showing the active needle and the current hit."""

    def __init__(self) -> None:
        super().__init__()
        self._needle_text = ""
        self._encoding = ""
        self._position = 0

    def update_search(self, needle_text: str, encoding: str, position: int) -> None:
        """Update banner content; position 0 means no current hit."""
        self._needle_text = needle_text
        self._encoding = encoding
        self._position = position
        self._render_content()

    def clear(self) -> None:
        self._needle_text = ""
        self._position = 0
        self.update("")

    def _render_content(self) -> None:
        text = Text()
        style = f"{PALETTE.search_banner_fg} on {PALETTE.search_banner_bg}"
        bold_style = f"bold {style}"

        text.append("Searching for: ", style=bold_style)
        text.append(f"{self._needle_text} ({self._encoding})", style=style)
        hit = f"position {self._position}" if self._position else "no match"
        text.append(f" | {hit}", style=style)
        text.append("   [n next, p prev, esc clear]", style=bold_style)

        self.update(text)

    def on_click(self, event) -> None:  # type: ignore[no-untyped-def, override]
        """Clear the search when the banner is clicked."""
        if hasattr(self.app, "action_cancel_search"):
            self.app.action_cancel_search()  # type: ignore[attr-defined]
