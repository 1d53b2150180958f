from __future__ import annotations

from dataclasses import dataclass

@dataclass(frozen=True)
class Palette:
    status_fg: str
    status_dim: str
    status_error: str
    hex_offset_fg: str
    hex_byte_fg: str
    hex_zero_fg: str
    hex_cursor_bg: str
    hex_selected_fg: str
    ascii_fg: str
    # Search roles
    search_banner_bg: str
    search_banner_fg: str
    search_hit_fg: str
    search_hit_bg: str

DEFAULT = Palette(
    status_fg="#d8dee9",
    status_dim="#8892a0",
    status_error="#ff5555",
    hex_offset_fg="#8892a0",
    hex_byte_fg="#d8dee9",
    hex_zero_fg="#6b7280",
    hex_cursor_bg="#b36b00",
    hex_selected_fg="#ffffff",
    ascii_fg="#d7ba7d",
    search_banner_bg="#10b981",
    search_banner_fg="#ffffff",
    search_hit_fg="#10b981",
    search_hit_bg="#1e3a5f",
)

# Selected palette
PALETTE = DEFAULT
