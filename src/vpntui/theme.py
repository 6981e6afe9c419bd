"""Map configured color roles to Rich styles and Textual colors."""

from __future__ import annotations

from rich.color import Color as RichColor
from rich.style import Style
from textual.color import Color

from vpnlib.config import Colors


class Theme:
    def __init__(self, colors: Colors) -> None:
        self.colors = colors

    def style(self, role: str, bold: bool = False, italic: bool = False) -> Style:
        return Style(color=getattr(self.colors, role), bold=bold, italic=italic)

    def background(self) -> Color:
        triplet = RichColor.parse(self.colors.background).get_truecolor()
        return Color(triplet.red, triplet.green, triplet.blue)
