"""Mode line showing the input mode, search text and key hints."""

from textual.widgets import Static
from rich.style import Style
from rich.text import Text

from vpnlib.navigation import InputMode, InputState

from ..theme import Theme

NORMAL_HINTS = [
    ("Select", "<Enter>"),
    ("Down", "<J | Down>"),
    ("Up", "<K | Up>"),
    ("Top", "<gg>"),
    ("Bottom", "<G>"),
    ("Back", "<H | Left>"),
    ("Open", "<L | Right>"),
    ("Search", "</ | I>"),
    ("Disconnect", "<D>"),
    ("Quit", "<Q | Esc>"),
]

BOLD = Style(bold=True)

SEARCH_HINTS = [
    ("Apply", "<Enter>"),
    ("Cancel", "<Esc>"),
    ("Delete", "<Backspace>"),
]


class ModeLine(Static):
    """Single line at the bottom of the screen."""

    def __init__(self, palette: Theme, **kwargs):
        super().__init__("", **kwargs)
        self.palette = palette

    def show(self, input_state: InputState) -> None:
        if input_state.mode is InputMode.SEARCH:
            style = self.palette.style("search_mode")
            text = Text(f" Search: {input_state.search_buffer}▏| ", style=style)
            hints = SEARCH_HINTS
        else:
            style = self.palette.style("normal_mode")
            text = Text(f" {input_state.mode} | ", style=style)
            if input_state.search_buffer:
                text.append(f"Filter: {input_state.search_buffer} | ", style=style)
            hints = NORMAL_HINTS

        for label, keys in hints:
            text.append(f" {label} ", style=style + BOLD)
            text.append(keys, style=style)
        self.update(text)
