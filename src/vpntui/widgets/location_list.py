"""Scrolling location list widget."""

from textual import events
from textual.message import Message
from textual.widgets import Static
from rich.text import Text

from vpnlib.navigation import ListState

from ..theme import Theme


class LocationList(Static):
    """Renders the visible window of a ListState; the engine owns the cursor."""

    class ViewportChanged(Message):
        """Message sent when the number of visible rows changes."""

        def __init__(self, height: int) -> None:
            super().__init__()
            self.height = height

    def __init__(self, palette: Theme, **kwargs):
        super().__init__("", **kwargs)
        self.palette = palette

    def on_resize(self, event: events.Resize) -> None:
        self.post_message(self.ViewportChanged(self.content_size.height))

    def show(self, list_state: ListState, searching: bool = False) -> None:
        """Render the rows of ``list_state`` that fall inside the viewport."""
        if not list_state.visible_entries:
            empty = "No matches" if searching else "No locations"
            self.update(Text(empty, style=self.palette.style("items", italic=True), justify="center"))
            return

        text = Text(justify="center")
        for i, (index, entry) in enumerate(list_state.window()):
            if i:
                text.append("\n")
            if index == list_state.cursor:
                text.append(entry.label(), style=self.palette.style("items_selected", bold=True, italic=True))
            else:
                text.append(entry.label(), style=self.palette.style("items"))
        self.update(text)
