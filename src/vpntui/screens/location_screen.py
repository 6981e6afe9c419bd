"""Location browser screen: list, status and connection output."""

from functools import partial
import logging

from textual import events
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Header, Static
from textual.worker import Worker, WorkerState
from rich.text import Text

from vpnlib.dispatch import DispatchResult
from vpnlib.keys import KEY_BACKSPACE, KEY_DOWN, KEY_ENTER, KEY_ESCAPE, KEY_LEFT, KEY_RIGHT, KEY_UP
from vpnlib.navigation import Action, ActionType, begin_action, complete_action

from ..widgets.location_list import LocationList
from ..widgets.mode_line import ModeLine

logger = logging.getLogger(__name__)

# Textual key names that differ from the engine's
TEXTUAL_KEYS = {
    "up": KEY_UP,
    "down": KEY_DOWN,
    "left": KEY_LEFT,
    "right": KEY_RIGHT,
    "enter": KEY_ENTER,
    "backspace": KEY_BACKSPACE,
    "escape": KEY_ESCAPE,
}


def normalize_key(event: events.Key) -> str:
    """Translate a Textual key event into an engine key name."""
    if event.key in TEXTUAL_KEYS:
        return TEXTUAL_KEYS[event.key]
    if event.character and len(event.character) == 1 and event.character.isprintable():
        return event.character
    return event.key


class LocationScreen(Screen):
    """Screen for browsing locations and connecting to them."""

    def compose(self):
        """Compose the screen layout."""
        theme = self.app.vpn_theme
        with Vertical():
            yield Header()
            yield Static("", id="connection-status")
            yield Static("", id="screen-title")
            yield LocationList(theme, id="location-list")
            yield Static("", id="connection-output")
            yield ModeLine(theme, id="mode-line")

    def on_mount(self) -> None:
        """Initialize screen components after mount."""
        self.styles.background = self.app.vpn_theme.background()
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        """Feed every key to the navigation engine."""
        key = normalize_key(event)
        event.prevent_default()
        event.stop()

        state, action = self.app.engine.handle(key, self.app.nav_state)
        self.app.nav_state = state
        self.perform(action)
        self.refresh_view()

    def on_location_list_viewport_changed(self, message: LocationList.ViewportChanged) -> None:
        """Keep the cursor on screen when the list is resized."""
        self.app.nav_state = self.app.engine.resize(self.app.nav_state, message.height)
        self.refresh_view()

    def perform(self, action: Action) -> None:
        """Carry out an action emitted by the engine."""
        if action.type is ActionType.QUIT:
            logger.info("Quit requested")
            self.app.exit()
        elif action.type in (ActionType.CONNECT, ActionType.DISCONNECT):
            logger.info("Dispatching %s %s", action.type.value, "/".join(action.location_id))
            self.app.nav_state = begin_action(self.app.nav_state, action)
            self.run_worker(partial(self.app.dispatcher.dispatch, action), name="dispatch", thread=True)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Handle dispatcher completion."""
        if event.worker.name != "dispatch":
            return

        if event.state == WorkerState.SUCCESS:
            result: DispatchResult = event.worker.result
            self.app.nav_state = complete_action(self.app.nav_state, result.message, result.connected)
            self.show_output(result.output)
            self.refresh_view()

        elif event.state == WorkerState.ERROR:
            error_msg = f"Worker failed: {str(event.worker.error)}"
            logger.error(error_msg)
            self.app.nav_state = complete_action(self.app.nav_state, error_msg)
            self.refresh_view()

    def show_output(self, lines) -> None:
        theme = self.app.vpn_theme
        output = self.query_one("#connection-output", Static)
        output.update(Text("\n".join(lines), style=theme.style("connection_output"), justify="center"))

    def refresh_view(self) -> None:
        """Render the current navigation state."""
        state = self.app.nav_state
        theme = self.app.vpn_theme

        if state.connected:
            status = Text("Connected", style=theme.style("connected", bold=True), justify="center")
        else:
            status = Text("Disconnected", style=theme.style("disconnected", bold=True), justify="center")
        if state.status_message:
            status.append(f"  {state.status_message}", style=theme.style("connection_output"))
        self.query_one("#connection-status", Static).update(status)

        self.query_one("#screen-title", Static).update(
            Text(self.app.engine.breadcrumb(state), style=theme.style("items", bold=True), justify="center")
        )
        self.query_one("#location-list", LocationList).show(
            state.list_state, searching=bool(state.input_state.search_buffer)
        )
        self.query_one("#mode-line", ModeLine).show(state.input_state)
