"""Navigation state machine for the location list.

``NavigationEngine.handle`` takes a key and the current ``NavigationState``
and returns a new state plus the ``Action`` the caller should carry out. It
never mutates its input and never talks to the VPN tool, so every transition
can be exercised without a terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .keys import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_UP,
    is_printable,
)
from .locations import Catalog, Location

logger = logging.getLogger(__name__)


class InputMode(Enum):
    NORMAL = "normal"
    SEARCH = "search"

    def __str__(self) -> str:
        return self.value.capitalize()


class ActionType(Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    QUIT = "quit"
    NOOP = "noop"


@dataclass(frozen=True)
class Action:
    """Intent emitted by the engine for the dispatcher to execute."""

    type: ActionType
    location: Optional[Location] = None
    location_id: Tuple[str, ...] = ()

    @classmethod
    def connect(cls, location: Location, location_id: Tuple[str, ...]) -> "Action":
        return cls(ActionType.CONNECT, location, location_id)

    @classmethod
    def disconnect(cls) -> "Action":
        return cls(ActionType.DISCONNECT)

    @classmethod
    def quit(cls) -> "Action":
        return cls(ActionType.QUIT)

    @classmethod
    def noop(cls) -> "Action":
        return cls(ActionType.NOOP)

    @property
    def is_noop(self) -> bool:
        return self.type is ActionType.NOOP

    def describe(self) -> str:
        if self.type is ActionType.CONNECT and self.location is not None:
            return f"Connecting to {self.location.name}..."
        if self.type is ActionType.DISCONNECT:
            return "Disconnecting..."
        return ""


@dataclass
class InputState:
    mode: InputMode = InputMode.NORMAL
    search_buffer: str = ""
    pending_sequence: str = ""


@dataclass
class ListState:
    """Filtered view over one level of the catalog.

    Invariants: ``0 <= cursor < len(visible_entries)`` when the list is
    non-empty (``cursor == 0`` otherwise) and, when a viewport height is
    known, ``scroll_offset <= cursor < scroll_offset + viewport_height``.
    """

    visible_entries: List[Location] = field(default_factory=list)
    cursor: int = 0
    scroll_offset: int = 0
    viewport_height: int = 0

    def copy(self) -> "ListState":
        return replace(self, visible_entries=list(self.visible_entries))

    def __len__(self) -> int:
        return len(self.visible_entries)

    def selected(self) -> Optional[Location]:
        if not self.visible_entries:
            return None
        return self.visible_entries[self.cursor]

    def recompute_visible(self, catalog: Catalog, context: Optional[int], query: str) -> None:
        """Rebuild the visible entries for ``context`` filtered by ``query``.

        The cursor stays on the previously selected entry if it survives the
        filter, otherwise cursor and scroll offset go back to the top.
        """
        previous = self.selected()
        source = catalog.countries if context is None else catalog.cities(context)
        needle = query.lower()
        if needle:
            self.visible_entries = [loc for loc in source if needle in loc.name.lower()]
        else:
            self.visible_entries = list(source)

        if previous is not None and previous in self.visible_entries:
            self.cursor = self.visible_entries.index(previous)
        else:
            self.cursor = 0
            self.scroll_offset = 0
        self.ensure_cursor_visible()

    def select(self, entry: Location) -> bool:
        """Move the cursor onto ``entry`` if it is visible."""
        if entry not in self.visible_entries:
            return False
        self.cursor = self.visible_entries.index(entry)
        self.ensure_cursor_visible()
        return True

    def move_cursor(self, delta: int) -> None:
        if not self.visible_entries:
            return
        self.cursor = max(0, min(len(self.visible_entries) - 1, self.cursor + delta))
        self.ensure_cursor_visible()

    def jump_top(self) -> None:
        if not self.visible_entries:
            return
        self.cursor = 0
        self.ensure_cursor_visible()

    def jump_bottom(self) -> None:
        if not self.visible_entries:
            return
        self.cursor = len(self.visible_entries) - 1
        self.ensure_cursor_visible()

    def set_viewport(self, height: int) -> None:
        self.viewport_height = max(0, height)
        self.ensure_cursor_visible()

    def ensure_cursor_visible(self, viewport_height: Optional[int] = None) -> None:
        height = self.viewport_height if viewport_height is None else viewport_height
        count = len(self.visible_entries)
        if height <= 0 or count <= height:
            self.scroll_offset = 0
            return
        if self.cursor < self.scroll_offset:
            self.scroll_offset = self.cursor
        elif self.cursor >= self.scroll_offset + height:
            self.scroll_offset = self.cursor - height + 1
        self.scroll_offset = max(0, min(self.scroll_offset, count - height))

    def window(self) -> List[Tuple[int, Location]]:
        """Entries inside the viewport, paired with their list index."""
        end = len(self.visible_entries)
        if self.viewport_height > 0:
            end = min(end, self.scroll_offset + self.viewport_height)
        return [(i, self.visible_entries[i]) for i in range(self.scroll_offset, end)]


@dataclass
class NavigationState:
    """Everything the engine reads and writes for one keystroke.

    ``context`` is ``None`` at the country level, or the catalog index of the
    country whose cities are shown. The status fields are for display only
    and never influence navigation.
    """

    input_state: InputState = field(default_factory=InputState)
    list_state: ListState = field(default_factory=ListState)
    context: Optional[int] = None
    status_message: str = ""
    pending_action: Optional[Action] = None
    connected: bool = False

    @classmethod
    def initial(cls, catalog: Catalog, viewport_height: int = 0, connected: bool = False) -> "NavigationState":
        list_state = ListState(viewport_height=viewport_height)
        list_state.recompute_visible(catalog, None, "")
        return cls(list_state=list_state, connected=connected)

    def copy(self) -> "NavigationState":
        return replace(self, input_state=replace(self.input_state), list_state=self.list_state.copy())

    @property
    def mode(self) -> InputMode:
        return self.input_state.mode


# Multi-key commands, matched before single keys in normal mode.
SEQUENCES: Dict[str, str] = {
    "gg": "jump_top",
}

NORMAL_KEYMAP: Dict[str, str] = {
    "k": "move_up",
    "K": "move_up",
    KEY_UP: "move_up",
    "j": "move_down",
    "J": "move_down",
    KEY_DOWN: "move_down",
    "G": "jump_bottom",
    KEY_ENTER: "select",
    "D": "disconnect",
    "i": "search",
    "/": "search",
    "q": "quit",
    KEY_ESCAPE: "quit",
    "h": "back",
    KEY_LEFT: "back",
    "l": "open",
    KEY_RIGHT: "open",
}


class NavigationEngine:
    """Interprets keystrokes over a fixed catalog."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self._commands: Dict[str, Callable[[NavigationState], Action]] = {
            "move_up": lambda s: self._move(s, -1),
            "move_down": lambda s: self._move(s, 1),
            "jump_top": self._jump_top,
            "jump_bottom": self._jump_bottom,
            "select": self._select,
            "disconnect": lambda s: Action.disconnect(),
            "search": self._enter_search,
            "quit": lambda s: Action.quit(),
            "back": self._back,
            "open": self._open,
        }

    def initial_state(self, viewport_height: int = 0, connected: bool = False) -> NavigationState:
        return NavigationState.initial(self.catalog, viewport_height, connected)

    def handle(self, key: str, state: NavigationState) -> Tuple[NavigationState, Action]:
        """Apply ``key`` to ``state`` and return the new state and action."""
        new_state = state.copy()
        if new_state.input_state.mode is InputMode.SEARCH:
            action = self._handle_search(key, new_state)
        else:
            action = self._handle_normal(key, new_state)
        if not action.is_noop:
            logger.debug("Key %r -> %s", key, action.type.value)
        return new_state, action

    def resize(self, state: NavigationState, viewport_height: int) -> NavigationState:
        """Return ``state`` with the list scrolled to fit a new viewport height."""
        new_state = state.copy()
        new_state.list_state.set_viewport(viewport_height)
        return new_state

    def breadcrumb(self, state: NavigationState) -> str:
        if state.context is None:
            return "Countries"
        return f"Countries > {self.catalog.countries[state.context].name}"

    # Normal mode

    def _handle_normal(self, key: str, state: NavigationState) -> Action:
        input_state = state.input_state
        candidate = input_state.pending_sequence + key

        if candidate in SEQUENCES:
            input_state.pending_sequence = ""
            return self._commands[SEQUENCES[candidate]](state)

        if any(seq.startswith(candidate) for seq in SEQUENCES):
            input_state.pending_sequence = candidate
            return Action.noop()

        # Not part of a sequence: drop whatever was pending and treat the key alone
        input_state.pending_sequence = ""
        command = NORMAL_KEYMAP.get(key)
        if command is None:
            return Action.noop()
        return self._commands[command](state)

    def _move(self, state: NavigationState, delta: int) -> Action:
        state.list_state.move_cursor(delta)
        return Action.noop()

    def _jump_top(self, state: NavigationState) -> Action:
        state.list_state.jump_top()
        return Action.noop()

    def _jump_bottom(self, state: NavigationState) -> Action:
        state.list_state.jump_bottom()
        return Action.noop()

    def _select(self, state: NavigationState) -> Action:
        entry = state.list_state.selected()
        if entry is None:
            return Action.noop()

        if self._can_open(entry, state):
            self._push_context(entry, state)
            return Action.noop()

        action = Action.connect(entry, self.catalog.location_id(entry))
        if state.context is not None:
            self._pop_context(state)
        return action

    def _open(self, state: NavigationState) -> Action:
        entry = state.list_state.selected()
        if entry is not None and self._can_open(entry, state):
            self._push_context(entry, state)
        return Action.noop()

    def _can_open(self, entry: Location, state: NavigationState) -> bool:
        return entry.is_country and entry.has_children and state.context is None

    def _push_context(self, entry: Location, state: NavigationState) -> None:
        index = self.catalog.index_of(entry)
        state.context = index
        state.input_state.search_buffer = ""
        state.list_state.recompute_visible(self.catalog, index, "")

    def _enter_search(self, state: NavigationState) -> Action:
        state.input_state.mode = InputMode.SEARCH
        return Action.noop()

    def _back(self, state: NavigationState) -> Action:
        if state.context is not None:
            self._pop_context(state)
        return Action.noop()

    def _pop_context(self, state: NavigationState) -> None:
        index = state.context
        state.context = None
        state.input_state.search_buffer = ""
        state.list_state.recompute_visible(self.catalog, None, "")
        state.list_state.select(self.catalog.countries[index])

    # Search mode

    def _handle_search(self, key: str, state: NavigationState) -> Action:
        input_state = state.input_state
        if key == KEY_ENTER:
            input_state.mode = InputMode.NORMAL
        elif key == KEY_ESCAPE:
            input_state.mode = InputMode.NORMAL
            input_state.search_buffer = ""
        elif key == KEY_BACKSPACE:
            if not input_state.search_buffer:
                return Action.noop()
            input_state.search_buffer = input_state.search_buffer[:-1]
        elif is_printable(key):
            input_state.search_buffer += key
        else:
            return Action.noop()

        state.list_state.recompute_visible(self.catalog, state.context, input_state.search_buffer)
        return Action.noop()


def begin_action(state: NavigationState, action: Action) -> NavigationState:
    """Mark ``action`` as running; only the status fields change."""
    return replace(state, pending_action=action, status_message=action.describe())


def complete_action(state: NavigationState, message: str, connected: Optional[bool] = None) -> NavigationState:
    """Record a dispatcher completion notice without touching navigation."""
    return replace(
        state,
        pending_action=None,
        status_message=message,
        connected=state.connected if connected is None else connected,
    )
