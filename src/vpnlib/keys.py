"""Key names understood by the navigation engine.

Printable keys are passed as the character itself; everything else uses one
of the names below. Front-ends translate their own key events to these.
"""

from __future__ import annotations

KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_ENTER = "enter"
KEY_BACKSPACE = "backspace"
KEY_ESCAPE = "escape"


def is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()
