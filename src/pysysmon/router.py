"""Key event routing for pysysmon."""

from enum import Enum


class Action(Enum):
    """State transitions a key press can request."""

    QUIT = "quit"
    NEXT_TAB = "next_tab"
    PREV_TAB = "prev_tab"
    MANUAL_REFRESH = "refresh"
    NOOP = "noop"


# Key names follow Textual's naming
KEYMAP: dict[str, Action] = {
    "q": Action.QUIT,
    "ctrl+c": Action.QUIT,
    "right": Action.NEXT_TAB,
    "l": Action.NEXT_TAB,
    "tab": Action.NEXT_TAB,
    "left": Action.PREV_TAB,
    "h": Action.PREV_TAB,
    "shift+tab": Action.PREV_TAB,
    "r": Action.MANUAL_REFRESH,
}


class InputRouter:
    """Maps raw key names to exactly one Action."""

    def __init__(self, keymap: dict[str, Action] | None = None) -> None:
        self._keymap = dict(KEYMAP if keymap is None else keymap)

    @property
    def keys(self) -> list[str]:
        """Every key that maps to something other than NOOP."""
        return list(self._keymap)

    def route(self, key: str) -> Action:
        return self._keymap.get(key, Action.NOOP)

    def keys_for(self, action: Action) -> list[str]:
        return [key for key, mapped in self._keymap.items() if mapped is action]
