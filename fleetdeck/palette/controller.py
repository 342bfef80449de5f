"""Keyboard-driven command palette state machine."""

from __future__ import annotations

from collections import OrderedDict
from typing import Callable, List, Optional

import structlog

from ..navigation.commands import Command, CommandRegistry, group_commands

logger = structlog.get_logger(__name__)

# Browser key names mapped onto Textual key names.
KEY_ALIASES = {
    "ArrowDown": "down",
    "ArrowUp": "up",
    "Enter": "enter",
    "Escape": "escape",
}
OPEN_CHORDS = frozenset({"ctrl+k", "meta+k", "super+k"})


class CommandPaletteController:
    """Owns query, filtered results and selection for the command palette.

    ``navigate`` is called with the selected command's target path; it is
    the only side effect of a selection.
    """

    def __init__(self, registry: CommandRegistry, navigate: Callable[[str], None]) -> None:
        self._registry = registry
        self._navigate = navigate
        self.is_open = False
        self.query = ""
        self.selected_index = 0
        self.results: List[Command] = list(registry)

    def open(self) -> None:
        self.is_open = True
        self.set_query("")
        self.selected_index = 0

    def close(self) -> None:
        self.is_open = False

    def set_query(self, text: str) -> None:
        self.query = text or ""
        self.results = self._registry.filter(self.query)
        self._clamp()

    def move_down(self) -> None:
        self.selected_index = min(self.selected_index + 1, len(self.results) - 1)
        self._clamp()

    def move_up(self) -> None:
        self.selected_index = max(self.selected_index - 1, 0)

    @property
    def selected(self) -> Optional[Command]:
        if 0 <= self.selected_index < len(self.results):
            return self.results[self.selected_index]
        return None

    def submit(self) -> Optional[Command]:
        """Navigate to the selected command and close; no-op without a selection."""
        command = self.selected
        if command is None:
            return None
        logger.info("Palette command selected", command_id=command.id, target=command.target_path)
        self.close()
        self._navigate(command.target_path)
        return command

    def grouped_results(self) -> "OrderedDict[str, List[Command]]":
        return group_commands(self.results)

    def handle_key(self, key: str) -> bool:
        """Apply an in-palette key; True means the host must not handle it."""
        if not self.is_open:
            return False
        key = KEY_ALIASES.get(key, key)
        if key == "down":
            self.move_down()
        elif key == "up":
            self.move_up()
        elif key == "enter":
            self.submit()
        elif key == "escape":
            self.close()
        else:
            return False
        return True

    def handle_global_key(self, key: str) -> bool:
        """Global shortcuts: the modifier+k chord opens, Escape closes."""
        key = KEY_ALIASES.get(key, key)
        if key in OPEN_CHORDS:
            self.open()
            return True
        if key == "escape" and self.is_open:
            self.close()
            return True
        return False

    def _clamp(self) -> None:
        upper = len(self.results) - 1
        if upper < 0:
            self.selected_index = 0
        else:
            self.selected_index = max(0, min(self.selected_index, upper))
