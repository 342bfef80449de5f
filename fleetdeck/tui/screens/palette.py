"""Modal command palette bound to the palette controller."""

from __future__ import annotations

from typing import List

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, Label, Static

from ...palette.controller import CommandPaletteController
from ..logging import log_tui_event

EMPTY_HINT = 'No commands found. Try searching for "loads", "drivers", or "create".'
FOOTER_HINT = "Press up/down to navigate, Enter to select, Esc to close."


def render_results(controller: CommandPaletteController) -> str:
    """Grouped result listing with the selected row highlighted."""
    if not controller.results:
        return f"[dim]{EMPTY_HINT}[/dim]"
    lines: List[str] = []
    for group, commands in controller.grouped_results().items():
        lines.append(f"[bold]{group.upper()}[/bold]")
        for command in commands:
            flat_index = controller.results.index(command)
            badges = " ".join(escape(f"[{keyword}]") for keyword in command.keywords[:2])
            line = (
                f"  {escape(command.title)}  [dim]{escape(command.description)}[/dim]  {badges}"
            )
            if flat_index == controller.selected_index:
                line = f"[reverse]{line}[/reverse]"
            lines.append(line)
        lines.append("")
    return "\n".join(lines).rstrip()


class CommandPaletteScreen(ModalScreen):
    """Search box over the command registry; keys are routed to the controller."""

    BINDINGS = [
        Binding("down", "palette_key('down')", "Next", show=False, priority=True),
        Binding("up", "palette_key('up')", "Previous", show=False, priority=True),
        Binding("enter", "palette_key('enter')", "Select", show=False, priority=True),
        Binding("escape", "palette_key('escape')", "Close", show=False, priority=True),
    ]

    def __init__(self, controller: CommandPaletteController) -> None:
        super().__init__()
        self._controller = controller

    def compose(self) -> ComposeResult:
        with Container(id="screen-body"):
            yield Label("Quick Command", id="screen-title")
            yield Input(placeholder="Search commands or navigate...", id="palette-query")
            yield Static(render_results(self._controller), id="palette-results")
            yield Static(f"[dim]{FOOTER_HINT}[/dim]", id="screen-help")

    def on_mount(self) -> None:
        self.query_one("#palette-query", Input).focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "palette-query":
            self._controller.set_query(event.value)
            self._refresh_results()

    def action_palette_key(self, key: str) -> None:
        selected = self._controller.selected if key == "enter" else None
        self._controller.handle_key(key)
        if not self._controller.is_open:
            log_tui_event(
                "palette_closed",
                selected=selected.id if selected else None,
                query=self._controller.query,
            )
            self.dismiss(selected)
            return
        self._refresh_results()

    def _refresh_results(self) -> None:
        self.query_one("#palette-results", Static).update(render_results(self._controller))
