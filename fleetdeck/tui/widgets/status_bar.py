"""Status bar widget showing live channel and API health."""

from __future__ import annotations

from textual.reactive import reactive
from textual.widgets import Static

_PALETTE = {
    "connected": "green",
    "ok": "green",
    "connecting": "yellow",
    "stale": "yellow",
    "disconnected": "grey66",
    "error": "red",
}


def _badge(label: str, state: str) -> str:
    color = _PALETTE.get(state, "grey66")
    return f"[{color}]●[/{color}] {label}: {state}"


class StatusBar(Static):
    """Compact badges for the live channel, the REST API and the last notice."""

    connection_state = reactive("disconnected")
    api_state = reactive("unknown")
    notice = reactive("")

    def _render_line(self) -> str:
        parts = [
            _badge("Live", self.connection_state),
            _badge("API", self.api_state),
        ]
        if self.notice:
            parts.append(f"[dim]{self.notice}[/dim]")
        return "   ".join(parts)

    def on_mount(self) -> None:
        self.update(self._render_line())

    def watch_connection_state(self) -> None:
        self.update(self._render_line())

    def watch_api_state(self) -> None:
        self.update(self._render_line())

    def watch_notice(self) -> None:
        self.update(self._render_line())
