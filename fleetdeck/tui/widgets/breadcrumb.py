"""Breadcrumb widget for route screens."""

from __future__ import annotations

from typing import Sequence

from textual.reactive import reactive
from textual.widgets import Static

from ...navigation.routes import Route


class Breadcrumb(Static):
    """Parent-chain trail for the current route."""

    trail = reactive("Dashboard")

    def set_routes(self, routes: Sequence[Route]) -> None:
        self.trail = " > ".join(route.name for route in routes) or "Dashboard"

    def watch_trail(self, trail: str) -> None:
        self.update(f"[dim]{trail}[/dim]")

    def on_mount(self) -> None:
        self.update(f"[dim]{self.trail}[/dim]")
