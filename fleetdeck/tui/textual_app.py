"""Textual-based dashboard runtime for FleetDeck."""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..contracts import DashboardDataSource
from ..live.client import ConnectionState, LiveChannelClient
from ..live.invalidation import InvalidationRouter
from ..navigation.commands import CommandRegistry, command_registry
from ..navigation.routes import Route, RouteTable, route_table
from ..palette.controller import CommandPaletteController
from ..services.query_cache import QueryCache
from .logging import log_tui_event
from .screens import CommandPaletteScreen, RouteScreen
from .widgets import StatusBar


class FleetDeckApp(App[None]):
    """Interactive dashboard with route navigation, palette and live refresh."""

    CSS = """
    #screen-body {
        padding: 1 2;
    }

    #screen-title {
        text-style: bold;
        color: cyan;
        margin-bottom: 1;
    }

    #screen-help {
        color: $text-muted;
    }

    CommandPaletteScreen {
        align: center top;
    }

    CommandPaletteScreen #screen-body {
        width: 80;
        height: auto;
        margin-top: 2;
        border: round $accent;
        background: $surface;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+k", "open_command_palette", "Palette"),
        Binding("h", "go('HOME')", "Home"),
        Binding("l", "go('LOADS')", "Loads"),
        Binding("d", "go('DRIVERS')", "Drivers"),
        Binding("n", "go('NEGOTIATIONS')", "Negotiations"),
        Binding("a", "go('ANALYTICS')", "Analytics"),
        Binding("s", "go('SETTINGS')", "Settings"),
    ]

    def __init__(
        self,
        *,
        api_client: Optional[DashboardDataSource] = None,
        cache: Optional[QueryCache] = None,
        live_client: Optional[LiveChannelClient] = None,
        routes: Optional[RouteTable] = None,
        commands: Optional[CommandRegistry] = None,
        initial_path: str = "/",
    ) -> None:
        super().__init__()
        if api_client is None:
            from ..services.dashboard_api import DashboardApiClient

            api_client = DashboardApiClient()
        self._api_client = api_client
        self._query_cache = cache if cache is not None else QueryCache(api_client.fetch)
        self._route_table = routes if routes is not None else route_table
        self._command_registry = commands if commands is not None else command_registry
        if live_client is None:
            live_client = LiveChannelClient(router=InvalidationRouter(self._query_cache))
        self._live_client = live_client
        self._palette_controller = CommandPaletteController(
            self._command_registry, self._request_navigation
        )
        self._initial_path = initial_path
        self._unsubscribe_live: Optional[Callable[[], None]] = None
        self._health_task: Optional[asyncio.Task] = None
        self.live_state = live_client.state.value
        self.api_state = "unknown"
        self.current_path = initial_path

    @property
    def palette(self) -> CommandPaletteController:
        return self._palette_controller

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Footer()

    def on_mount(self) -> None:
        warning = self._startup_self_check()
        if warning:
            self.notify(warning, title="Startup Check", severity="warning")
        self._unsubscribe_live = self._live_client.add_state_listener(self._on_live_state)
        self.navigate(self._initial_path)
        self._live_client.connect()
        self._health_task = asyncio.create_task(self._check_api_health())

    async def on_unmount(self) -> None:
        if self._unsubscribe_live is not None:
            self._unsubscribe_live()
            self._unsubscribe_live = None
        if self._health_task is not None and not self._health_task.done():
            self._health_task.cancel()
            try:
                await self._health_task
            except asyncio.CancelledError:
                pass
        self._health_task = None
        await self._live_client.disconnect()
        await self._api_client.close()

    def _startup_self_check(self) -> str:
        """Report palette commands whose targets no route serves."""
        unresolved = self._command_registry.unresolved_targets(self._route_table)
        if not unresolved:
            return ""
        targets = ", ".join(f"{command.id} -> {command.target_path}" for command in unresolved)
        return f"Commands with unknown targets: {targets}"

    def _status_bars(self) -> List[StatusBar]:
        return [bar for screen in self.screen_stack for bar in screen.query(StatusBar)]

    def _on_live_state(self, state: ConnectionState) -> None:
        self.live_state = state.value
        log_tui_event("live_state", state=state.value, attempts=self._live_client.reconnect_attempts)
        for status_bar in self._status_bars():
            status_bar.connection_state = state.value

    async def _check_api_health(self) -> None:
        healthy = await self._api_client.health_check()
        self.api_state = "ok" if healthy else "error"
        log_tui_event("api_health", state=self.api_state)
        for status_bar in self._status_bars():
            status_bar.api_state = self.api_state

    def build_screen(self, path: str) -> RouteScreen:
        route = self._route_table.resolve_or_not_found(path)
        params = self._route_table.extract_params(route, path) if route.is_parametric else {}
        return RouteScreen(
            route,
            params=params,
            trail=self._route_table.breadcrumb(route.key),
            children=[child for child in self._route_table.list_children(route.key) if not child.hidden],
            cache=self._query_cache,
            backend=self._api_client,
        )

    def navigate(self, path: str) -> Route:
        """Show the screen for ``path``; unknown paths show the not-found route."""
        screen = self.build_screen(path)
        log_tui_event("navigate", path=path, route=screen.route.key, params=screen.params)
        self.current_path = path
        if len(self.screen_stack) > 1:
            self.pop_screen()
        self.push_screen(screen)
        return screen.route

    def _request_navigation(self, path: str) -> None:
        # Runs after the palette has been dismissed.
        self.call_later(self.navigate, path)

    def action_go(self, route_key: str) -> None:
        self.navigate(self._route_table.build(route_key))

    def action_open_command_palette(self) -> None:
        if self._palette_controller.is_open:
            return
        self._palette_controller.handle_global_key("ctrl+k")
        log_tui_event("palette_opened", path=self.current_path)
        self.push_screen(CommandPaletteScreen(self._palette_controller))
