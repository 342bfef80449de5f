"""Generic route screen backed by a query cache collection."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import DataTable, Label, Static

from ...contracts import NegotiationSource
from ...live.messages import CacheKey
from ...navigation.routes import Route
from ...services.error_mapper import map_exception
from ...services.query_cache import QueryCache
from ..logging import log_tui_event
from ..widgets import Breadcrumb, StatusBar

ROUTE_DATA_KEYS: Dict[str, str] = {
    "HOME": CacheKey.METRICS,
    "LOADS": CacheKey.LOADS,
    "LOAD_DETAILS": CacheKey.LOADS,
    "DRIVERS": CacheKey.DRIVERS,
    "DRIVER_DETAILS": CacheKey.DRIVERS,
    "NEGOTIATIONS": CacheKey.NEGOTIATIONS,
    "NEGOTIATION_DETAILS": CacheKey.NEGOTIATIONS,
    "ANALYTICS": CacheKey.METRICS,
    "MOBILE_DASHBOARD": CacheKey.METRICS,
    "MOBILE_LOADS": CacheKey.LOADS,
}
# Write actions and the detail route each one applies to.
ROUTE_ACTIONS: Dict[str, str] = {
    "negotiate_rate": "LOAD_DETAILS",
    "accept_negotiation": "NEGOTIATION_DETAILS",
    "reject_negotiation": "NEGOTIATION_DETAILS",
}
MAX_COLUMNS = 6
MAX_ROWS = 25


def select_records(data: Any, record_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Normalize a collection payload to rows, optionally narrowed to one id."""
    if isinstance(data, Mapping):
        rows = [{"field": key, "value": value} for key, value in data.items()]
    elif isinstance(data, list):
        rows = [row for row in data if isinstance(row, Mapping)]
    else:
        return []
    if record_id is not None:
        rows = [row for row in rows if str(row.get("id")) == str(record_id)]
    return [dict(row) for row in rows]


def table_layout(rows: Sequence[Mapping[str, Any]]) -> Tuple[List[str], List[List[str]]]:
    """Column names from the first row, then stringified cells, both capped."""
    if not rows:
        return [], []
    columns = list(rows[0].keys())[:MAX_COLUMNS]
    cells = [
        ["" if row.get(column) is None else str(row.get(column)) for column in columns]
        for row in rows[:MAX_ROWS]
    ]
    return columns, cells


class RouteScreen(Screen):
    """Shows one route: trail, description, child links and its collection."""

    BINDINGS = [
        Binding("r", "refresh", "Refresh"),
        Binding("g", "negotiate_rate", "Negotiate rate"),
        Binding("y", "accept_negotiation", "Accept"),
        Binding("x", "reject_negotiation", "Reject"),
    ]

    def __init__(
        self,
        route: Route,
        *,
        params: Optional[Mapping[str, str]] = None,
        trail: Sequence[Route] = (),
        children: Sequence[Route] = (),
        cache: Optional[QueryCache] = None,
        backend: Optional[NegotiationSource] = None,
    ) -> None:
        super().__init__()
        self.route = route
        self.params = dict(params or {})
        self._trail = list(trail) or [route]
        self._child_routes = list(children)
        self._query_cache = cache
        self._backend = backend
        self.data_key = ROUTE_DATA_KEYS.get(route.key)
        self._load_task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def compose(self) -> ComposeResult:
        with Container(id="screen-body"):
            yield Breadcrumb(id="breadcrumb")
            yield Label(self._title(), id="screen-title")
            yield Static(self.route.description or "", id="screen-help")
            if self._child_routes:
                links = "  ".join(f"{child.name} ({child.path})" for child in self._child_routes)
                yield Static(f"[dim]Go to:[/dim] {links}", id="route-children")
            yield DataTable(id="records")
            yield Static("", id="records-summary")
            yield StatusBar(id="status-bar")

    def _title(self) -> str:
        record_id = self.params.get("id")
        return f"{self.route.name} #{record_id}" if record_id else self.route.name

    def on_mount(self) -> None:
        self.query_one("#breadcrumb", Breadcrumb).set_routes(self._trail)
        self._sync_connection_badge()
        self.query_one("#status-bar", StatusBar).api_state = getattr(self.app, "api_state", "unknown")
        if self._query_cache is not None and self.data_key:
            self._unsubscribe = self._query_cache.subscribe(self.data_key, self._on_invalidated)
            self._schedule_load()
        else:
            self.query_one("#records-summary", Static).update("")

    async def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._load_task:
            self._load_task.cancel()
            try:
                await self._load_task
            except asyncio.CancelledError:
                pass
            self._load_task = None

    def on_screen_resume(self) -> None:
        # State changes may have arrived while a modal covered this screen.
        self._sync_connection_badge()

    def _sync_connection_badge(self) -> None:
        live_state = getattr(self.app, "live_state", "disconnected")
        for status_bar in self.query(StatusBar):
            status_bar.connection_state = live_state

    def check_action(self, action: str, parameters: Tuple[object, ...]) -> Optional[bool]:
        required = ROUTE_ACTIONS.get(action)
        if required is None:
            return True
        return self.route.key == required and self._backend is not None

    def action_refresh(self) -> None:
        self._schedule_load(force_refresh=True)

    async def action_negotiate_rate(self) -> bool:
        load_id = self._record_id("LOAD_DETAILS")
        if load_id is None:
            return False
        return await self._submit(
            f"Rate negotiation started for load #{load_id}",
            lambda: self._backend.negotiate_rate(load_id),
        )

    async def action_accept_negotiation(self) -> bool:
        return await self._decide_negotiation("accepted")

    async def action_reject_negotiation(self) -> bool:
        return await self._decide_negotiation("rejected")

    async def _decide_negotiation(self, status: str) -> bool:
        negotiation_id = self._record_id("NEGOTIATION_DETAILS")
        if negotiation_id is None:
            return False
        return await self._submit(
            f"Negotiation #{negotiation_id} {status}",
            lambda: self._backend.update_negotiation(negotiation_id, status=status),
        )

    def _record_id(self, route_key: str) -> Optional[int]:
        if self.route.key != route_key or self._backend is None:
            return None
        try:
            return int(self.params.get("id", ""))
        except ValueError:
            return None

    async def _submit(self, done_notice: str, call: Callable[[], Awaitable[Any]]) -> bool:
        status_bar = self.query_one("#status-bar", StatusBar)
        try:
            await call()
        except Exception as exc:
            mapped = map_exception(exc, default_status=503)
            status_bar.api_state = "error"
            status_bar.notice = mapped.hint or mapped.message
            log_tui_event("route_action_failed", route=self.route.key, code=mapped.code)
            return False
        status_bar.api_state = "ok"
        status_bar.notice = done_notice
        log_tui_event("route_action", route=self.route.key, notice=done_notice)
        if self._query_cache is not None:
            self._query_cache.invalidate(CacheKey.NEGOTIATIONS)
        return True

    def _on_invalidated(self, key: str) -> None:
        log_tui_event("route_refetch", route=self.route.key, key=key)
        self._schedule_load()

    def _schedule_load(self, *, force_refresh: bool = False) -> None:
        if self._load_task and not self._load_task.done():
            self._load_task.cancel()
        self._load_task = asyncio.create_task(self._load_records(force_refresh=force_refresh))

    async def _load_records(self, *, force_refresh: bool = False) -> None:
        summary = self.query_one("#records-summary", Static)
        status_bar = self.query_one("#status-bar", StatusBar)
        summary.update("Loading...")
        try:
            data = await self._query_cache.get(self.data_key, force_refresh=force_refresh)
        except Exception as exc:
            mapped = map_exception(exc, default_status=503)
            status_bar.api_state = "error"
            status_bar.notice = mapped.hint or mapped.message
            summary.update(f"Failed to load {self.route.name}: {mapped.message}")
            return
        status_bar.api_state = "ok"
        status_bar.notice = ""
        self._render_records(select_records(data, self.params.get("id")))

    def _render_records(self, rows: List[Dict[str, Any]]) -> None:
        table = self.query_one("#records", DataTable)
        summary = self.query_one("#records-summary", Static)
        columns, cells = table_layout(rows)
        table.clear(columns=True)
        if columns:
            table.add_columns(*columns)
            for cell_row in cells:
                table.add_row(*cell_row)
        if not rows:
            summary.update("No records.")
        elif len(rows) > len(cells):
            summary.update(f"Showing {len(cells)} of {len(rows)} records.")
        else:
            summary.update(f"{len(rows)} records.")
