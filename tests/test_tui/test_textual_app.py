"""FleetDeck app wiring: screen resolution, startup check and palette flow."""

from typing import Dict, List

import pytest
from textual.widgets import DataTable

from fleetdeck.live.client import ConnectionState, LiveChannelClient
from fleetdeck.live.invalidation import InvalidationRouter
from fleetdeck.navigation.commands import Command, CommandRegistry
from fleetdeck.services.query_cache import QueryCache
from fleetdeck.tui.textual_app import FleetDeckApp
from fleetdeck.tui.widgets import StatusBar


class FakeApi:
    def __init__(self, healthy=True):
        self.fetched: List[str] = []
        self.counts: Dict[str, int] = {}
        self.healthy = healthy
        self.closed = False

    async def fetch(self, key):
        self.fetched.append(key)
        self.counts[key] = self.counts.get(key, 0) + 1
        # One more row on every fetch so re-renders are observable.
        return [{"id": 40 + index, "status": "available"} for index in range(self.counts[key])]

    async def negotiate_rate(self, load_id):
        return {"loadId": load_id}

    async def update_negotiation(self, negotiation_id, *, status, final_rate=None):
        return {"id": negotiation_id, "status": status}

    async def health_check(self):
        return self.healthy

    async def close(self):
        self.closed = True


def _app(make_transport, commands=None, initial_path="/", connections=(), healthy=True):
    api = FakeApi(healthy=healthy)
    cache = QueryCache(api.fetch)
    live = LiveChannelClient(
        "ws://testserver/ws",
        transport=make_transport(list(connections)),
        router=InvalidationRouter(cache),
        reconnect_interval=10.0,
        max_reconnect_attempts=0,
    )
    app = FleetDeckApp(
        api_client=api,
        cache=cache,
        live_client=live,
        commands=commands,
        initial_path=initial_path,
    )
    return app, api, live


def _status_bar(screen) -> StatusBar:
    return screen.query_one("#status-bar", StatusBar)


def test_build_screen_extracts_params_and_trail(make_transport):
    app, _, _ = _app(make_transport)

    screen = app.build_screen("/loads/42")

    assert screen.route.key == "LOAD_DETAILS"
    assert screen.params == {"id": "42"}
    assert [route.key for route in screen._trail] == ["LOADS", "LOAD_DETAILS"]
    assert screen.data_key == "/api/loads"


def test_build_screen_falls_back_to_not_found(make_transport):
    app, _, _ = _app(make_transport)

    screen = app.build_screen("/nope/really")

    assert screen.route.key == "NOT_FOUND"
    assert screen.data_key is None


def test_build_screen_lists_visible_children_only(make_transport):
    app, _, _ = _app(make_transport)

    screen = app.build_screen("/loads")

    assert [route.key for route in screen._child_routes] == ["CREATE_LOAD"]


def test_startup_self_check_reports_dangling_commands(make_transport):
    broken = CommandRegistry(
        [
            Command(
                id="fuel",
                title="Fuel Prices",
                description="Diesel price board",
                target_path="/fuel",
                icon="Fuel",
                keywords=("diesel",),
                group="Navigation",
            )
        ]
    )
    app, _, _ = _app(make_transport, commands=broken)
    healthy, _, _ = _app(make_transport)

    assert "fuel -> /fuel" in app._startup_self_check()
    assert healthy._startup_self_check() == ""


@pytest.mark.asyncio
async def test_palette_selection_navigates_to_target(make_transport):
    app, api, live = _app(make_transport)

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.screen.route.key == "HOME"

        await pilot.press("ctrl+k")
        await pilot.pause()
        assert app.palette.is_open is True

        await pilot.press(*"create")
        await pilot.press("enter")
        await pilot.pause()
        await pilot.pause()

        assert app.palette.is_open is False
        assert app.current_path == "/loads/create"
        assert app.screen.route.key == "CREATE_LOAD"

    assert live.state is ConnectionState.DISCONNECTED
    assert api.closed is True
    assert "/api/metrics" in api.fetched


@pytest.mark.asyncio
async def test_live_update_refetches_and_rerenders_mounted_screen(
    make_transport, make_connection, wait_until, sample_frames
):
    connection = make_connection()
    app, api, live = _app(make_transport, initial_path="/loads", connections=[connection])

    async with app.run_test() as pilot:
        await pilot.pause()
        await wait_until(lambda: _status_bar(app.screen).connection_state == "connected")
        table = app.screen.query_one("#records", DataTable)
        await wait_until(lambda: table.row_count == 1)
        assert _status_bar(app.screen).api_state == "ok"

        connection.push(sample_frames["load_update"])
        await wait_until(lambda: api.fetched.count("/api/loads") == 2)
        await wait_until(lambda: table.row_count == 2)
        await pilot.pause()

        assert app.screen.route.key == "LOADS"
        assert live.last_message.type == "load_update"


@pytest.mark.asyncio
async def test_cache_invalidation_refetches_mounted_screen(make_transport, wait_until):
    app, api, _ = _app(make_transport, initial_path="/drivers")

    async with app.run_test() as pilot:
        await pilot.pause()
        table = app.screen.query_one("#records", DataTable)
        await wait_until(lambda: table.row_count == 1)

        app._query_cache.invalidate("/api/drivers")
        await wait_until(lambda: table.row_count == 2)

        assert api.fetched.count("/api/drivers") == 2


@pytest.mark.asyncio
async def test_covered_screen_badge_follows_connection_state(
    make_transport, make_connection, wait_until
):
    connection = make_connection()
    app, _, live = _app(make_transport, initial_path="/loads", connections=[connection])

    async with app.run_test() as pilot:
        await pilot.pause()
        route_screen = app.screen
        await wait_until(lambda: _status_bar(route_screen).connection_state == "connected")

        await pilot.press("ctrl+k")
        await pilot.pause()
        assert app.screen is not route_screen

        connection.drop()
        await wait_until(lambda: live.gave_up)
        assert _status_bar(route_screen).connection_state == "disconnected"

        await pilot.press("escape")
        await pilot.pause()

        assert app.screen is route_screen
        assert _status_bar(route_screen).connection_state == "disconnected"


@pytest.mark.asyncio
async def test_api_health_badge_reflects_health_check(make_transport, wait_until):
    app, _, _ = _app(make_transport, initial_path="/settings", healthy=False)

    async with app.run_test() as pilot:
        await pilot.pause()
        await wait_until(lambda: app.api_state == "error")

        assert _status_bar(app.screen).api_state == "error"
