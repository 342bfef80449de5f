"""CLI entry point for the FleetDeck terminal client."""

import argparse

from rich.console import Console
from rich.table import Table

from .navigation import command_registry, route_table

console = Console()


def print_routes() -> None:
    table = Table(title="Routes")
    table.add_column("Key", style="cyan")
    table.add_column("Path")
    table.add_column("Name")
    table.add_column("Parent")
    table.add_column("Hidden")
    for route in route_table:
        table.add_row(
            route.key,
            route.path,
            route.name,
            route.parent or "",
            "yes" if route.hidden else "",
        )
    console.print(table)


def print_commands() -> None:
    table = Table(title="Palette commands")
    table.add_column("Id", style="cyan")
    table.add_column("Title")
    table.add_column("Target")
    table.add_column("Group")
    table.add_column("Keywords")
    for command in command_registry:
        table.add_row(
            command.id,
            command.title,
            command.target_path,
            command.group,
            ", ".join(command.keywords),
        )
    console.print(table)


def run_tui(path: str = "/", live_url=None, api_url=None):
    """Run the Textual dashboard."""
    from .live.client import LiveChannelClient
    from .live.invalidation import InvalidationRouter
    from .services.dashboard_api import DashboardApiClient
    from .services.query_cache import QueryCache
    from .tui.logging import configure_logging
    from .tui.textual_app import FleetDeckApp

    log_path = configure_logging()
    api_client = DashboardApiClient(base_url=api_url)
    cache = QueryCache(api_client.fetch)
    live_client = LiveChannelClient(live_url, router=InvalidationRouter(cache))
    FleetDeckApp(
        api_client=api_client,
        cache=cache,
        live_client=live_client,
        initial_path=path,
    ).run()
    console.print(f"[dim]Event log: {log_path}[/dim]")


def main():
    parser = argparse.ArgumentParser(description="FleetDeck - Dispatch Dashboard Client")
    parser.add_argument("--path", default="/", help="Route to open on start")
    parser.add_argument("--live-url", default=None, help="Live channel WebSocket URL")
    parser.add_argument("--api-url", default=None, help="Dashboard REST API base URL")
    parser.add_argument("--list-routes", action="store_true", help="Print the route table")
    parser.add_argument(
        "--list-commands", action="store_true", help="Print the palette commands"
    )
    args = parser.parse_args()

    if args.list_routes or args.list_commands:
        if args.list_routes:
            print_routes()
        if args.list_commands:
            print_commands()
        return

    run_tui(path=args.path, live_url=args.live_url, api_url=args.api_url)


if __name__ == "__main__":
    main()
