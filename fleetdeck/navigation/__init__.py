"""Route table and command registry."""

from .commands import COMMANDS, Command, CommandRegistry, command_registry, group_commands
from .routes import NOT_FOUND_PATH, ROUTES, Route, RouteTable, route_table

__all__ = [
    "COMMANDS",
    "Command",
    "CommandRegistry",
    "NOT_FOUND_PATH",
    "ROUTES",
    "Route",
    "RouteTable",
    "command_registry",
    "group_commands",
    "route_table",
]
