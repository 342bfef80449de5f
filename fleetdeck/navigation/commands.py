"""Command palette registry."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .routes import RouteTable


@dataclass(frozen=True)
class Command:
    """A palette entry bound to a navigation target."""

    id: str
    title: str
    description: str
    target_path: str
    icon: str
    keywords: Tuple[str, ...]
    group: str

    def matches(self, query: str) -> bool:
        needle = (query or "").lower()
        if needle in self.title.lower() or needle in self.description.lower():
            return True
        return any(needle in keyword.lower() for keyword in self.keywords)


class CommandRegistry:
    """Ordered, id-unique collection of palette commands."""

    def __init__(self, commands: Iterable[Command]) -> None:
        ordered = tuple(commands)
        seen: Dict[str, Command] = {}
        for command in ordered:
            if command.id in seen:
                raise ValueError(f"Duplicate command id '{command.id}'")
            seen[command.id] = command
        self._commands = ordered
        self._by_id = seen

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def get(self, command_id: str) -> Optional[Command]:
        return self._by_id.get(command_id)

    def filter(self, query: str) -> List[Command]:
        """Commands whose title, description or a keyword contain ``query``."""
        return [command for command in self._commands if command.matches(query)]

    def unresolved_targets(self, routes: RouteTable) -> List[Command]:
        return [command for command in self._commands if not routes.matches(command.target_path)]


def group_commands(commands: Sequence[Command]) -> "OrderedDict[str, List[Command]]":
    """Group commands for display, keeping first-seen group order."""
    grouped: "OrderedDict[str, List[Command]]" = OrderedDict()
    for command in commands:
        grouped.setdefault(command.group, []).append(command)
    return grouped


COMMANDS: Tuple[Command, ...] = (
    Command(
        id="dashboard",
        title="Dashboard",
        description="View main dashboard overview",
        target_path="/",
        icon="BarChart3",
        keywords=("dashboard", "home", "overview"),
        group="Navigation",
    ),
    Command(
        id="loads",
        title="Load Board",
        description="Manage and view all loads",
        target_path="/loads",
        icon="Truck",
        keywords=("loads", "freight", "shipments"),
        group="Navigation",
    ),
    Command(
        id="create-load",
        title="Create New Load",
        description="Add a new load to the system",
        target_path="/loads/create",
        icon="Plus",
        keywords=("create", "new", "load", "add"),
        group="Actions",
    ),
    Command(
        id="drivers",
        title="Drivers",
        description="Manage driver fleet",
        target_path="/drivers",
        icon="Users",
        keywords=("drivers", "fleet", "team"),
        group="Navigation",
    ),
    Command(
        id="add-driver",
        title="Add New Driver",
        description="Register a new driver",
        target_path="/drivers/create",
        icon="Plus",
        keywords=("add", "driver", "new", "register"),
        group="Actions",
    ),
    Command(
        id="negotiations",
        title="Negotiations",
        description="AI-powered rate negotiations",
        target_path="/negotiations",
        icon="MessageSquare",
        keywords=("negotiations", "rates", "ai"),
        group="Navigation",
    ),
)

command_registry = CommandRegistry(COMMANDS)
