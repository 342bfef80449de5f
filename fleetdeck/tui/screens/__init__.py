"""Textual screen modules for FleetDeck."""

from .palette import CommandPaletteScreen
from .route import ROUTE_DATA_KEYS, RouteScreen

__all__ = ["CommandPaletteScreen", "ROUTE_DATA_KEYS", "RouteScreen"]
