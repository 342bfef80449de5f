"""Shared Textual widgets for FleetDeck."""

from .breadcrumb import Breadcrumb
from .status_bar import StatusBar

__all__ = ["Breadcrumb", "StatusBar"]
