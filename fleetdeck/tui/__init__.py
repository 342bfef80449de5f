"""Textual terminal client for FleetDeck."""

from .textual_app import FleetDeckApp

__all__ = ["FleetDeckApp"]
