"""Configuration package for FleetDeck."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
