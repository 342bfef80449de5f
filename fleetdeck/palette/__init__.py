"""Command palette controller."""

from .controller import CommandPaletteController

__all__ = ["CommandPaletteController"]
