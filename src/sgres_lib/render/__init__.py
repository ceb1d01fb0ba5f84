# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Rendering of generic resource entries.

This module turns the selected entries into text under a named style. Styles
are presets defined in the configuration (columns, box, sorting, colors).
Whether ANSI styling is emitted is decided once from a `ColorMode` and passed
explicitly, so the rendering itself never inspects the terminal.
"""

from .color import ColorMode
from .presenter import GresStats, Renderer, dump_yaml

__all__ = ["ColorMode", "GresStats", "Renderer", "dump_yaml"]
