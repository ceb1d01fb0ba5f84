# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
General utility functions for the sgres library.

This module provides helpers for YAML output, case-insensitive matching,
natural sorting of host names, and sizing of rich panels.
"""

import re
from functools import lru_cache

import yaml
from rich.console import Console

from .logger import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def load_yaml_dumper() -> type[yaml.Dumper]:
    """Return the fastest available YAML dumper (CDumper if possible)."""
    try:
        from yaml import CDumper as Dumper  # type: ignore[attr-defined]

        logger.debug("Loaded YAML CDumper.")
    except ImportError:
        from yaml import Dumper

        logger.debug("Loaded default YAML dumper.")
    return Dumper


def normalize(s: str) -> str:
    """
    Normalize a string for case-insensitive comparison.

    Args:
        s (str): The string to normalize.

    Returns:
        str: The stripped and case-folded string.
    """
    return s.strip().casefold()


def contains_normalized(haystack: str, needle: str) -> bool:
    """
    Check whether `needle` is a substring of `haystack`, ignoring case
    and surrounding whitespace.
    """
    return normalize(needle) in normalize(haystack)


def natural_sort_key(name: str) -> tuple[str, list[int | float]]:
    """
    Return a key ordering names by their alphabetic prefix and then numerically
    by every group of digits (`node2` < `node10`, `elmo5-9` < `elmo5-18`).
    """
    match = re.match(r"[A-Za-z]+", name)
    prefix = match.group(0).lower() if match else name.lower()

    numbers = re.findall(r"\d+", name)
    return prefix, [int(n) for n in numbers] if numbers else [float("inf")]


def get_panel_width(
    console: Console, factor: int, min_width: int | None, max_width: int | None
) -> int:
    """
    Calculate the width of a panel relative to the console width, constrained by
    optional minimum and maximum width values.

    Args:
        console (Console): A rich Console-like object that provides terminal size.
        factor (int): A divisor used to scale down the terminal width.
        min_width (int): The minimum allowable panel width. If None, no lower bound is applied.
        max_width (int): The maximum allowable panel width. If None, no upper bound is applied.

    Returns:
        int: The computed panel width after applying scaling and bounds.
    """
    panel_width = console.size.width // factor
    if min_width is not None:
        panel_width = max(panel_width, min_width)
    if max_width is not None:
        panel_width = min(panel_width, max_width)

    return panel_width
