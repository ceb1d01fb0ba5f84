# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Selection of generic resource entries.

This module resolves the query given on the command line into a `FilterSpec`
and keeps the entries whose resource name and partition match it.
"""

from .matcher import FilterSpec, apply

__all__ = ["FilterSpec", "apply"]
