# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Sources of generic resource information.

This module groups the components that query a cluster manager for the generic
resources of its nodes. It defines the interface shared by all sources, the
registry used to select one of them by name, and the built-in Slurm backends
reading either the one-line text dump or the JSON output of `scontrol`.
"""

from .interface import SourceInterface
from .meta import SourceMeta
from .slurm import SlurmSource
from .slurm_json import SlurmJsonSource

SourceMeta.register(SlurmSource)
SourceMeta.register(SlurmJsonSource)

__all__ = [
    "SlurmJsonSource",
    "SlurmSource",
    "SourceInterface",
    "SourceMeta",
]
