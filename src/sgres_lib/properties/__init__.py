# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Properties and structured metadata for generic resources.

This module provides the data representations underlying sgres: sizes of
memory, states of nodes, and the generic resource entries themselves together
with the parser of the generic resource strings reported by Slurm.
"""
