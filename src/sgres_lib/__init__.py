# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the sgres command-line tool.

sgres lists the generic resources (GRES) of a cluster workload manager. The
package implements a single pipeline: a source queries the cluster manager,
a filter selects the entries matching the requested resource name and partition,
and a renderer formats them under a named style.
"""

from .sgres import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "core",
    "filter",
    "properties",
    "render",
    "source",
]
