# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Generic resources and their textual representation.

Slurm reports the generic resources of a node as a comma-separated list such as
`gpu:a100:4(S:0-1),gpu:v100:2` and the allocated ones in the same format
(`gpu:a100:1(IDX:0),gpu:v100:0(IDX:N/A)`). Allocations may also be reported
as trackable resources (`cpu=4,mem=16G,gres/gpu:a100=1`).
"""

import re
from dataclasses import dataclass, field
from typing import Any

from sgres_lib.core.error import ParseError
from sgres_lib.core.logger import get_logger

from .size import Size
from .states import NodeState

logger = get_logger(__name__)

# values meaning "no generic resources"
_EMPTY_VALUES = {"", "(null)", "n/a", "none"}

# valid name of a generic resource, optionally typed (e.g. `gpu`, `gpu:a100`)
_NAME_PATTERN = re.compile(r"[\w.\-]+(:[\w.\-]+)*")

# count of a generic resource with an optional multiplier suffix
_COUNT_PATTERN = re.compile(r"(\d+)([KMG]?)")

_COUNT_MULTIPLIERS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3}

# flags Slurm may insert between the name and the count
_GRES_FLAGS = {"no_consume"}


@dataclass(frozen=True)
class GresCount:
    """Number of units of a single named generic resource."""

    name: str
    count: int


@dataclass(frozen=True)
class GresEntry:
    """
    One generic resource of one node, as reported by the cluster manager.
    """

    # name of the generic resource without the count (e.g. `gpu:a100`)
    name: str

    # partition(s) the node belongs to, comma-separated
    partition: str

    # name of the node
    node: str

    # total number of units
    count: int

    # number of allocated units
    used: int

    # condensed state of the node
    state: NodeState = NodeState.UNKNOWN

    # state words as reported by the cluster manager (e.g. `MIXED`, `DRAIN`)
    state_flags: tuple[str, ...] = ()

    # total and free CPU cores of the node
    cpus: int = 0
    free_cpus: int = 0

    # total and free memory of the node
    memory: Size = field(default_factory=lambda: Size(0))
    free_memory: Size = field(default_factory=lambda: Size(0))

    @property
    def free(self) -> int:
        """Number of unallocated units."""
        return max(self.count - self.used, 0)

    @property
    def partitions(self) -> tuple[str, ...]:
        """Individual partitions the node belongs to."""
        return tuple(p.strip() for p in self.partition.split(",") if p.strip())

    def toDict(self) -> dict[str, Any]:
        """
        Convert the entry into a dictionary of plain values.

        Returns:
            dict[str, Any]: The entry suitable for serialization.
        """
        return {
            "node": self.node,
            "partition": self.partition,
            "gres": self.name,
            "count": self.count,
            "used": self.used,
            "free": self.free,
            "state": str(self.state),
            "state_flags": list(self.state_flags),
            "cpus": self.cpus,
            "free_cpus": self.free_cpus,
            "memory": str(self.memory),
            "free_memory": str(self.free_memory),
        }


def parse_gres(text: str | None) -> list[GresCount]:
    """
    Parse a generic resource string reported by Slurm.

    Annotations in parentheses (socket bindings, indices) are ignored. Items
    without an explicit count count as a single unit. Repeated items of the same
    name (e.g. one per socket) are summed and keep the position of the first one.

    Args:
        text (str | None): The generic resource string, e.g. `gpu:a100:4(S:0-1),gpu:v100:2`.

    Returns:
        list[GresCount]: Generic resources in the order they were reported.

    Raises:
        ParseError: If an item of the string is malformed.
    """
    if text is None or text.strip().lower() in _EMPTY_VALUES:
        return []

    counts: dict[str, int] = {}
    for item in _split_outside_parentheses(text.strip()):
        core = re.sub(r"\(.*\)$", "", item.strip())
        if not core:
            continue

        # flags such as `no_consume` are not part of the name
        parts = [p for p in core.split(":") if p.lower() not in _GRES_FLAGS]
        if not parts:
            raise ParseError(f"Invalid generic resource '{item}' in '{text}'.")
        if len(parts) > 1 and _COUNT_PATTERN.fullmatch(parts[-1]):
            name = ":".join(parts[:-1])
            count = _parse_count(parts[-1])
        else:
            name, count = ":".join(parts), 1

        if not _NAME_PATTERN.fullmatch(name):
            raise ParseError(f"Invalid generic resource '{item}' in '{text}'.")

        counts[name] = counts.get(name, 0) + count

    logger.debug(f"Parsed generic resources '{text}': {counts}.")
    return [GresCount(name, count) for name, count in counts.items()]


def parse_tres_gres(text: str | None) -> list[GresCount]:
    """
    Extract generic resources from a trackable resources string.

    Args:
        text (str | None): Trackable resources, e.g. `cpu=4,mem=16G,gres/gpu:a100=1`.

    Returns:
        list[GresCount]: Generic resources listed in the string.

    Raises:
        ParseError: If the count of a generic resource is malformed.
    """
    if text is None or text.strip().lower() in _EMPTY_VALUES:
        return []

    result = []
    for item in text.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep or not key.startswith("gres/"):
            continue

        if not _COUNT_PATTERN.fullmatch(value):
            raise ParseError(f"Invalid generic resource count '{item}' in '{text}'.")

        result.append(GresCount(key.removeprefix("gres/"), _parse_count(value)))

    return result


def _parse_count(value: str) -> int:
    """Convert a count such as `4` or `2K` into an integer."""
    match = _COUNT_PATTERN.fullmatch(value)
    if not match:
        raise ParseError(f"Invalid generic resource count '{value}'.")

    number, suffix = match.groups()
    return int(number) * _COUNT_MULTIPLIERS[suffix]


def _split_outside_parentheses(text: str) -> list[str]:
    """Split a string on commas that are not enclosed in parentheses."""
    items: list[str] = []
    depth = 0
    current = []

    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == "," and depth == 0:
            items.append("".join(current))
            current = []
            continue
        current.append(char)

    items.append("".join(current))
    return items
