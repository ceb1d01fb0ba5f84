# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from enum import Enum
from typing import Self

from sgres_lib.core.logger import get_logger

logger = get_logger(__name__)


class NodeState(Enum):
    """
    State of a node according to the cluster manager.

    Slurm reports a base state (e.g. `IDLE`, `MIXED`) optionally combined with
    flags (e.g. `DRAIN`, `MAINT`). The variants of this enum condense such
    combinations into a single state suitable for coloring and filtering.
    """

    IDLE = 1
    MIXED = 2
    ALLOCATED = 3
    COMPLETING = 4
    DRAINING = 5
    DRAINED = 6
    DOWN = 7
    FAILING = 8
    RESERVED = 9
    MAINTENANCE = 10
    PLANNED = 11
    POWERED_DOWN = 12
    FUTURE = 13
    UNKNOWN = 14

    def __str__(self) -> str:
        """
        Return the lowercase string representation of the enum variant.

        Returns:
            str: The name of the state in lowercase.
        """
        return self.name.lower()

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        """
        Internal mapping from Slurm state words to state names.

        Returns:
            dict[str, str]: Mapping of Slurm words to corresponding state names.
        """
        return {
            "ALLOC": "allocated",
            "COMP": "completing",
            "DRAIN": "drained",
            "DRNG": "draining",
            "FAIL": "failing",
            "MAINT": "maintenance",
            "POWER_DOWN": "powered_down",
            "RESV": "reserved",
        }

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a single state word to the corresponding NodeState enum variant.

        Args:
            s (str): State word (case-insensitive), possibly followed by
                Slurm's status suffixes such as `*` or `~`.

        Returns:
            NodeState: Corresponding enum variant. Returns UNKNOWN if no match is found.
        """
        word = NodeState.normalizeWord(s)
        name = cls._aliases().get(word, word)
        try:
            return cls[name.upper()]
        except KeyError:
            return cls.UNKNOWN

    @classmethod
    def fromFlags(cls, flags: list[str] | tuple[str, ...]) -> Self:
        """
        Condense the base state and flags of a node into a single NodeState.

        Args:
            flags (list[str] | tuple[str, ...]): State words as reported by Slurm,
                the base state first (e.g. `["MIXED", "DRAIN"]`).

        Returns:
            NodeState: The condensed state. Returns UNKNOWN for an empty list.
        """
        if not flags:
            return cls.UNKNOWN

        words = [NodeState.normalizeWord(f) for f in flags]
        base = cls.fromStr(words[0])

        if "DOWN" in words:
            return cls.DOWN
        if "FAIL" in words or "FAILING" in words:
            return cls.FAILING
        if "DRAIN" in words or "DRAINING" in words or "DRAINED" in words:
            if base in (cls.ALLOCATED, cls.MIXED, cls.COMPLETING, cls.DRAINING):
                return cls.DRAINING
            return cls.DRAINED
        if "MAINT" in words or "MAINTENANCE" in words:
            return cls.MAINTENANCE
        if "RESERVED" in words:
            return cls.RESERVED
        if "POWERED_DOWN" in words:
            return cls.POWERED_DOWN

        if base == cls.UNKNOWN:
            logger.debug(f"Unrecognized node state '{'+'.join(flags)}'.")
        return base

    @staticmethod
    def normalizeWord(word: str) -> str:
        """
        Strip Slurm's status suffixes (`*`, `~`, `#`, `!`, `%`, `$`, `@`, `^`, `-`)
        from a state word and convert it to uppercase.
        """
        return re.sub(r"[*~#!%$@^\-]+$", "", word.strip()).upper()

    @staticmethod
    def splitState(raw: str) -> tuple[str, ...]:
        """
        Split a textual Slurm state (e.g. `MIXED+DRAIN`) into its words.
        """
        return tuple(word for word in raw.strip().split("+") if word)
