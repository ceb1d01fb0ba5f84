# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import shutil

from sgres_lib.core.config import CFG
from sgres_lib.core.error import ParseError
from sgres_lib.core.logger import get_logger
from sgres_lib.properties.gres import GresEntry, parse_gres, parse_tres_gres
from sgres_lib.properties.states import NodeState

from .common import (
    entries_for_node,
    parse_int,
    parse_slurm_dump_to_dictionary,
    run_scontrol,
)
from .interface import SourceInterface
from .meta import SourceMeta

logger = get_logger(__name__)


class SlurmSource(SourceInterface, metaclass=SourceMeta):
    """
    Source reading generic resources from `scontrol show node -o`.

    Each line of the output describes one node as `Key=Value` pairs.
    """

    @staticmethod
    def envName() -> str:
        return "slurm"

    @staticmethod
    def isAvailable() -> bool:
        return shutil.which(CFG.slurm_options.scontrol) is not None

    @staticmethod
    def fetch() -> list[GresEntry]:
        output = run_scontrol(["show", "node", "-o"])

        entries: list[GresEntry] = []
        for line in output.splitlines():
            if not line.strip():
                continue

            info = parse_slurm_dump_to_dictionary(line)
            if not info:
                # informational lines such as 'No nodes in the system'
                logger.debug(f"Skipping line without node information: '{line}'.")
                continue

            entries.extend(SlurmSource._entriesFromDict(info))

        logger.debug(f"Fetched {len(entries)} generic resource entries.")
        return entries

    @staticmethod
    def _entriesFromDict(info: dict[str, str]) -> list[GresEntry]:
        """
        Convert the parsed dump of a single node into generic resource entries.

        Args:
            info (dict[str, str]): Key-value pairs describing the node.

        Returns:
            list[GresEntry]: One entry per generic resource of the node.

        Raises:
            ParseError: If the node name is missing or a field is malformed.
        """
        if not (node := info.get("NodeName")):
            raise ParseError(f"Node information without a node name: {info}.")

        total = parse_gres(info.get("Gres"))
        if not total:
            return []

        # older Slurm versions report GresUsed, newer ones only AllocTRES
        if "GresUsed" in info:
            used = parse_gres(info["GresUsed"])
        else:
            used = parse_tres_gres(info.get("AllocTRES"))

        cpus = parse_int(info.get("CPUTot"), "CPUTot", node)
        memory = parse_int(info.get("RealMemory"), "RealMemory", node)

        return entries_for_node(
            node=node,
            partition=info.get("Partitions", ""),
            state_flags=NodeState.splitState(info.get("State", "")),
            total=total,
            used=used,
            cpus=cpus,
            free_cpus=cpus - parse_int(info.get("CPUAlloc"), "CPUAlloc", node),
            memory_mb=memory,
            free_memory_mb=memory - parse_int(info.get("AllocMem"), "AllocMem", node),
        )
