# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import json
import shutil
from typing import Any

from sgres_lib.core.config import CFG
from sgres_lib.core.error import ParseError
from sgres_lib.core.logger import get_logger
from sgres_lib.properties.gres import GresEntry, parse_gres
from sgres_lib.properties.states import NodeState

from .common import entries_for_node, parse_int, run_scontrol
from .interface import SourceInterface
from .meta import SourceMeta

logger = get_logger(__name__)


class SlurmJsonSource(SourceInterface, metaclass=SourceMeta):
    """
    Source reading generic resources from `scontrol show nodes --json`.
    """

    @staticmethod
    def envName() -> str:
        return "slurm-json"

    @staticmethod
    def isAvailable() -> bool:
        return shutil.which(CFG.slurm_options.scontrol) is not None

    @staticmethod
    def fetch() -> list[GresEntry]:
        output = run_scontrol(["show", "nodes", "--json"])

        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise ParseError(f"Could not parse the output of scontrol as JSON: {e}.") from e

        if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
            raise ParseError("The output of scontrol does not contain a list of nodes.")

        entries: list[GresEntry] = []
        for node in data["nodes"]:
            entries.extend(SlurmJsonSource._entriesFromNode(node))

        logger.debug(f"Fetched {len(entries)} generic resource entries.")
        return entries

    @staticmethod
    def _entriesFromNode(node: Any) -> list[GresEntry]:
        """
        Convert a JSON description of a single node into generic resource entries.

        Args:
            node (Any): A member of the `nodes` array.

        Returns:
            list[GresEntry]: One entry per generic resource of the node.

        Raises:
            ParseError: If the node is not an object, lacks a name,
                or has malformed fields.
        """
        if not isinstance(node, dict):
            raise ParseError(f"Invalid node description: {node}.")

        name = node.get("name") or node.get("hostname")
        if not isinstance(name, str) or not name:
            raise ParseError(f"Node description without a node name: {node}.")

        total = parse_gres(SlurmJsonSource._getStr(node, "gres", name))
        if not total:
            return []

        cpus = parse_int(SlurmJsonSource._getNumber(node, "cpus"), "cpus", name)
        if "alloc_idle_cpus" in node:
            free_cpus = parse_int(
                SlurmJsonSource._getNumber(node, "alloc_idle_cpus"),
                "alloc_idle_cpus",
                name,
            )
        else:
            free_cpus = cpus - parse_int(
                SlurmJsonSource._getNumber(node, "alloc_cpus"), "alloc_cpus", name
            )

        memory = parse_int(
            SlurmJsonSource._getNumber(node, "real_memory"), "real_memory", name
        )
        alloc_memory = parse_int(
            SlurmJsonSource._getNumber(node, "alloc_memory"), "alloc_memory", name
        )

        return entries_for_node(
            node=name,
            partition=",".join(SlurmJsonSource._getList(node, "partitions", name)),
            state_flags=SlurmJsonSource._getStateFlags(node, name),
            total=total,
            used=parse_gres(SlurmJsonSource._getStr(node, "gres_used", name)),
            cpus=cpus,
            free_cpus=free_cpus,
            memory_mb=memory,
            free_memory_mb=memory - alloc_memory,
        )

    @staticmethod
    def _getStr(node: dict[str, Any], key: str, name: str) -> str:
        value = node.get(key) or ""
        if not isinstance(value, str):
            raise ParseError(f"Invalid value '{value}' of '{key}' for node '{name}'.")
        return value

    @staticmethod
    def _getList(node: dict[str, Any], key: str, name: str) -> list[str]:
        value = node.get(key) or []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ParseError(f"Invalid value '{value}' of '{key}' for node '{name}'.")
        return value

    @staticmethod
    def _getNumber(node: dict[str, Any], key: str) -> Any:
        """
        Return a numeric field of a node.

        Newer versions of Slurm wrap numbers into `{"set": ..., "number": ...}`
        objects; unset numbers are returned as None.
        """
        value = node.get(key)
        if isinstance(value, dict):
            if not value.get("set", True):
                return None
            return value.get("number")
        return value

    @staticmethod
    def _getStateFlags(node: dict[str, Any], name: str) -> tuple[str, ...]:
        # older versions of Slurm report the state as a single string
        value = node.get("state") or []
        if isinstance(value, str):
            return NodeState.splitState(value)
        return tuple(SlurmJsonSource._getList(node, "state", name))
