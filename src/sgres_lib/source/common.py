# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess

from sgres_lib.core.config import CFG
from sgres_lib.core.error import ParseError, SourceUnavailable
from sgres_lib.core.logger import get_logger
from sgres_lib.properties.gres import GresCount, GresEntry
from sgres_lib.properties.size import Size
from sgres_lib.properties.states import NodeState

logger = get_logger(__name__)


def run_scontrol(args: list[str]) -> str:
    """
    Run `scontrol` with the given arguments and return its standard output.

    The environment of sgres is passed to `scontrol` unchanged. The call is
    bounded by `CFG.timeouts.query` seconds.

    Args:
        args (list[str]): Arguments passed to `scontrol`.

    Returns:
        str: Standard output of the command.

    Raises:
        SourceUnavailable: If the command cannot be executed, times out,
            or finishes with a non-zero exit code.
    """
    command = [CFG.slurm_options.scontrol, *args]
    logger.debug(f"Running '{' '.join(command)}'.")

    try:
        result = subprocess.run(
            command,
            text=True,
            check=False,
            capture_output=True,
            errors="replace",
            timeout=CFG.timeouts.query,
        )
    except subprocess.TimeoutExpired as e:
        raise SourceUnavailable(
            f"Query '{' '.join(command)}' timed out after {CFG.timeouts.query} seconds."
        ) from e
    except OSError as e:
        raise SourceUnavailable(f"Could not run '{command[0]}': {e}.") from e

    if result.returncode != 0:
        raise SourceUnavailable(
            f"Query '{' '.join(command)}' failed: {result.stderr.strip()}"
        )

    return result.stdout


def parse_slurm_dump_to_dictionary(
    text: str, separator: str | None = None
) -> dict[str, str]:
    """
    Parse a Slurm info dump into a dictionary.

    Tokens without `=` (e.g. parts of values containing spaces) are ignored.

    Returns:
        dict[str, str]: Dictionary mapping keys to values.
    """
    result: dict[str, str] = {}

    for pair in text.split(separator):
        if "=" not in pair:
            continue

        key, value = pair.split("=", 1)
        result[key.strip()] = value.strip()

    logger.debug(f"Parsed slurm dump: {result}.")
    return result


def parse_int(value: str | int | None, key: str, node: str) -> int:
    """
    Convert a numeric field of a node into an integer. Missing values are zero.

    Raises:
        ParseError: If the value is not an integer.
    """
    if value is None or value == "":
        logger.debug(f"Missing value of '{key}' for node '{node}'.")
        return 0

    if isinstance(value, bool):
        raise ParseError(f"Invalid value '{value}' of '{key}' for node '{node}'.")

    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ParseError(
            f"Invalid value '{value}' of '{key}' for node '{node}'."
        ) from e


def entries_for_node(
    node: str,
    partition: str,
    state_flags: tuple[str, ...],
    total: list[GresCount],
    used: list[GresCount],
    cpus: int,
    free_cpus: int,
    memory_mb: int,
    free_memory_mb: int,
) -> list[GresEntry]:
    """
    Create one entry for every generic resource of a node.

    Used counts are matched to the total counts by name. Generic resources
    that are not configured on the node are ignored.

    Returns:
        list[GresEntry]: Entries in the order of `total`.
    """
    used_counts = {g.name: g.count for g in used}
    state = NodeState.fromFlags(state_flags)

    return [
        GresEntry(
            name=gres.name,
            partition=partition,
            node=node,
            count=gres.count,
            used=used_counts.get(gres.name, 0),
            state=state,
            state_flags=state_flags,
            cpus=cpus,
            free_cpus=max(free_cpus, 0),
            memory=Size(memory_mb, "mb"),
            free_memory=Size(max(free_memory_mb, 0), "mb"),
        )
        for gres in total
    ]
