# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass

from sgres_lib.core.common import contains_normalized
from sgres_lib.core.logger import get_logger
from sgres_lib.properties.gres import GresEntry

logger = get_logger(__name__)


@dataclass(frozen=True)
class FilterSpec:
    """
    Query selecting generic resource entries.
    """

    # substring of the resource name; the empty string matches every entry
    name: str

    # substring of the partition; None or an empty string disables the partition filter
    partition: str | None = None

    def matches(self, entry: GresEntry) -> bool:
        """
        Check whether an entry satisfies the query.

        Names are matched as case-insensitive substrings. A node belonging
        to several partitions matches if any of its partitions contains
        the requested one.

        Args:
            entry (GresEntry): The entry to check.

        Returns:
            bool: True if the entry is selected, False otherwise.
        """
        if not contains_normalized(entry.name, self.name):
            return False

        if not self.partition:
            return True

        return any(contains_normalized(p, self.partition) for p in entry.partitions)


def apply(entries: list[GresEntry], spec: FilterSpec) -> list[GresEntry]:
    """
    Keep the entries matching the query, preserving their order.

    Args:
        entries (list[GresEntry]): Entries reported by the source.
        spec (FilterSpec): The query.

    Returns:
        list[GresEntry]: The matching entries. May be empty.
    """
    selected = [e for e in entries if spec.matches(e)]
    logger.debug(f"Selected {len(selected)} of {len(entries)} entries using {spec}.")
    return selected
