# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from abc import ABC

from sgres_lib.properties.gres import GresEntry


class SourceInterface(ABC):
    """
    Abstract base class for sources of generic resource information.

    Concrete sources must implement these methods to allow sgres to read
    generic resources from different cluster managers uniformly.

    A source performs exactly one query per call to `fetch` and never retries.
    """

    @staticmethod
    def envName() -> str:
        """
        Return the name under which the source is registered.

        Returns:
            str: The name of the source (e.g. `slurm`).
        """
        raise NotImplementedError(
            "envName method is not implemented for this source implementation"
        )

    @staticmethod
    def isAvailable() -> bool:
        """
        Determine whether the source can be queried from the current host.

        Returns:
            bool: True if the client of the cluster manager is installed, False otherwise.
        """
        raise NotImplementedError(
            "isAvailable method is not implemented for this source implementation"
        )

    @staticmethod
    def fetch() -> list[GresEntry]:
        """
        Query the cluster manager for the generic resources of all visible nodes.

        Returns:
            list[GresEntry]: One entry per node and generic resource, in the order
            reported by the cluster manager.

        Raises:
            SourceUnavailable: If the cluster manager cannot be queried.
            ParseError: If the response of the cluster manager cannot be parsed.
        """
        raise NotImplementedError(
            "fetch method is not implemented for this source implementation"
        )
