# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import os
from abc import ABCMeta

from sgres_lib.core.config import CFG
from sgres_lib.core.error import SourceUnavailable
from sgres_lib.core.logger import get_logger

from .interface import SourceInterface

logger = get_logger(__name__)


class SourceMeta(ABCMeta):
    """
    Registry of the sources of generic resource information.
    """

    # registry of supported sources
    _registry: dict[str, type[SourceInterface]] = {}

    def __str__(cls: type[SourceInterface]):
        """
        Get the string representation of the source class.
        """
        return cls.envName()

    @classmethod
    def register(mcs, source_cls: type[SourceInterface]):
        """
        Register a source class in the registry.

        Args:
            source_cls: Subclass of SourceInterface to register.
        """
        mcs._registry[source_cls.envName()] = source_cls

    @classmethod
    def names(mcs) -> list[str]:
        """Return the names of all registered sources."""
        return list(mcs._registry)

    @classmethod
    def fromStr(mcs, name: str) -> type[SourceInterface]:
        """
        Return the source class registered with the given name.

        Raises:
            SourceUnavailable: If no class is registered for the given name.
        """
        try:
            return mcs._registry[name]
        except KeyError as e:
            raise SourceUnavailable(
                f"No source registered as '{name}'. Available sources: {', '.join(mcs.names())}."
            ) from e

    @classmethod
    def fromEnvVarOrConfig(mcs) -> type[SourceInterface]:
        """
        Select a source based on the environment variable or the configuration.

        Returns:
            type[SourceInterface]: The selected source class.

        Raises:
            SourceUnavailable: If the selected name is not registered.
        """
        if name := os.environ.get(CFG.env_vars.source):
            logger.debug(f"Using source name from an environment variable: {name}.")
            return mcs.fromStr(name)

        logger.debug(f"Using source name from the configuration: {CFG.source.backend}.")
        return mcs.fromStr(CFG.source.backend)

    @classmethod
    def obtain(mcs, name: str | None) -> type[SourceInterface]:
        """
        Obtain a source class by name, environment variable, or configuration.

        Args:
            name (str | None): Optional name of the source to obtain.
                - If provided, returns the class registered under this name.
                - If `None`, falls back to `fromEnvVarOrConfig`.

        Returns:
            type[SourceInterface]: The selected source class.

        Raises:
            SourceUnavailable: If the requested source is not registered.
        """
        if name:
            return mcs.fromStr(name)

        return mcs.fromEnvVarOrConfig()
