# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
from enum import Enum
from typing import Self, TextIO

from sgres_lib.core.config import CFG
from sgres_lib.core.error import UsageError
from sgres_lib.core.logger import get_logger

logger = get_logger(__name__)


class ColorMode(Enum):
    """
    Controls whether the output contains ANSI styling.
    """

    AUTO = 1
    ALWAYS = 2
    NEVER = 3

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding ColorMode enum variant.

        Raises:
            UsageError: If the string does not name a color mode.
        """
        try:
            return cls[s.strip().upper()]
        except KeyError as e:
            raise UsageError(
                f"Invalid color mode '{s}'. Valid choices: {', '.join(str(m) for m in cls)}."
            ) from e

    @classmethod
    def fromEnvVarOrConfig(cls) -> Self:
        """
        Return the color mode from the environment variable or from the configuration.
        """
        if mode := os.environ.get(CFG.env_vars.color):
            return cls.fromStr(mode)

        return cls.fromStr(CFG.render.color)

    def resolve(self, stream: TextIO) -> bool:
        """
        Decide whether colored output should be emitted into `stream`.

        In auto mode, `NO_COLOR` disables colors and `FORCE_COLOR` enables them
        (this is how pseudo-terminal wrappers request styled output);
        otherwise colors are used only if the stream is a terminal.

        Args:
            stream (TextIO): The stream the output will be written to.

        Returns:
            bool: True if the output should contain ANSI styling.
        """
        if self == ColorMode.ALWAYS:
            return True
        if self == ColorMode.NEVER:
            return False

        if os.environ.get(CFG.env_vars.no_color):
            logger.debug("Colors disabled by an environment variable.")
            return False
        if os.environ.get(CFG.env_vars.force_color):
            logger.debug("Colors forced by an environment variable.")
            return True

        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())
