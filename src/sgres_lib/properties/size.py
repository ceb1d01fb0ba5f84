# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass

from sgres_lib.core.config import CFG
from sgres_lib.core.error import ParseError


@dataclass(init=False, frozen=True)
class Size:
    """
    Represents a memory size.

    The value is stored internally in kilobytes (kB). When converted to a string,
    it is displayed in the largest human-readable unit such that the relative
    rounding error does not exceed `CFG.size.max_rounding_error`.
    """

    value: int

    _unit_map = {
        "kb": 1,
        "mb": 1024,
        "gb": 1024 * 1024,
        "tb": 1024 * 1024 * 1024,
        "pb": 1024 * 1024 * 1024 * 1024,
    }

    def __init__(self, value: int, unit: str = "kb"):
        unit = unit.lower()
        if unit not in self._unit_map:
            raise ParseError(f"Unsupported unit for size '{unit}'.")

        object.__setattr__(self, "value", value * self._unit_map[unit])

    def __str__(self) -> str:
        if self.value == 0:
            return "0kb"

        for unit, factor in reversed(list(self._unit_map.items())):
            value = self.value / factor

            if value >= 1:
                rounded = round(value)
                # compute relative error from rounding
                error = abs(rounded * factor - self.value) / self.value
                if error <= CFG.size.max_rounding_error or unit == "kb":
                    return f"{rounded}{unit}"
                # otherwise, try smaller unit

        return f"{self.value}kb"
