# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for sgres.

This module defines dataclasses representing all configurable aspects of sgres,
including environment variables, timeouts, the resource source, rendering
styles and colors, and exit codes.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import MISSING, asdict, dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self, get_args, get_origin


@dataclass
class EnvironmentVariables:
    """Environment variable names used by sgres."""

    # Enables sgres debug mode.
    debug_mode: str = "SGRES_DEBUG"
    # Name of the resource source backend to use.
    source: str = "SGRES_SOURCE"
    # Color mode (auto, always, never).
    color: str = "SGRES_COLOR"
    # Set by pseudo-terminal wrappers and users to force colored output.
    force_color: str = "FORCE_COLOR"
    # Disables colored output in auto mode.
    no_color: str = "NO_COLOR"


@dataclass
class TimeoutSettings:
    """Timeout settings in seconds."""

    # Timeout for a single query of the cluster manager.
    query: int = 10


@dataclass
class SourceSettings:
    """Settings for selecting the resource source."""

    # Name of the backend used when neither --source nor the environment variable is set.
    backend: str = "slurm"


@dataclass
class SlurmOptions:
    """Options associated with Slurm."""

    # Executable used to query node information.
    scontrol: str = "scontrol"


@dataclass
class RenderSettings:
    """Settings shared by all rendering styles."""

    # Style used when -s/--style is not provided.
    default_style: str = "default"
    # Color mode used when neither --color nor the environment variable is set.
    color: str = "auto"
    # Fixed output width. If not set, the width of the terminal is used.
    width: int | None = None
    # Minimal width of paneled output.
    min_width: int | None = 60
    # Maximal width of paneled output.
    max_width: int | None = None

    # Mark used to denote nodes.
    state_mark: str = "●"
    # Style used for the mark and counts if all units are free.
    free_style: str = "bright_green bold"
    # Style used for the mark and counts if some units are free.
    part_free_style: str = "green"
    # Style used for the mark and counts if no unit is free.
    busy_style: str = "blue"

    # Character printed for every used unit in the usage column.
    used_unit_char: str = "u"
    # Character printed for every idle unit in the usage column.
    idle_unit_char: str = "i"
    # Style of the used units.
    used_unit_style: str = "red"
    # Style of the idle units.
    idle_unit_style: str = "green"
    # Resources with more units are shown as `used/total` instead of a bar.
    max_usage_units: int = 64

    # Style used for the summary of totals.
    summary_style: str = "grey70"
    # Style used for the note printed when nothing matches.
    empty_note_style: str = "grey50"


@dataclass
class StateColors:
    """Color scheme for node states."""

    idle: str = "green"
    mixed: str = "blue"
    allocated: str = "magenta"
    completing: str = "magenta"
    draining: str = "yellow"
    drained: str = "yellow"
    down: str = "red"
    failing: str = "red"
    reserved: str = "cyan"
    maintenance: str = "cyan"
    planned: str = "cyan"
    powered_down: str = "grey50"
    future: str = "grey50"
    unknown: str = "grey70"


@dataclass
class StyleSpec:
    """
    A named rendering preset.

    Column keys understood by the renderer: mark, node, partition, gres,
    count, used, free, usage, cpus, memory, state.
    """

    # Columns to show, in order.
    columns: list[str] = field(
        default_factory=lambda: ["node", "partition", "gres", "free", "state"]
    )
    # Name of a box in `rich.box` (e.g. "ASCII", "ROUNDED"). Empty string means no box.
    box: str = ""
    # Print the header row.
    show_header: bool = True
    # Draw the outer edge of the box.
    show_edge: bool = True
    # Draw separators between rows.
    show_lines: bool = False
    # Horizontal padding of the cells.
    padding: int = 1
    # Wrap the table in a titled panel.
    panel: bool = False
    # Title of the panel.
    title: str = "GENERIC RESOURCES"
    # Print totals below the table.
    show_summary: bool = False
    # Natural sort of the entries by node name.
    sort: bool = False
    # Style used for the header row.
    header_style: str = "bold"
    # Style used for border lines.
    border_style: str = "white"
    # Style used for the title.
    title_style: str = "white bold"
    # Per-style overrides of the state colors.
    state_colors: dict[str, str] = field(default_factory=dict)


def _builtin_styles() -> dict[str, StyleSpec]:
    return {
        "default": StyleSpec(
            columns=["node", "cpus", "memory", "gres", "usage", "state"],
            box="ASCII",
            show_lines=True,
            header_style="",
        ),
        "modern": StyleSpec(
            columns=[
                "mark",
                "node",
                "partition",
                "gres",
                "free",
                "cpus",
                "memory",
                "state",
            ],
            box="",
            panel=True,
            show_summary=True,
            sort=True,
        ),
        "compact": StyleSpec(
            columns=["node", "partition", "gres", "count", "used", "state"],
            box="",
            show_edge=False,
            header_style="",
        ),
    }


@dataclass
class SizeOptions:
    """Options associated with the Size dataclass."""

    # Maximal error acceptable when rounding Size values for display.
    max_rounding_error: float = 0.1


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by sgres.
    standard: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes used for various errors."""

    # Default error code for failures of sgres.
    default: int = 1
    # Returned when the command line arguments are invalid.
    usage: int = 1
    # Returned when the cluster manager cannot be queried.
    source_unavailable: int = 2
    # Returned when the output of the cluster manager cannot be parsed.
    parse_error: int = 3
    # Returned when the requested style does not exist.
    unknown_style: int = 3
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 99


@dataclass
class Config:
    """Main configuration for sgres."""

    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    timeouts: TimeoutSettings = field(default_factory=TimeoutSettings)
    source: SourceSettings = field(default_factory=SourceSettings)
    slurm_options: SlurmOptions = field(default_factory=SlurmOptions)
    render: RenderSettings = field(default_factory=RenderSettings)
    state_colors: StateColors = field(default_factory=StateColors)
    styles: dict[str, StyleSpec] = field(default_factory=_builtin_styles)
    size: SizeOptions = field(default_factory=SizeOptions)
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)

    # Name of the sgres binary.
    binary_name: str = "sgres"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load configuration from TOML file or use defaults.

        Args:
            config_path: Explicit path to config file. If None, searches standard locations.

        Returns:
            Config instance with loaded or default values.
        """
        if config_path is None:
            config_path = Config._get_config_path()

        try:
            if config_path and config_path.exists():
                with config_path.open("rb") as f:
                    config_data = tomllib.load(f)
                return _dict_to_dataclass(cls, config_data)
        except Exception as e:
            raise ValueError(f"Could not read sgres config '{config_path}': {e}.")

        # no config found - use defaults
        return cls()

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Search for config file in standard locations (XDG compliant).
        Returns the first existing config file, or None.
        """
        config_locations: list[Path | None] = [
            # 1. Explicit environment variable (highest priority)
            Path(env_path) if (env_path := os.getenv("SGRES_CONFIG")) else None,
            # 2. Current working directory (for development/override)
            Path.cwd() / "sgres_config.toml",
            # 3. XDG config home (standard user config location)
            Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
            / "sgres"
            / "config.toml",
        ]

        for path in config_locations:
            if path and path.is_file():
                return path

        return None


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Recursively convert a dictionary to a dataclass instance.
    Handles nested dataclasses and mappings of names to dataclasses.
    """
    if not is_dataclass(cls):
        return data

    field_values = {}
    for field_info in fields(cls):
        field_name = field_info.name
        field_type = field_info.type

        if field_name not in data:
            continue

        value = data[field_name]
        if is_dataclass(field_type) and isinstance(value, dict):
            field_values[field_name] = _dict_to_dataclass(field_type, value)
        elif _is_dataclass_mapping(field_type) and isinstance(value, dict):
            field_values[field_name] = _merge_dataclass_mapping(
                field_info, get_args(field_type)[1], value
            )
        else:
            field_values[field_name] = value

    return cls(**field_values)


def _is_dataclass_mapping(field_type) -> bool:
    """Check whether the field type is `dict[str, <dataclass>]`."""
    if get_origin(field_type) is not dict:
        return False

    args = get_args(field_type)
    return len(args) == 2 and is_dataclass(args[1])


def _merge_dataclass_mapping(field_info, item_type, data: dict[str, Any]) -> dict:
    """
    Convert a mapping of names to dictionaries into a mapping of names to dataclasses.

    Items present in the default value of the field are kept; provided items
    override only the attributes they specify.
    """
    merged = (
        dict(field_info.default_factory())
        if field_info.default_factory is not MISSING
        else {}
    )

    for key, item in data.items():
        if not isinstance(item, dict):
            raise TypeError(f"Entry '{key}' of '{field_info.name}' must be a table.")

        if (base := merged.get(key)) is not None:
            item = {**asdict(base), **item}
        merged[key] = _dict_to_dataclass(item_type, item)

    return merged


# Global configuration for sgres.
CFG = Config.load()
