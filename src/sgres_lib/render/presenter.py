# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import io
from dataclasses import dataclass, field

import yaml
from rich import box
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sgres_lib.core.common import get_panel_width, load_yaml_dumper, natural_sort_key
from sgres_lib.core.config import CFG, StyleSpec
from sgres_lib.core.error import UnknownStyle
from sgres_lib.core.logger import get_logger
from sgres_lib.properties.gres import GresEntry
from sgres_lib.properties.states import NodeState

logger = get_logger(__name__)
Dumper: type[yaml.Dumper] = load_yaml_dumper()

# headers and justification of the columns understood by the renderer
COLUMNS: dict[str, tuple[str, str]] = {
    "mark": ("", "center"),
    "node": ("Node", "left"),
    "partition": ("Partition", "left"),
    "gres": ("GRES", "left"),
    "count": ("Total", "right"),
    "used": ("Used", "right"),
    "free": ("Free", "center"),
    "usage": ("Usage", "left"),
    "cpus": ("CPUs", "center"),
    "memory": ("Memory", "center"),
    "state": ("State", "left"),
}

# states in which no new work can start on the node
_UNAVAILABLE_STATES = {
    NodeState.DOWN,
    NodeState.DRAINED,
    NodeState.DRAINING,
    NodeState.FAILING,
    NodeState.MAINTENANCE,
    NodeState.POWERED_DOWN,
    NodeState.FUTURE,
    NodeState.UNKNOWN,
}


@dataclass
class GresStats:
    """
    Collects and aggregates statistics for a list of generic resource entries.
    """

    # names of the nodes with at least one entry
    nodes: set[str] = field(default_factory=set)

    # names of the nodes with at least one free unit
    free_nodes: set[str] = field(default_factory=set)

    # number of units
    n_units: int = 0

    # number of free units
    n_free_units: int = 0

    def addEntry(self, entry: GresEntry) -> None:
        """
        Add a single entry to the totals.

        Args:
            entry (GresEntry): The entry to account for.
        """
        self.nodes.add(entry.node)
        self.n_units += entry.count
        self.n_free_units += entry.free
        if entry.free > 0:
            self.free_nodes.add(entry.node)

    def createStatsTable(self) -> Table:
        """
        Create a Rich table summarizing the aggregated statistics.

        Returns:
            Table: A Rich `Table` object with the total and free units and nodes.
        """
        table = Table(show_header=True, box=None, padding=(0, 1))

        style = CFG.render.summary_style

        table.add_column("", justify="left")
        table.add_column(Text("GRES", style=style), justify="center")
        table.add_column(Text("Nodes", style=style), justify="center")

        table.add_row(
            Text("Total", style=f"{style} bold"),
            Text(str(self.n_units), style=style),
            Text(str(len(self.nodes)), style=style),
        )
        table.add_row(
            Text("Free", style=f"{style} bold"),
            Text(str(self.n_free_units), style=style),
            Text(str(len(self.free_nodes)), style=style),
        )

        return table


class Renderer:
    """
    Formats generic resource entries under a named style.
    """

    def __init__(self, styles: dict[str, StyleSpec] | None = None):
        """
        Initialize the renderer with the available styles.

        Args:
            styles (dict[str, StyleSpec] | None): Styles by name. If None,
                the styles from the configuration are used.
        """
        self._styles = styles if styles is not None else CFG.styles

    def getStyle(self, name: str) -> StyleSpec:
        """
        Return a validated style.

        Args:
            name (str): Name of the style.

        Returns:
            StyleSpec: The style registered under `name`.

        Raises:
            UnknownStyle: If no such style exists or the style uses an unknown
                column or box.
        """
        if (style := self._styles.get(name)) is None:
            raise UnknownStyle(
                f"Unknown style '{name}'. Valid choices: {', '.join(self._styles)}."
            )

        for column in style.columns:
            if column not in COLUMNS:
                raise UnknownStyle(
                    f"Style '{name}' uses an unknown column '{column}'. "
                    f"Valid columns: {', '.join(COLUMNS)}."
                )

        if style.box and not isinstance(getattr(box, style.box, None), box.Box):
            raise UnknownStyle(f"Style '{name}' uses an unknown box '{style.box}'.")

        return style

    def render(
        self, entries: list[GresEntry], style: str, color: bool, width: int
    ) -> str:
        """
        Render the entries into a string.

        The output depends only on the arguments: identical entries, style,
        color flag and width always produce identical text.

        Args:
            entries (list[GresEntry]): Entries to render.
            style (str): Name of the style.
            color (bool): Emit ANSI styling.
            width (int): Width of the output in characters.

        Returns:
            str: The rendered text, ending with a newline.

        Raises:
            UnknownStyle: If the style does not exist or is invalid.
        """
        spec = self.getStyle(style)

        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=width,
            force_terminal=color,
            no_color=not color,
            color_system="standard" if color else None,
            markup=False,
            highlight=False,
            emoji=False,
            record=False,
        )

        console.print(self.createRenderable(entries, spec, console))
        return buffer.getvalue()

    def createRenderable(
        self, entries: list[GresEntry], spec: StyleSpec, console: Console
    ) -> RenderableType:
        """
        Build the Rich renderable for the entries under a style.

        Args:
            entries (list[GresEntry]): Entries to render.
            spec (StyleSpec): The validated style.
            console (Console): Console used to determine the available width.

        Returns:
            RenderableType: A table, or a panel containing the table.
        """
        if spec.sort:
            entries = sorted(
                entries, key=lambda e: (natural_sort_key(e.node), e.name)
            )

        table = self.createTable(entries, spec)

        parts: list[RenderableType] = [table]
        if spec.panel and not entries:
            parts.extend(
                [
                    "",
                    Text(
                        "No matching generic resources.",
                        style=CFG.render.empty_note_style,
                    ),
                ]
            )
        if spec.show_summary:
            stats = GresStats()
            for entry in entries:
                stats.addEntry(entry)
            parts.extend(["", stats.createStatsTable()])

        if not spec.panel:
            return Group(*parts) if len(parts) > 1 else table

        return Panel(
            Group(*parts),
            title=Text(spec.title, style=spec.title_style, justify="center"),
            border_style=spec.border_style,
            padding=(1, 1),
            width=get_panel_width(
                console, 1, CFG.render.min_width, CFG.render.max_width
            ),
            expand=False,
        )

    def createTable(self, entries: list[GresEntry], spec: StyleSpec) -> Table:
        """
        Create a Rich table with one row per entry.

        Args:
            entries (list[GresEntry]): Entries in display order.
            spec (StyleSpec): The validated style.

        Returns:
            Table: The table. Contains only the header if there are no entries.
        """
        table = Table(
            box=getattr(box, spec.box) if spec.box else None,
            show_header=spec.show_header,
            show_edge=spec.show_edge,
            show_lines=spec.show_lines,
            padding=(0, spec.padding),
            header_style=spec.header_style,
            border_style=spec.border_style,
        )

        for column in spec.columns:
            header, justify = COLUMNS[column]
            table.add_column(header=header, justify=justify, no_wrap=True)

        for entry in entries:
            table.add_row(
                *(self._formatCell(column, entry, spec) for column in spec.columns)
            )

        return table

    def _formatCell(self, column: str, entry: GresEntry, spec: StyleSpec) -> Text:
        """
        Format the value of a single column for an entry.
        """
        match column:
            case "mark":
                return Text(CFG.render.state_mark, style=self._markStyle(entry, spec))
            case "node":
                return Text(entry.node)
            case "partition":
                return Text(entry.partition)
            case "gres":
                return Text(entry.name)
            case "count":
                return Text(str(entry.count))
            case "used":
                return Text(str(entry.used))
            case "free":
                return Renderer._formatUnits(entry.free, entry.count)
            case "usage":
                return Renderer._formatUsage(entry.used, entry.free)
            case "cpus":
                return Text(f"{entry.free_cpus}/{entry.cpus}")
            case "memory":
                return Text(f"{entry.free_memory}/{entry.memory}")
            case "state":
                return self._formatState(entry, spec)

        raise UnknownStyle(f"Unknown column '{column}'.")

    def _stateStyle(self, state: NodeState, spec: StyleSpec) -> str:
        """
        Return the color of a state, preferring the overrides of the style.
        """
        name = str(state)
        if name in spec.state_colors:
            return spec.state_colors[name]
        return getattr(CFG.state_colors, name, CFG.state_colors.unknown)

    def _markStyle(self, entry: GresEntry, spec: StyleSpec) -> str:
        if entry.state in _UNAVAILABLE_STATES:
            return self._stateStyle(entry.state, spec)
        return Renderer._unitsStyle(entry.free, entry.count)

    def _formatState(self, entry: GresEntry, spec: StyleSpec) -> Text:
        """
        Format the state words of a node, each colored by the state it denotes.
        """
        if not entry.state_flags:
            return Text(str(entry.state), style=self._stateStyle(entry.state, spec))

        text = Text()
        for i, flag in enumerate(entry.state_flags):
            if i > 0:
                text.append(",")
            text.append(flag, style=self._stateStyle(NodeState.fromStr(flag), spec))

        return text

    @staticmethod
    def _unitsStyle(free: int, total: int) -> str:
        if total == 0:
            return ""
        if free == total:
            return CFG.render.free_style
        if free > 0:
            return CFG.render.part_free_style
        return CFG.render.busy_style

    @staticmethod
    def _formatUnits(free: int, total: int) -> Text:
        """
        Format numbers of free and total units as a styled Rich text element.
        """
        return Text(f"{free} / {total}", style=Renderer._unitsStyle(free, total))

    @staticmethod
    def _formatUsage(used: int, free: int) -> Text:
        """
        Draw one character per used unit followed by one character per idle unit.

        Resources with more than `CFG.render.max_usage_units` units
        are printed as `used/total`.
        """
        if used + free > CFG.render.max_usage_units:
            return Text(str(used), style=CFG.render.used_unit_style) + Text(
                f"/{used + free}"
            )

        return Text(
            CFG.render.used_unit_char * used, style=CFG.render.used_unit_style
        ) + Text(CFG.render.idle_unit_char * free, style=CFG.render.idle_unit_style)


def dump_yaml(entries: list[GresEntry]) -> str:
    """
    Serialize the entries to YAML, one mapping per entry.

    Args:
        entries (list[GresEntry]): Entries to serialize.

    Returns:
        str: The YAML document.
    """
    return yaml.dump(
        [e.toDict() for e in entries],
        default_flow_style=False,
        sort_keys=False,
        Dumper=Dumper,
    )
