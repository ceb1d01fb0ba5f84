# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from rich.console import Console

from sgres_lib.core.click_format import GNUHelpColorsCommand
from sgres_lib.core.config import CFG
from sgres_lib.core.error import SgresError, SourceUnavailable, UsageError
from sgres_lib.core.logger import get_logger
from sgres_lib.filter import FilterSpec, apply
from sgres_lib.render import ColorMode, Renderer, dump_yaml
from sgres_lib.source import SourceMeta

__version__ = "0.2.0"

logger = get_logger(__name__)

# support both --help and -h
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.command(
    short_help="List generic resources of the cluster.",
    help="""List generic resources (GRES) of the cluster whose name contains NAME.

Matching is case-insensitive. Use `--partition` to only show nodes of a partition
and `--style` to select the layout of the output. Styled output can be forced
into a pipe using `--color always`.

Exit codes: 0 success, 1 usage error, 2 cluster manager unavailable,
3 unparsable response or unknown style.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
    context_settings=_CONTEXT_SETTINGS,
)
@click.argument("name", metavar="NAME")
@click.option(
    "-p",
    "--partition",
    type=str,
    default=None,
    help="Only show nodes belonging to a partition containing this name.",
)
@click.option(
    "-s",
    "--style",
    type=str,
    default=None,
    help=f"Style of the output. [default: {CFG.render.default_style}]",
)
@click.option(
    "--color",
    type=click.Choice(["auto", "always", "never"], case_sensitive=False),
    default=None,
    help="Emit colors always, never, or only on a terminal. [default: auto]",
)
@click.option(
    "--source",
    type=str,
    default=None,
    help=f"Backend used to query the cluster. [default: {CFG.source.backend}]",
)
@click.option("--yaml", is_flag=True, help="Output the matching entries in YAML format.")
@click.version_option(__version__, "--version", prog_name=CFG.binary_name)
def cli(
    name: str,
    partition: str | None,
    style: str | None,
    color: str | None,
    source: str | None,
    yaml: bool,
) -> NoReturn:
    try:
        spec = FilterSpec(name, partition)
        style = style or CFG.render.default_style

        # fail on an unknown style before querying the cluster
        renderer = Renderer()
        renderer.getStyle(style)

        mode = ColorMode.fromStr(color) if color else ColorMode.fromEnvVarOrConfig()
        use_color = mode.resolve(sys.stdout)
        logger.debug(f"Color mode '{mode}' resolved to {use_color}.")

        Source = SourceMeta.obtain(source)
        logger.debug(f"Using source '{str(Source)}'.")
        if not Source.isAvailable():
            raise SourceUnavailable(
                f"Source '{str(Source)}' is not available on this machine."
            )
        entries = apply(Source.fetch(), spec)

        if yaml:
            output = dump_yaml(entries)
        else:
            width = CFG.render.width or Console().size.width
            output = renderer.render(entries, style, use_color, width)

        print(output, end="")
        sys.exit(0)
    except UsageError as e:
        logger.error(e)
        click.echo(click.get_current_context().get_usage(), err=True)
        sys.exit(e.exit_code)
    except SgresError as e:
        logger.error(e)
        sys.exit(e.exit_code)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
