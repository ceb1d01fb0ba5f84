# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys

import click
from click import HelpFormatter
from click_help_colors import HelpColorsCommand

from .config import CFG


class GNUHelpFormatter(HelpFormatter):
    """Help formatter printing options in GNU-style with colored headings."""

    def __init__(self, width=None, headers_color=None, options_color=None):
        super().__init__(width=width)
        self.headers_color = headers_color or "white"
        self.options_color = options_color or "white"

    def write_heading(self, heading):
        self.write(f"{click.style(heading, fg=self.headers_color, bold=True)}\n")

    def write_usage(self, prog_name, args="", prefix=None):
        styled_prefix = click.style(prefix or "Usage:", fg=self.headers_color, bold=True)
        self.write(f"{styled_prefix} {prog_name} {args}".rstrip() + "\n")

    def write_dl(self, rows, col_max=30, col_spacing=2):
        _ = col_max, col_spacing
        for term, definition in rows:
            self.write(f"  {click.style(term, fg=self.options_color, bold=True)}\n")

            for line in (definition or "").splitlines():
                if line.strip():
                    self.write(f"      {line}\n")
            self.write("\n")


class GNUHelpColorsCommand(HelpColorsCommand):
    """
    Command printing its help in GNU-style.

    Errors detected by click while parsing the command line (missing arguments,
    unknown options) are reported together with the usage on standard error
    and terminate the process with the configured usage exit code.
    """

    def get_help(self, ctx):
        formatter = GNUHelpFormatter(
            width=ctx.terminal_width,
            headers_color=getattr(self, "help_headers_color", "white"),
            options_color=getattr(self, "help_options_color", "white"),
        )

        self.format_help(ctx, formatter)
        return formatter.getvalue()

    def main(self, *args, standalone_mode: bool = True, **kwargs):
        if not standalone_mode:
            return super().main(*args, standalone_mode=False, **kwargs)

        try:
            return super().main(*args, standalone_mode=False, **kwargs)
        except click.UsageError as e:
            e.show()
            sys.exit(CFG.exit_codes.usage)
        except click.ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(CFG.exit_codes.default)
