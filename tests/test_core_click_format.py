# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import click
import pytest
from click.testing import CliRunner

from sgres_lib.core.click_format import GNUHelpColorsCommand, GNUHelpFormatter
from sgres_lib.core.config import CFG


@click.command(cls=GNUHelpColorsCommand, help_options_color="bright_blue")
@click.argument("value")
@click.option("--flag", is_flag=True, help="A flag.\nSecond line.")
def dummy(value, flag):
    click.echo(f"{value} {flag}")


def test_formatter_write_dl_prints_terms_on_separate_lines():
    formatter = GNUHelpFormatter(width=80)
    formatter.write_dl([("--flag", "First line.\n\nSecond line.")])

    output = click.unstyle(formatter.getvalue())
    assert output == "  --flag\n      First line.\n      Second line.\n\n"


def test_formatter_write_usage():
    formatter = GNUHelpFormatter(width=80)
    formatter.write_usage("sgres", "[OPTIONS] NAME")

    assert click.unstyle(formatter.getvalue()) == "Usage: sgres [OPTIONS] NAME\n"


def test_command_runs_normally():
    result = CliRunner().invoke(dummy, ["x", "--flag"])

    assert result.exit_code == 0
    assert result.output == "x True\n"


def test_command_help_lists_options():
    result = CliRunner().invoke(dummy, ["--help"])

    assert result.exit_code == 0
    output = click.unstyle(result.output)
    assert "  --flag\n      A flag.\n      Second line.\n" in output


@pytest.mark.parametrize("args", [[], ["x", "--unknown"], ["x", "y"]])
def test_command_usage_errors_exit_with_usage_code(args):
    result = CliRunner().invoke(dummy, args)

    assert result.exit_code == CFG.exit_codes.usage
