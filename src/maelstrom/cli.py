"""Root CLI group for maelstrom with global and setting flags."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from maelstrom import __version__
from maelstrom.commands import register_commands
from maelstrom.commands._base import MaelGroup
from maelstrom.commands._context import AppContext
from maelstrom.config.schema import SETTING_SPECS
from maelstrom.output.formatters import OutputSettings

_F = Callable[..., Any]


def setting_options(func: _F) -> _F:
    """Add one string option per setting, in schema order.

    Values stay unparsed here; the CLI layer applies the discard rule.
    """
    for spec in reversed(SETTING_SPECS):
        decls = [spec.cli_flag, spec.name]
        if spec.name == "settings_file_path":
            decls.insert(0, "-c")
        func = click.option(
            *decls,
            default=None,
            metavar=spec.metavar,
            help=f"{spec.help} [env: {spec.env_var}]",
        )(func)
    return func


@click.group(
    cls=MaelGroup,
    invoke_without_command=True,
    examples="""\
  # Check that the server would start with the current configuration
  maelstrom --conf-path settings.yaml check

  # Create the default settings file
  maelstrom --conf-path settings.yaml init""",
)
@click.version_option(version=__version__, prog_name="maelstrom")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@setting_options
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    **cli_options: str | None,
) -> None:
    """maelstrom — layered server configuration (env > CLI > settings file)."""
    output = OutputSettings(json_output=json_output, quiet=quiet, verbose=verbose)
    ctx.obj = AppContext(output, cli_options, log_json=log_json)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
