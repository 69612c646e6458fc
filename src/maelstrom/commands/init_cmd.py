"""init — write the default settings file."""

from __future__ import annotations

import click

from maelstrom.commands._base import MaelCommand
from maelstrom.commands._context import AppContext


@click.command(
    "init",
    cls=MaelCommand,
    examples="""\
  # Write placeholder settings to edit before the first start
  maelstrom --conf-path /etc/maelstrom/settings.yaml init

  # Reset an existing settings file to the defaults
  maelstrom --conf-path settings.yaml init --force""",
)
@click.option("--force", is_flag=True, help="Overwrite an existing settings file.")
@click.pass_obj
def init_cmd(app: AppContext, force: bool) -> None:
    """Write the default settings file at the resolved settings path."""
    app.emit(app.configuration_service().init_settings_file(force=force))
