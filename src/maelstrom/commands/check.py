"""check — resolve the layered configuration and report the result."""

from __future__ import annotations

import click

from maelstrom.commands._base import MaelCommand
from maelstrom.commands._context import AppContext


@click.command(
    cls=MaelCommand,
    examples="""\
  # Resolve using the settings file named by the environment
  MAELSTROM_CONF_PATH=/etc/maelstrom/settings.yaml maelstrom check

  # Override the server address for this run only
  maelstrom --conf-path settings.yaml --server-address https://0.0.0.0:8443/ check

  # Machine-readable summary with stage timings
  maelstrom --json -v --conf-path settings.yaml check""",
)
@click.pass_obj
def check(app: AppContext) -> None:
    """Resolve env, CLI and settings file into the server identity.

    Loads the signing key too, so a zero exit means the server would start
    with this configuration.
    """
    app.emit(app.configuration_service().resolve_identity())
