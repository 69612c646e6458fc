"""Subcommand modules for maelstrom.

Provides register_commands() which uses deferred imports so
``maelstrom --help`` does not load the crypto stack.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from maelstrom.commands.check import check
    from maelstrom.commands.init_cmd import init_cmd

    cli.add_command(check)
    cli.add_command(init_cmd)
