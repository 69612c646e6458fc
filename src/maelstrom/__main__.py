"""Allow ``python -m maelstrom``."""

from maelstrom.cli import cli

cli()
