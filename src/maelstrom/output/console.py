"""Buffered Rich console and the maelstrom theme.

Renderers draw on a console backed by StringIO and return the text, so
the caller decides between stdout and stderr.  A StringIO buffer is never
a TTY, so piped and test output carries no ANSI codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

LAYER_NAMES = ("environment", "cli", "file", "default")

MAELSTROM_THEME = Theme(
    {
        "mael.ok": "bold green",
        "mael.error": "bold red",
        "mael.warning": "bold yellow",
        "mael.op": "bold cyan",
        "mael.key": "dim",
        "mael.url": "bold blue",
        "mael.path": "dim",
        "mael.slow": "yellow",
        "mael.source.environment": "magenta",
        "mael.source.cli": "cyan",
        "mael.source.file": "green",
        "mael.source.default": "dim",
    }
)


def create_console(*, width: int = 120) -> Console:
    return Console(file=StringIO(), theme=MAELSTROM_THEME, highlight=False, width=width)


def get_output(console: Console) -> str:
    """Text drawn so far on a console from :func:`create_console`."""
    buffer = console.file
    if not isinstance(buffer, StringIO):
        msg = "console is not buffered"
        raise TypeError(msg)
    return buffer.getvalue()


def style_for_source(source: str) -> str:
    """Theme style for a provenance layer name; empty for anything else."""
    return f"mael.source.{source}" if source in LAYER_NAMES else ""
