"""Rich rendering of ServiceResult for humans.

``resolve_identity`` renders as a provenance table: each merged setting,
its value and the layer that supplied it.  Other results are listed field
by field.  Failures show the message and error code, plus the detail
mapping when verbose.  Verbose runs append the stage timings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich import box
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from maelstrom.output.console import create_console, get_output, style_for_source

if TYPE_CHECKING:
    from rich.console import Console

    from maelstrom.services.result import ServiceResult

_SLOW_STAGE_MS = 100


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if not result.ok:
        _render_failure(console, result, verbose=verbose)
    elif result.op == "resolve_identity":
        _render_identity(console, result)
    else:
        _render_fields(console, result)

    timings = (result.meta or {}).get("telemetry")
    if verbose and timings:
        console.print()
        console.print(_timings_tree(timings))
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if result.ok:
        return f"OK: {result.op}"
    message = result.error.message if result.error else "Unknown error"
    return f"ERROR: {result.op}: {message}"


def _headline(console: Console, result: ServiceResult) -> None:
    status = ("OK", "mael.ok") if result.ok else ("ERROR", "mael.error")
    console.print(Text.assemble(status, "  ", (result.op, "mael.op")))


def _value_style(name: str) -> str:
    if name.endswith("_address"):
        return "mael.url"
    if name.endswith("_path"):
        return "mael.path"
    return ""


def _render_identity(console: Console, result: ServiceResult) -> None:
    data = result.data
    _headline(console, result)

    table = Table(box=box.SIMPLE_HEAD, pad_edge=False)
    table.add_column("Setting", style="mael.key", no_wrap=True)
    table.add_column("Value")
    table.add_column("Source")
    for name, source in data.get("sources", {}).items():
        value = data.get(name, "")
        if name == "session_lifetime_seconds":
            name, value = "session_lifetime", f"{value}s"
        table.add_row(
            name,
            Text(str(value), style=_value_style(name)),
            Text(source, style=style_for_source(source)),
        )
    console.print(table)

    settings_file = Text.assemble(
        ("settings file: ", "mael.key"), (str(data.get("settings_file", "")), "mael.path")
    )
    if data.get("settings_file_created"):
        settings_file.append("  (created with placeholder values)", style="mael.warning")
    console.print(settings_file)


def _render_fields(console: Console, result: ServiceResult) -> None:
    _headline(console, result)
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="mael.key", no_wrap=True)
    grid.add_column()
    for name, value in result.data.items():
        grid.add_row(name, Text(str(value), style=_value_style(name)))
    console.print(grid)


def _render_failure(console: Console, result: ServiceResult, *, verbose: bool) -> None:
    _headline(console, result)
    err = result.error
    if err is None:
        console.print(Text("Unknown error"))
        return
    console.print(Text(err.message))
    console.print(Text(f"code: {err.code}", style="dim"))
    if verbose and err.detail:
        detail = Table(box=None, title="detail", title_justify="left", show_header=False)
        detail.add_column(style="mael.key", no_wrap=True)
        detail.add_column()
        for key, value in err.detail.items():
            detail.add_row(key, Text(str(value)))
        console.print(detail)


def _span_label(span: dict[str, Any]) -> Text:
    duration = span.get("duration_ms") or 0.0
    label = Text(f"{duration:>8.2f}ms  ", style="mael.slow" if duration > _SLOW_STAGE_MS else "dim")
    label.append(span.get("name", "?"))
    annotations = span.get("annotations")
    if annotations:
        label.append("  " + ", ".join(f"{k}={v}" for k, v in annotations.items()), style="dim")
    return label


def _timings_tree(span: dict[str, Any]) -> Tree:
    tree = Tree(_span_label(span), guide_style="dim")
    for child in span.get("stages", []):
        tree.add(_span_label(child))
    return tree
