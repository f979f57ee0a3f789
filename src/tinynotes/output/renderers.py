"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tinynotes.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from tinynotes.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(_extract_key(item) for item in items)
    if result.op == "get_note":
        return str(result.data.get("content", ""))
    for key in ("path", "name"):
        if key in result.data:
            return str(result.data[key])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_key(item: Any) -> str:
    """Path for note rows, name for subject rows."""
    if isinstance(item, dict):
        return str(item.get("path") or item.get("name") or "")
    return str(item)


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="tn.ok")
    op = Text(f"  {result.op}", style="tn.op")
    console.print(Text.assemble(label, op))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="tn.key")
    if key == "path":
        v = Text(str(value), style="tn.path")
    elif key in ("name", "subject"):
        v = Text(str(value), style="tn.subject")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text.assemble(Text("  warning: ", style="tn.warning"), Text(warning)))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including the telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"

    line = Text.assemble(prefix, Text(f"{duration:>8.2f}ms", style=style), "  ", Text(str(name)))
    annotations = span_data.get("annotations") or {}
    if annotations:
        tags = ", ".join(f"{k}={v}" for k, v in annotations.items())
        line.append(Text(f"  ({tags})", style="dim"))
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="tn.error")
    op = Text(f"  {result.op}", style="tn.op")
    console.print(Text.assemble(label, op, " — ", msg))
    if err is not None:
        console.print(Text(f"  code: {err.code}", style="tn.key"))
        if verbose and err.detail:
            for key, value in err.detail.items():
                _field(console, key, value)


# ── Operation renderers ───────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/rename/move/delete/save results."""
    _status_line(console, result)
    for key in ("name", "path", "saved_at", "deleted_files", "user", "root"):
        if key in result.data:
            _field(console, key, result.data[key])
    _render_warnings(console, result)
    if verbose:
        _render_meta(console, result)


def _render_subject_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    if items:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Subject", style="tn.subject", no_wrap=True)
        table.add_column("Icon")
        for item in items:
            icon = item.get("icon")
            table.add_row(Text(str(item.get("name", ""))), Text("" if icon is None else str(icon)))
        console.print(table)
    else:
        console.print(Text("No subjects.", style="dim"))
    if verbose:
        _render_meta(console, result)


def _render_note_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No notes.", style="dim"))
    else:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Path", style="tn.path", no_wrap=True)
        table.add_column("Subject", style="tn.subject")
        table.add_column("Modified", style="tn.time")
        for item in items:
            table.add_row(
                Text(str(item.get("path", ""))),
                Text(str(item.get("subject") or "")),
                Text(str(item.get("mtime", ""))),
            )
        console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_note(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a note's content inside a titled panel."""
    path = str(result.data.get("path", "?"))
    content = str(result.data.get("content", ""))
    body = Text(content) if content else Text("(empty)", style="dim")
    console.print(Panel(body, title=Text(path), expand=False))
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    _render_warnings(console, result)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Mutations
    "init_user": _render_mutation,
    "create_subject": _render_mutation,
    "rename_subject": _render_mutation,
    "delete_subject": _render_mutation,
    "create_note": _render_mutation,
    "save_note": _render_mutation,
    "delete_note": _render_mutation,
    "rename_note": _render_mutation,
    "move_note": _render_mutation,
    # Reads
    "list_subjects": _render_subject_table,
    "list_notes": _render_note_table,
    "get_note": _render_note,
}
