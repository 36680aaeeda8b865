"""
CLI utility helpers: manifest importing and output formatting.
"""

from __future__ import annotations

import importlib
import importlib.util
import json
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from haute.binding.models import Call

console = Console()
err_console = Console(stderr=True)


# ── Manifest import ──────────────────────────────────────────────────────


def load_manifest(ref: str) -> Any:
    """
    Import a manifest from ``module:attribute`` or ``path/to/file.py:attribute``.

    The attribute defaults to ``MANIFEST`` when omitted.
    """
    target, _, attribute = ref.partition(":")
    attribute = attribute or "MANIFEST"

    if target.endswith(".py"):
        path = Path(target)
        if not path.exists():
            fail(f"File not found: {target}")

        spec = importlib.util.spec_from_file_location("_haute_manifest", path)
        if spec is None or spec.loader is None:
            fail(f"Cannot load module from: {target}")

        module = importlib.util.module_from_spec(spec)
        sys.modules["_haute_manifest"] = module
        spec.loader.exec_module(module)
    else:
        module = importlib.import_module(target)

    manifest = getattr(module, attribute, None)
    if manifest is None:
        fail(
            f"Variable '{attribute}' not found in {target}. "
            f"Available: {[n for n in dir(module) if not n.startswith('_')]}"
        )
    return manifest


# ── Output helpers ───────────────────────────────────────────────────────


def fail(message: str, code: int = 1) -> None:
    """Print a red error line and exit."""
    err_console.print(f"[bold red]Error[/bold red]: {message}", soft_wrap=True)
    raise typer.Exit(code=code)


def output_plan(calls: list[Call], *, as_json: bool = False, title: str = "") -> None:
    """Render a call plan as a table or JSON."""
    rows = [call.to_dict() for call in calls]

    if as_json:
        typer.echo(json.dumps(rows, indent=2, default=str))
        return

    if not rows:
        console.print("[dim]No calls resolved.[/dim]")
        return

    table = Table(title=title or None, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Method", style="cyan")
    table.add_column("Place")
    table.add_column("File", style="dim")
    table.add_column("Args")
    table.add_column("Flags", style="magenta")

    for index, row in enumerate(rows, start=1):
        flags = [
            name
            for name in ("lazy", "list", "dir_file", "use_filename", "direct")
            if row[name]
        ]
        table.add_row(
            str(index),
            row["method"],
            row["place"],
            row["file"],
            _truncate(json.dumps(row["args"], default=str)),
            ", ".join(flags),
        )

    console.print(table)


def _truncate(text: str, limit: int = 60) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"
