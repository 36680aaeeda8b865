"""
Root Typer application for the haute CLI.

Inspection only: commands resolve manifests and print plans, they never
invoke methods on a host instance.
"""

from __future__ import annotations

from pathlib import Path

import typer
from typer import Typer

from haute.cli.utils import console, fail, load_manifest, output_plan
from haute.core.config import get_settings
from haute.core.errors import HauteError
from haute.core.logging import configure_logging

app = Typer(
    name="haute",
    help="haute: bind directories of argument files onto method calls.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from haute import __version__

        typer.echo(f"haute {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """haute CLI: inspect manifest call plans."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json,
    )


@app.command("plan")
def plan(
    manifest_ref: str = typer.Argument(
        ..., help="Manifest as module:attribute or path/to/file.py:attribute"
    ),
    instance: str = typer.Option(..., "--instance", "-i", help="Instance label"),
    dirname: Path | None = typer.Option(
        None, "--dirname", "-d", help="Default base directory for bones"
    ),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Resolve a manifest and show the calls it would make."""
    from haute.binding.resolver import resolve

    manifest = load_manifest(manifest_ref)

    try:
        calls = resolve(instance, manifest, dirname=dirname)
    except HauteError as e:
        fail(e.message)

    output_plan(calls, as_json=json_out, title=f"Plan: {instance}")


@app.command("config")
def show_config() -> None:
    """Show the effective settings."""
    settings = get_settings()
    for key, value in settings.model_dump().items():
        console.print(f"[cyan]{key}[/cyan] = {value!r}")


if __name__ == "__main__":
    app()
