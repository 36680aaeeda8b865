"""Command-line interface for haute."""

from haute.cli.app import app

__all__ = ["app"]
