"""manifail command-line interface (typer + rich)."""

from manifail.cli.app import app

__all__ = ["app"]
