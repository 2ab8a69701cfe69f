"""Entry point for ``python -m manifail``."""

from manifail.cli.app import app

app()
