"""
Root Typer application for the manifail CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="manifail",
    help="manifail -- retry signals, delay schedules and settings.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from manifail import __version__

        typer.echo(f"manifail {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """manifail CLI -- preview delay schedules and inspect retry settings."""
    from manifail.core.logging import configure_logging
    from manifail.core.settings import get_settings

    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)


# ── Sub-command registration ─────────────────────────────────────────────

from manifail.cli.config import app as config_app  # noqa: E402
from manifail.cli.schedule import app as schedule_app  # noqa: E402

app.add_typer(schedule_app, name="schedule", help="Preview backoff delay schedules.")
app.add_typer(config_app, name="config", help="Configuration inspection.")


if __name__ == "__main__":
    app()
