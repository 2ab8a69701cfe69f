"""
CLI: ``manifail config`` -- configuration inspection.
"""

from __future__ import annotations

import typer

from manifail.cli.utils import console, print_dict

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the effective retry settings."""
    from manifail.core.settings import get_settings

    settings = get_settings()

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    if format == "env":
        for key, value in sorted(settings.model_dump(mode="json").items()):
            if value is None:
                continue
            if isinstance(value, list):
                value = "[" + ",".join(str(v) for v in value) + "]"
            console.print(f"MANIFAIL_{key.upper()}={value}")
        return

    from manifail.execution.driver import RetryPolicy

    policy = RetryPolicy.from_settings(settings)
    cap = "none" if policy.max_retries is None else policy.max_retries
    print_dict(
        {
            "default_delays": list(policy.delays) or "(empty)",
            "max_retries": cap,
            "log_level": settings.log_level,
            "log_json": "auto" if settings.log_json is None else settings.log_json,
        },
        title="Retry settings",
    )
