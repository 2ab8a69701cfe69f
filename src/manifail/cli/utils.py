"""
CLI utility helpers -- output formatting.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def fail(message: str, *, code: str = "ERROR") -> NoReturn:
    """Print an error and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({code}): {message}")
    raise typer.Exit(code=1)


def output_schedule(delays: Sequence[float], *, as_json: bool = False, title: str = "") -> None:
    """Render a delay schedule with per-retry and cumulative wait."""
    if as_json:
        payload = {"delays": list(delays), "retries": len(delays), "total": sum(delays)}
        console.print_json(json.dumps(payload))
        return

    if not delays:
        console.print("[dim]Empty schedule: the first Reset ends the run.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    table.add_column("retry", justify="right")
    table.add_column("delay (s)", justify="right")
    table.add_column("cumulative (s)", justify="right")
    cumulative = 0.0
    for index, delay in enumerate(delays, start=1):
        cumulative += delay
        table.add_row(str(index), f"{delay:.3f}", f"{cumulative:.3f}")
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
