"""
CLI: ``manifail schedule`` -- preview backoff delay schedules.
"""

from __future__ import annotations

import typer

from manifail.cli.utils import fail, output_schedule
from manifail.core.errors import InvalidSignalError
from manifail.execution.schedules import (
    BackoffSchedule,
    ConstantBackoff,
    ExponentialBackoff,
    LinearBackoff,
)

app = typer.Typer(no_args_is_help=True)


def _render(schedule: BackoffSchedule, as_json: bool) -> None:
    try:
        delays = schedule.delays()
    except InvalidSignalError as e:
        fail(e.message, code=e.kind.value)
    output_schedule(delays, as_json=as_json, title=type(schedule).__name__)


@app.command("constant")
def constant(
    retries: int = typer.Option(3, "--retries", "-n", help="Number of retries"),
    delay: float = typer.Option(1.0, "--delay", "-d", help="Delay in seconds"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Same delay before every retry."""
    _render(ConstantBackoff(max_retries=retries, delay=delay), as_json)


@app.command("linear")
def linear(
    retries: int = typer.Option(3, "--retries", "-n", help="Number of retries"),
    base: float = typer.Option(1.0, "--base", "-b", help="First delay in seconds"),
    increment: float = typer.Option(1.0, "--increment", "-i", help="Added per retry"),
    max_delay: float = typer.Option(30.0, "--max-delay", help="Cap in seconds"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delay grows by a fixed increment."""
    _render(
        LinearBackoff(max_retries=retries, base_delay=base, increment=increment, max_delay=max_delay),
        as_json,
    )


@app.command("exponential")
def exponential(
    retries: int = typer.Option(3, "--retries", "-n", help="Number of retries"),
    base: float = typer.Option(1.0, "--base", "-b", help="First delay in seconds"),
    multiplier: float = typer.Option(2.0, "--multiplier", "-m", help="Growth factor"),
    max_delay: float = typer.Option(60.0, "--max-delay", help="Cap in seconds"),
    jitter: bool = typer.Option(False, "--jitter/--no-jitter", help="Randomise each delay"),
    jitter_range: float = typer.Option(0.25, "--jitter-range", help="Jitter as fraction of delay"),
    seed: int | None = typer.Option(None, "--seed", help="Seed for reproducible jitter"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delay multiplies on every retry."""
    _render(
        ExponentialBackoff(
            max_retries=retries,
            base_delay=base,
            max_delay=max_delay,
            multiplier=multiplier,
            jitter=jitter,
            jitter_range=jitter_range,
            seed=seed,
        ),
        as_json,
    )
