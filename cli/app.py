from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_analytics, render_dashboard, render_reading


class MetricChoice(str, Enum):
    bpm = "BPM"
    spo2 = "SPO2"
    temperature = "temperature"


class WindowChoice(str, Enum):
    last_24_hours = "last-24-hours"
    last_7_days = "last-7-days"
    last_30_days = "last-30-days"
    all_time = "all-time"


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the vitals dashboard service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("register")
def register_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identifier."),
    name: Optional[str] = typer.Option(None, "--name", help="Display name."),
    email: Optional[str] = typer.Option(None, "--email", help="Contact email."),
) -> None:
    """Create the user's document if it does not exist."""
    state = _get_state(ctx)
    state.client.register(user_id, name=name, email=email)
    typer.secho(f"User {user_id} is registered.", fg=typer.colors.GREEN)


@app.command("dashboard")
def dashboard_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identifier."),
) -> None:
    """Show the latest and recent readings for every metric."""
    state = _get_state(ctx)
    render_dashboard(state.client.dashboard(user_id))


@app.command("analytics")
def analytics_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identifier."),
    metric: MetricChoice = typer.Argument(..., help="Metric to analyse."),
    window: Optional[WindowChoice] = typer.Option(
        None,
        "--window",
        "-w",
        help="Time window (server default when omitted).",
    ),
) -> None:
    """Show windowed readings with average, minimum and maximum."""
    state = _get_state(ctx)
    payload = state.client.analytics(
        user_id, metric.value, window.value if window is not None else None
    )
    render_analytics(payload)


@app.command("record")
def record_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identifier."),
    metric: MetricChoice = typer.Argument(..., help="Metric being recorded."),
    value: float = typer.Argument(..., help="Reading value."),
) -> None:
    """Record a reading taken by hand."""
    state = _get_state(ctx)
    render_reading(state.client.record(user_id, metric.value, value))


@app.command("measure")
def measure_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identifier."),
    metric: MetricChoice = typer.Argument(..., help="Metric to measure."),
) -> None:
    """Ask the device for a fresh reading and record it."""
    state = _get_state(ctx)
    typer.echo(f"Measuring {metric.value} ...")
    render_reading(state.client.measure(user_id, metric.value))


@app.command("chat")
def chat_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User identifier."),
    message: str = typer.Argument(..., help="Question for the health assistant."),
) -> None:
    """Ask the health assistant about your readings."""
    state = _get_state(ctx)
    typer.echo(state.client.chat(user_id, message))
