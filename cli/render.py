from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_UNITS = {"BPM": " BPM", "SPO2": "%", "temperature": "°C"}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _reading_line(metric: str, reading: Dict[str, Any]) -> str:
    return f"  - {reading.get('timestamp')}: {reading.get('value')}{_UNITS.get(metric, '')}"


def render_reading(payload: Dict[str, Any]) -> None:
    metric = payload.get("metric", "")
    reading = payload.get("reading") or {}
    echo_heading(f"{metric} recorded")
    echo_key_values([("timestamp", reading.get("timestamp")), ("value", reading.get("value"))])


def render_analytics(payload: Dict[str, Any]) -> None:
    metric = payload.get("metric", "")
    echo_heading(f"{metric} Analytics ({payload.get('window')})")
    summary = payload.get("summary") or {}
    echo_key_values(
        [
            ("average", summary.get("average")),
            ("minimum", summary.get("minimum")),
            ("maximum", summary.get("maximum")),
        ]
    )
    skipped = payload.get("skipped") or 0
    if skipped:
        typer.secho(f"{skipped} malformed entries were left out.", fg=typer.colors.YELLOW)

    points = payload.get("points") or []
    typer.echo()
    echo_heading("Readings")
    if points:
        for point in points:
            typer.echo(_reading_line(metric, point))
    else:
        typer.echo(f"No {metric} data available")


def render_dashboard(payload: Dict[str, Any]) -> None:
    echo_heading(f"Health Dashboard for {payload.get('user_id')}")
    if not payload.get("has_profile"):
        typer.secho("No medical profile on record.", fg=typer.colors.YELLOW)

    for metric, overview in (payload.get("metrics") or {}).items():
        typer.echo()
        latest = overview.get("latest")
        latest_text = (
            f"{latest.get('value')}{_UNITS.get(metric, '')}" if latest else "No data"
        )
        echo_heading(f"{metric}: {latest_text}")
        for reading in overview.get("recent") or []:
            typer.echo(_reading_line(metric, reading))
