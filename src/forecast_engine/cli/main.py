"""Command line interface entry points."""
from __future__ import annotations

import json
from datetime import date
from typing import Any, Callable, Dict, Optional

import typer
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..config import get_settings
from ..core.cohorts import list_cohorts
from ..core.schemas import (
    AccuracySpec,
    ForecastMetric,
    ForecastQuerySpec,
    ForecastRunSpec,
    HistorySpec,
)
from ..logging_setup import configure_logging

app = typer.Typer(help="Order, revenue and average order value forecasts.")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides FE_LOG_LEVEL"),
) -> None:
    configure_logging(log_level or get_settings().log_level)


def _echo(payload: Dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, separators=(",", ":")))


def _execute(action: Callable[[], Dict[str, Any]]) -> None:
    try:
        payload = action()
    except (ValueError, ValidationError, SQLAlchemyError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)
    _echo(payload)


@app.command("run")
def run(
    metric: ForecastMetric = typer.Option(..., "--metric"),
    scope: Optional[str] = typer.Option(None, "--scope", help="Business unit (branch) id"),
    cohort: Optional[str] = typer.Option(None, "--cohort"),
    history_days: Optional[int] = typer.Option(None, "--history-days"),
    horizon_days: Optional[int] = typer.Option(None, "--horizon-days"),
    location: Optional[str] = typer.Option(None, "--location"),
) -> None:
    """Generate a forecast horizon and replace the stored run for its key."""

    from ..runner import run_forecast

    def _action() -> Dict[str, Any]:
        spec = ForecastRunSpec(
            metric=metric,
            scope_id=scope,
            cohort_id=cohort,
            history_days=history_days,
            horizon_days=horizon_days,
            location=location,
        )
        return run_forecast(spec)

    _execute(_action)


@app.command("show")
def show(
    metric: ForecastMetric = typer.Option(..., "--metric"),
    scope: Optional[str] = typer.Option(None, "--scope"),
    cohort: Optional[str] = typer.Option(None, "--cohort"),
    start: Optional[str] = typer.Option(None, "--start", help="YYYY-MM-DD, inclusive"),
    end: Optional[str] = typer.Option(None, "--end", help="YYYY-MM-DD, inclusive"),
) -> None:
    """Print stored forecasts for a key."""

    from ..runner import fetch_forecasts

    def _action() -> Dict[str, Any]:
        spec = ForecastQuerySpec(
            metric=metric,
            scope_id=scope,
            cohort_id=cohort,
            start_date=date.fromisoformat(start) if start else None,
            end_date=date.fromisoformat(end) if end else None,
        )
        return fetch_forecasts(spec)

    _execute(_action)


@app.command("accuracy")
def accuracy(
    metric: ForecastMetric = typer.Option(..., "--metric"),
    scope: Optional[str] = typer.Option(None, "--scope"),
    cohort: Optional[str] = typer.Option(None, "--cohort"),
    compare_days: Optional[int] = typer.Option(None, "--compare-days"),
) -> None:
    """Grade stored forecasts against the trailing window of actuals."""

    from ..runner import fetch_accuracy

    def _action() -> Dict[str, Any]:
        spec = AccuracySpec(
            metric=metric, scope_id=scope, cohort_id=cohort, compare_days=compare_days
        )
        return fetch_accuracy(spec)

    _execute(_action)


@app.command("history")
def history(
    metric: ForecastMetric = typer.Option(..., "--metric"),
    start: str = typer.Option(..., "--start", help="YYYY-MM-DD, inclusive"),
    end: str = typer.Option(..., "--end", help="YYYY-MM-DD, inclusive"),
    scope: Optional[str] = typer.Option(None, "--scope"),
    cohort: Optional[str] = typer.Option(None, "--cohort"),
) -> None:
    """Print daily historical aggregates."""

    from ..runner import fetch_history

    def _action() -> Dict[str, Any]:
        spec = HistorySpec(
            metric=metric,
            scope_id=scope,
            cohort_id=cohort,
            start_date=date.fromisoformat(start),
            end_date=date.fromisoformat(end),
        )
        return fetch_history(spec)

    _execute(_action)


@app.command("cohorts")
def cohorts() -> None:
    """List the cohort catalog."""

    _echo({"cohorts": [c.model_dump(exclude_none=True) for c in list_cohorts()]})


if __name__ == "__main__":
    app()
