"""CLI bootstrap for kpi-tracker."""

import json
import logging
from datetime import datetime
from pathlib import Path

import typer
from pydantic import ValidationError

from kpi_tracker.application.schemas.kpi_values import KpiHistoryRequest
from kpi_tracker.core.settings import get_settings
from kpi_tracker.domain.decimal_value import DecimalValue
from kpi_tracker.domain.entities import Kpi
from kpi_tracker.domain.errors import DomainError
from kpi_tracker.domain.period import MonthLocale, Period
from kpi_tracker.infrastructure.repositories.in_memory import (
    InMemoryKpiValueRepository,
)
from kpi_tracker.services.kpi_value_service import KpiValueService

app = typer.Typer(help="CLI for KPI value formatting and aggregation.")
INPUT_FILE_OPTION = typer.Option(..., exists=True, dir_okay=False)


@app.callback()
def configure_logging() -> None:
    """Configure process logging from settings."""
    logging.basicConfig(level=get_settings().log_level.upper())


def _fail(error: DomainError) -> typer.Exit:
    typer.echo(error.message, err=True)
    return typer.Exit(code=1)


def _load_history(input: Path) -> tuple[Kpi, KpiValueService]:
    try:
        payload = json.loads(input.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"Input file is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    try:
        request = KpiHistoryRequest.model_validate(payload)
    except ValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    kpi = Kpi(
        name=request.kpi.name,
        interval=request.kpi.interval,
        owner_id=request.kpi.owner_id,
        target=request.kpi.target,
        unit=request.kpi.unit,
        description=request.kpi.description,
    )
    service = KpiValueService(
        value_repository=InMemoryKpiValueRepository(),
        trend_window=get_settings().trend_window,
    )
    for value in request.values:
        try:
            service.record_value(kpi, value)
        except DomainError as exc:
            raise _fail(exc) from exc
    return kpi, service


@app.command("format-value")
def format_value(value: str) -> None:
    """Validate a comma-decimal value and print its normalized form."""
    try:
        typer.echo(DecimalValue.parse(value).format())
    except DomainError as exc:
        raise _fail(exc) from exc


@app.command("period-name")
def period_name(
    period: str,
    locale: MonthLocale | None = typer.Option(None, help="Month name locale."),
) -> None:
    """Print the human readable name of a YYYY-MM period."""
    try:
        parsed = Period.parse(period)
    except DomainError as exc:
        raise _fail(exc) from exc
    typer.echo(parsed.display_name(locale or get_settings().locale))


@app.command("summarize")
def summarize(
    input: Path = INPUT_FILE_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Summarize the values of one KPI from a JSON input file."""
    kpi, service = _load_history(input)
    report = service.summarize(kpi).to_report(get_settings().locale)

    if as_json:
        typer.echo(report.model_dump_json(indent=2))
        return

    typer.echo(f"KPI: {report.kpi_name}")
    typer.echo(f"Entries: {report.total_entries}")
    latest_name = report.latest_period_name or "-"
    typer.echo(f"Latest: {report.latest_value or '-'} ({latest_name})")
    average = "-" if report.average_value is None else f"{report.average_value:.2f}"
    typer.echo(f"Average: {average}")
    typer.echo(f"Maximum: {report.max_value or '-'} ({report.max_period or '-'})")
    typer.echo(f"Target: {report.target or '-'}")
    typer.echo(f"Trend: {report.trend}")


@app.command("status")
def status(
    input: Path = INPUT_FILE_OPTION,
    today: datetime | None = typer.Option(None, formats=["%Y-%m-%d"]),
) -> None:
    """Print the green/yellow/red status of one KPI."""
    kpi, service = _load_history(input)
    settings = get_settings()
    day = today.date() if today else datetime.now(tz=settings.zone).date()
    result = service.status(kpi, today=day, warning_days=settings.warning_days)
    typer.echo(f"Period: {kpi.current_period(day).format()}")
    typer.echo(f"Status: {result}")


def main() -> None:
    """Run the kpi-tracker CLI application."""
    app()


if __name__ == "__main__":
    main()
