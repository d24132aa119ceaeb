"""Validated payloads and reports for KPI value handling."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    Field,
    PlainSerializer,
    PlainValidator,
)

from kpi_tracker.domain.decimal_value import DecimalValue
from kpi_tracker.domain.errors import FormatError
from kpi_tracker.domain.interval import KpiInterval
from kpi_tracker.domain.period import Period


def _to_decimal_value(value: Any) -> DecimalValue:
    if isinstance(value, DecimalValue):
        return value
    if not isinstance(value, str):
        raise ValueError("Decimal value must be a string such as 4750,25")
    try:
        return DecimalValue.parse(value.strip())
    except FormatError as exc:
        raise ValueError(exc.message) from exc


def _to_period(value: Any) -> Period:
    if isinstance(value, Period):
        return value
    if not isinstance(value, str):
        raise ValueError("Period must be a string such as 2024-09")
    try:
        return Period.parse(value.strip())
    except FormatError as exc:
        raise ValueError(exc.message) from exc


DecimalValueField = Annotated[
    DecimalValue,
    PlainValidator(_to_decimal_value),
    PlainSerializer(lambda value: value.format(), return_type=str),
]
PeriodField = Annotated[
    Period,
    PlainValidator(_to_period),
    PlainSerializer(lambda value: value.format(), return_type=str),
]


class KpiValueInput(BaseModel):
    """Form payload for recording one KPI value."""

    value: DecimalValueField
    period: PeriodField
    comment: str | None = Field(default=None, max_length=2000)


class KpiInput(BaseModel):
    """Payload describing a KPI definition."""

    name: str = Field(min_length=1, max_length=255)
    interval: KpiInterval = KpiInterval.MONTHLY
    owner_id: str = Field(default="local", min_length=1)
    target: DecimalValueField | None = None
    unit: str | None = Field(default=None, max_length=50)
    description: str | None = None


class KpiHistoryRequest(BaseModel):
    """A KPI definition together with its recorded values."""

    kpi: KpiInput
    values: list[KpiValueInput] = Field(default_factory=list)


class KpiSummaryReport(BaseModel):
    """Aggregated view of one KPI returned by services and the CLI."""

    kpi_name: str
    total_entries: int = Field(ge=0)
    latest_period: str | None
    latest_period_name: str | None
    latest_value: str | None
    average_value: float | None
    max_period: str | None
    max_value: str | None
    target: str | None
    trend: str
    stability: str
