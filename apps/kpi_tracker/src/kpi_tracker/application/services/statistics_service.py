"""Descriptive statistics and trend classification for KPI values."""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from kpi_tracker.application.services.aggregate_query import (
    average,
    chronological,
    latest,
    maximum,
    minimum,
)
from kpi_tracker.domain.decimal_value import DecimalValue
from kpi_tracker.domain.entities import KpiEntry

MIN_ENTRIES_FOR_ADVANCED_STATISTICS = 3
MIN_ENTRIES_FOR_TREND = 2
RISING_THRESHOLD = 5.0
FALLING_THRESHOLD = -5.0
VOLATILITY_THRESHOLD = 30.0


class TrendDirection(StrEnum):
    """Direction of the recent KPI development."""

    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"
    VOLATILE = "volatile"
    NO_DATA = "no_data"


@dataclass(frozen=True, slots=True)
class KpiTrend:
    """Trend of the most recent values of a KPI."""

    direction: TrendDirection
    percentage_change: float | None = None
    volatility: float = 0.0
    data_points: int = 0

    @classmethod
    def no_data(cls) -> KpiTrend:
        return cls(direction=TrendDirection.NO_DATA)

    @classmethod
    def from_data(
        cls,
        percentage_change: float,
        *,
        volatility: float = 0.0,
        data_points: int = 0,
    ) -> KpiTrend:
        """Classify a percentage change and volatility into a direction."""
        if data_points < MIN_ENTRIES_FOR_TREND:
            return cls.no_data()
        if volatility > VOLATILITY_THRESHOLD:
            direction = TrendDirection.VOLATILE
            percentage_change = None
        elif percentage_change > RISING_THRESHOLD:
            direction = TrendDirection.RISING
        elif percentage_change < FALLING_THRESHOLD:
            direction = TrendDirection.FALLING
        else:
            direction = TrendDirection.STABLE
        return cls(
            direction=direction,
            percentage_change=percentage_change,
            volatility=volatility,
            data_points=data_points,
        )

    def is_positive(self) -> bool:
        return self.direction in (TrendDirection.RISING, TrendDirection.STABLE)

    def strength(self) -> str:
        """Describe the magnitude of the percentage change."""
        if self.percentage_change is None:
            return "unknown"
        change = abs(self.percentage_change)
        if change >= 50:
            return "very strong"
        if change >= 20:
            return "strong"
        if change >= 10:
            return "moderate"
        if change >= 5:
            return "weak"
        return "minimal"


@dataclass(frozen=True, slots=True)
class KpiStatistics:
    """Descriptive statistics of all values recorded for a KPI."""

    total_entries: int
    average_value: float | None
    min_value: DecimalValue | None
    max_value: DecimalValue | None
    latest: KpiEntry | None
    oldest: KpiEntry | None
    trend: KpiTrend
    variance: float | None = None
    standard_deviation: float | None = None
    median: float | None = None

    @classmethod
    def empty(cls) -> KpiStatistics:
        return cls(
            total_entries=0,
            average_value=None,
            min_value=None,
            max_value=None,
            latest=None,
            oldest=None,
            trend=KpiTrend.no_data(),
        )

    def has_data(self) -> bool:
        return self.total_entries > 0

    def has_advanced_metrics(self) -> bool:
        return self.variance is not None and self.standard_deviation is not None

    def value_range(self) -> DecimalValue | None:
        if self.min_value is None or self.max_value is None:
            return None
        return DecimalValue(scaled=self.max_value.scaled - self.min_value.scaled)

    def coefficient_of_variation(self) -> float | None:
        if (
            self.standard_deviation is None
            or self.average_value is None
            or self.average_value == 0
        ):
            return None
        return abs(self.standard_deviation / self.average_value)

    def stability_rating(self) -> str:
        """Rate how stable the KPI is based on the coefficient of variation."""
        cv = self.coefficient_of_variation()
        if cv is None:
            return "unknown"
        if cv <= 0.1:
            return "very stable"
        if cv <= 0.2:
            return "stable"
        if cv <= 0.5:
            return "moderate"
        return "volatile"

    def to_dict(self) -> dict[str, Any]:
        value_range = self.value_range()
        return {
            "total_entries": self.total_entries,
            "average_value": self.average_value,
            "min_value": self.min_value.format() if self.min_value else None,
            "max_value": self.max_value.format() if self.max_value else None,
            "latest_value": self.latest.value.format() if self.latest else None,
            "oldest_value": self.oldest.value.format() if self.oldest else None,
            "range": value_range.format() if value_range else None,
            "trend": str(self.trend.direction),
            "variance": self.variance,
            "standard_deviation": self.standard_deviation,
            "median": self.median,
            "stability": self.stability_rating(),
        }


def calculate_trend(entries: list[KpiEntry], window: int = 3) -> KpiTrend:
    """Classify the development of the most recent ``window`` values.

    The percentage change runs from the oldest to the newest value of the
    window. Volatility is the standard deviation of the period-over-period
    percentage changes inside the window.
    """
    recent = chronological(entries)[-window:]
    if len(recent) < MIN_ENTRIES_FOR_TREND:
        return KpiTrend.no_data()

    values = [entry.value.to_float() for entry in recent]
    first, last = values[0], values[-1]
    if first == 0:
        return KpiTrend(
            direction=TrendDirection.STABLE,
            percentage_change=0.0,
            data_points=len(values),
        )

    percentage_change = (last - first) / abs(first) * 100
    step_changes = [
        (current - previous) / abs(previous) * 100
        for previous, current in zip(values, values[1:], strict=False)
        if previous != 0
    ]
    volatility = statistics.pstdev(step_changes) if len(step_changes) > 1 else 0.0
    return KpiTrend.from_data(
        percentage_change,
        volatility=volatility,
        data_points=len(values),
    )


def calculate_statistics(
    entries: list[KpiEntry],
    *,
    trend_window: int = 3,
    include_advanced: bool = True,
) -> KpiStatistics:
    """Build descriptive statistics for the entries of one KPI."""
    if not entries:
        return KpiStatistics.empty()

    ordered = chronological(entries)
    min_entry = minimum(ordered)
    max_entry = maximum(ordered)
    trend = calculate_trend(ordered, window=trend_window)

    variance = standard_deviation = median = None
    if include_advanced and len(ordered) >= MIN_ENTRIES_FOR_ADVANCED_STATISTICS:
        floats = [entry.value.to_float() for entry in ordered]
        variance = statistics.pvariance(floats)
        standard_deviation = statistics.pstdev(floats)
        median = statistics.median(floats)

    return KpiStatistics(
        total_entries=len(ordered),
        average_value=round(average(ordered), 2),
        min_value=min_entry.value if min_entry else None,
        max_value=max_entry.value if max_entry else None,
        latest=latest(ordered),
        oldest=ordered[0],
        trend=trend,
        variance=variance,
        standard_deviation=standard_deviation,
        median=median,
    )
