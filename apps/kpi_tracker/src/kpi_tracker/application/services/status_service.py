"""Traffic-light status of a KPI for its current reporting period."""

from __future__ import annotations

from collections.abc import Iterable, Set
from datetime import date
from enum import StrEnum

from kpi_tracker.domain.entities import KpiEntry
from kpi_tracker.domain.interval import KpiInterval
from kpi_tracker.domain.period import Period

DEFAULT_WARNING_DAYS = 3


class KpiStatus(StrEnum):
    """Reporting status, ordered by severity."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {KpiStatus.GREEN: 1, KpiStatus.YELLOW: 2, KpiStatus.RED: 3}


def missed_period(
    interval: KpiInterval, periods: Set[Period], current_period: Period
) -> Period | None:
    """Return the previous period when the KPI has older values but skipped it."""
    previous_period = interval.previous_period(current_period)
    has_history = any(period < previous_period for period in periods)
    if has_history and previous_period not in periods:
        return previous_period
    return None


def calculate_status(
    interval: KpiInterval,
    entries: Iterable[KpiEntry],
    *,
    today: date,
    warning_days: int = DEFAULT_WARNING_DAYS,
) -> KpiStatus:
    """Return the status of a KPI on the given day.

    GREEN when the current period already has a value. RED when the KPI has
    history but the previous period was never reported. Otherwise YELLOW once
    the current period is due within ``warning_days``.
    """
    periods = {entry.period for entry in entries}
    current_period = interval.period_for(today)
    if current_period in periods:
        return KpiStatus.GREEN
    if missed_period(interval, periods, current_period) is not None:
        return KpiStatus.RED

    days_left = (interval.due_date(current_period) - today).days
    if days_left <= warning_days:
        return KpiStatus.YELLOW
    return KpiStatus.GREEN


def aggregate_status(statuses: Iterable[KpiStatus]) -> KpiStatus:
    """Return the most severe status, GREEN when there is none."""
    return max(statuses, key=lambda status: status.severity, default=KpiStatus.GREEN)
