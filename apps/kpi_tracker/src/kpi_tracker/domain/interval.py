"""Recurrence intervals for KPI reporting."""

from __future__ import annotations

import enum
from datetime import date

from kpi_tracker.domain.period import Period


class KpiInterval(enum.StrEnum):
    """How often a KPI expects a new value."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    @property
    def months(self) -> int:
        """Number of months covered by one reporting period."""
        return 3 if self is KpiInterval.QUARTERLY else 1

    @property
    def label(self) -> str:
        return "Monthly" if self is KpiInterval.MONTHLY else "Quarterly"

    def period_for(self, value: date) -> Period:
        """Return the reporting period containing the given date.

        Quarterly periods are keyed by the first month of the quarter.
        """
        if self is KpiInterval.QUARTERLY:
            first_month = (value.month - 1) // 3 * 3 + 1
            return Period(year=value.year, month=first_month)
        return Period.from_date(value)

    def next_period(self, period: Period) -> Period:
        return period.shift(self.months)

    def previous_period(self, period: Period) -> Period:
        return period.shift(-self.months)

    def due_date(self, period: Period) -> date:
        """Return the date a value for the period is due, the next period start."""
        return self.next_period(period).first_day()
