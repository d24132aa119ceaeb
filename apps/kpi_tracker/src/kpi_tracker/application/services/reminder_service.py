"""Selection of KPIs that need a reminder to record their next value."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from kpi_tracker.application.services.status_service import (
    DEFAULT_WARNING_DAYS,
    missed_period,
)
from kpi_tracker.domain.entities import Kpi, KpiEntry
from kpi_tracker.domain.period import Period

DEFAULT_MAX_REMINDERS = 5
OVERDUE_ESCALATION_DAYS = (1, 3, 7, 14)
CRITICAL_ESCALATION_LEVEL = 3


class ReminderType(StrEnum):
    """Reminder category, from least to most urgent."""

    UPCOMING = "upcoming"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"
    CRITICAL = "critical"


_BASE_URGENCY = {
    ReminderType.UPCOMING: 10,
    ReminderType.DUE_TODAY: 30,
    ReminderType.OVERDUE: 50,
    ReminderType.CRITICAL: 100,
}


@dataclass(frozen=True, slots=True)
class KpiReminder:
    """A KPI whose open reporting period is due soon or already overdue."""

    kpi: Kpi
    type: ReminderType
    period: Period
    due_date: date
    days_until_due: int | None = None
    days_overdue: int | None = None
    escalation_level: int = 1

    @property
    def urgency(self) -> int:
        return int(_BASE_URGENCY[self.type] * (1 + self.escalation_level * 0.5))


def escalation_level(days_overdue: int) -> int:
    """Map days past the due date to an escalation level starting at 1."""
    for level, threshold in enumerate(OVERDUE_ESCALATION_DAYS, start=1):
        if days_overdue <= threshold:
            return level
    return len(OVERDUE_ESCALATION_DAYS) + 1


def find_reminder(
    kpi: Kpi,
    entries: Iterable[KpiEntry],
    *,
    today: date,
    warning_days: int = DEFAULT_WARNING_DAYS,
) -> KpiReminder | None:
    """Return the reminder a KPI needs on the given day, if any.

    A skipped previous period is reported as due today or overdue. Otherwise
    the current period is reported as upcoming once its due date is within
    ``warning_days``.
    """
    periods = {entry.period for entry in entries}
    current_period = kpi.current_period(today)
    if current_period in periods:
        return None

    period = missed_period(kpi.interval, periods, current_period) or current_period
    due_date = kpi.interval.due_date(period)
    days_left = (due_date - today).days

    if days_left < 0:
        level = escalation_level(-days_left)
        reminder_type = (
            ReminderType.CRITICAL
            if level >= CRITICAL_ESCALATION_LEVEL
            else ReminderType.OVERDUE
        )
        return KpiReminder(
            kpi=kpi,
            type=reminder_type,
            period=period,
            due_date=due_date,
            days_overdue=-days_left,
            escalation_level=level,
        )
    if days_left == 0:
        return KpiReminder(
            kpi=kpi, type=ReminderType.DUE_TODAY, period=period, due_date=due_date
        )
    if days_left <= warning_days:
        return KpiReminder(
            kpi=kpi,
            type=ReminderType.UPCOMING,
            period=period,
            due_date=due_date,
            days_until_due=days_left,
        )
    return None


def calculate_reminders(
    kpis_with_entries: Iterable[tuple[Kpi, Iterable[KpiEntry]]],
    *,
    today: date,
    warning_days: int = DEFAULT_WARNING_DAYS,
    max_reminders: int = DEFAULT_MAX_REMINDERS,
) -> dict[ReminderType, list[KpiReminder]]:
    """Group due reminders by type, keeping at most ``max_reminders`` in total.

    The limit is filled from the most urgent category down, each category
    ordered by descending urgency.
    """
    groups: dict[ReminderType, list[KpiReminder]] = {
        reminder_type: [] for reminder_type in ReminderType
    }
    for kpi, entries in kpis_with_entries:
        reminder = find_reminder(
            kpi, entries, today=today, warning_days=warning_days
        )
        if reminder is not None:
            groups[reminder.type].append(reminder)

    remaining = max_reminders
    for reminder_type in reversed(ReminderType):
        ranked = sorted(
            groups[reminder_type], key=lambda item: item.urgency, reverse=True
        )
        groups[reminder_type] = ranked[: max(remaining, 0)]
        remaining -= len(groups[reminder_type])
    return groups
