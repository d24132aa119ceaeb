"""Aggregate queries over the recorded values of a single KPI.

Callers supply the entries of one KPI in any order. Duplicated periods are
accepted here; uniqueness per (KPI, period) is the service layer's concern.
"""

from __future__ import annotations

from collections.abc import Iterable

from kpi_tracker.domain.decimal_value import SCALE
from kpi_tracker.domain.entities import KpiEntry
from kpi_tracker.domain.errors import (
    EmptyInputError,
    NotFoundError,
    compose_error_message,
)


def latest(entries: Iterable[KpiEntry]) -> KpiEntry | None:
    """Return the entry with the greatest period, or None when empty.

    When a period appears more than once, the first supplied entry wins.
    """
    best: KpiEntry | None = None
    for entry in entries:
        if best is None or entry.period > best.period:
            best = entry
    return best


def require_latest(entries: Iterable[KpiEntry]) -> KpiEntry:
    """Return the latest entry or raise NotFoundError when empty."""
    entry = latest(entries)
    if entry is None:
        raise NotFoundError(
            compose_error_message(
                cause="The KPI has no recorded values yet.",
                action="Record a value before requesting the latest one.",
            )
        )
    return entry


def average(entries: Iterable[KpiEntry]) -> float:
    """Return the arithmetic mean of all entry values."""
    scaled_values = [entry.value.scaled for entry in entries]
    if not scaled_values:
        raise EmptyInputError()
    return sum(scaled_values) / (len(scaled_values) * SCALE)


def maximum(entries: Iterable[KpiEntry]) -> KpiEntry | None:
    """Return the entry with the greatest value; ties go to the earliest period."""
    best: KpiEntry | None = None
    for entry in entries:
        if (
            best is None
            or entry.value > best.value
            or (entry.value == best.value and entry.period < best.period)
        ):
            best = entry
    return best


def minimum(entries: Iterable[KpiEntry]) -> KpiEntry | None:
    """Return the entry with the smallest value; ties go to the earliest period."""
    best: KpiEntry | None = None
    for entry in entries:
        if (
            best is None
            or entry.value < best.value
            or (entry.value == best.value and entry.period < best.period)
        ):
            best = entry
    return best


def chronological(entries: Iterable[KpiEntry]) -> list[KpiEntry]:
    """Return entries sorted oldest period first, keeping input order on ties."""
    return sorted(entries, key=lambda entry: entry.period)
