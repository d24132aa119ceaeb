"""KPI entities referencing each other by identifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

from kpi_tracker.domain.decimal_value import DecimalValue
from kpi_tracker.domain.interval import KpiInterval
from kpi_tracker.domain.period import Period


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class KpiEntry:
    """A (period, value) pair consumed by aggregate queries."""

    period: Period
    value: DecimalValue
    value_id: UUID | None = None


@dataclass(slots=True)
class Kpi:
    """Key performance indicator definition owned by one user."""

    name: str
    interval: KpiInterval
    owner_id: str
    target: DecimalValue | None = None
    unit: str | None = None
    description: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)

    def current_period(self, today: date) -> Period:
        """Return the reporting period that is open on the given day."""
        return self.interval.period_for(today)


@dataclass(slots=True)
class KpiValue:
    """A recorded measurement of one KPI in one period."""

    kpi_id: UUID
    value: DecimalValue
    period: Period
    comment: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime | None = None
    file_ids: list[UUID] = field(default_factory=list)

    def to_entry(self) -> KpiEntry:
        return KpiEntry(period=self.period, value=self.value, value_id=self.id)


@dataclass(frozen=True, slots=True)
class KpiFile:
    """Metadata of a file attached to a KPI value."""

    kpi_value_id: UUID
    original_name: str
    stored_name: str
    mime_type: str
    size_bytes: int
    id: UUID = field(default_factory=uuid4)
    uploaded_at: datetime = field(default_factory=_utc_now)
