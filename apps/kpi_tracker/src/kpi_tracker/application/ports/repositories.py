"""Repository ports for KPI persistence."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from kpi_tracker.domain.entities import Kpi, KpiFile, KpiValue
from kpi_tracker.domain.period import Period


class KpiRepository(Protocol):
    """Port for KPI definition lookup."""

    def add(self, kpi: Kpi) -> Kpi:
        """Persist a KPI definition."""

    def get(self, kpi_id: UUID) -> Kpi | None:
        """Return the KPI with the given id."""

    def list_by_owner(self, owner_id: str) -> list[Kpi]:
        """Return the KPIs owned by a user."""


class KpiValueRepository(Protocol):
    """Port for KPI value persistence and lookup."""

    def add(self, value: KpiValue) -> KpiValue:
        """Persist a new value; at most one per (KPI, period)."""

    def update(self, value: KpiValue) -> KpiValue:
        """Persist changes to a stored value, keeping (KPI, period) unique."""

    def remove(self, value_id: UUID) -> None:
        """Delete a stored value."""

    def get(self, value_id: UUID) -> KpiValue | None:
        """Return the value with the given id."""

    def find_by_kpi(self, kpi_id: UUID) -> list[KpiValue]:
        """Return all values of a KPI, newest period first."""

    def find_by_kpi_and_period(self, kpi_id: UUID, period: Period) -> KpiValue | None:
        """Return the value of a KPI for one period."""


class KpiFileRepository(Protocol):
    """Port for attachment metadata persistence."""

    def add(self, file: KpiFile) -> KpiFile:
        """Persist attachment metadata."""

    def find_by_value(self, kpi_value_id: UUID) -> list[KpiFile]:
        """Return attachments of a KPI value."""
