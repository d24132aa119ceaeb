"""In-memory repositories used by the CLI and tests."""

from __future__ import annotations

from uuid import UUID

from kpi_tracker.domain.entities import Kpi, KpiFile, KpiValue
from kpi_tracker.domain.errors import DuplicatePeriodError, NotFoundError
from kpi_tracker.domain.period import Period


class InMemoryKpiRepository:
    """Dict-backed KPI definition storage."""

    def __init__(self) -> None:
        self._kpis: dict[UUID, Kpi] = {}

    def add(self, kpi: Kpi) -> Kpi:
        self._kpis[kpi.id] = kpi
        return kpi

    def get(self, kpi_id: UUID) -> Kpi | None:
        return self._kpis.get(kpi_id)

    def list_by_owner(self, owner_id: str) -> list[Kpi]:
        return [kpi for kpi in self._kpis.values() if kpi.owner_id == owner_id]


class InMemoryKpiValueRepository:
    """Dict-backed KPI value storage with a unique (KPI, period) index."""

    def __init__(self) -> None:
        self._values: dict[UUID, KpiValue] = {}
        self._by_period: dict[tuple[UUID, Period], UUID] = {}

    def add(self, value: KpiValue) -> KpiValue:
        key = (value.kpi_id, value.period)
        if key in self._by_period:
            raise DuplicatePeriodError(
                details={"kpi_id": str(value.kpi_id), "period": value.period.format()}
            )
        self._values[value.id] = value
        self._by_period[key] = value.id
        return value

    def remove(self, value_id: UUID) -> None:
        value = self._values.pop(value_id, None)
        if value is None:
            raise NotFoundError(details={"value_id": str(value_id)})
        del self._by_period[(value.kpi_id, value.period)]

    def update(self, value: KpiValue) -> KpiValue:
        if value.id not in self._values:
            raise NotFoundError(details={"value_id": str(value.id)})
        key = (value.kpi_id, value.period)
        owner = self._by_period.get(key, value.id)
        if owner != value.id:
            raise DuplicatePeriodError(
                details={"kpi_id": str(value.kpi_id), "period": value.period.format()}
            )
        stale = [k for k, value_id in self._by_period.items() if value_id == value.id]
        for old_key in stale:
            del self._by_period[old_key]
        self._values[value.id] = value
        self._by_period[key] = value.id
        return value

    def get(self, value_id: UUID) -> KpiValue | None:
        return self._values.get(value_id)

    def find_by_kpi(self, kpi_id: UUID) -> list[KpiValue]:
        values = [value for value in self._values.values() if value.kpi_id == kpi_id]
        return sorted(values, key=lambda value: value.period, reverse=True)

    def find_by_kpi_and_period(self, kpi_id: UUID, period: Period) -> KpiValue | None:
        value_id = self._by_period.get((kpi_id, period))
        return self._values[value_id] if value_id is not None else None


class InMemoryKpiFileRepository:
    """List-backed attachment metadata storage."""

    def __init__(self) -> None:
        self.files: list[KpiFile] = []

    def add(self, file: KpiFile) -> KpiFile:
        self.files.append(file)
        return file

    def find_by_value(self, kpi_value_id: UUID) -> list[KpiFile]:
        return [file for file in self.files if file.kpi_value_id == kpi_value_id]
