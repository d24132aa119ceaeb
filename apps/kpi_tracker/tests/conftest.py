from __future__ import annotations

from datetime import UTC, datetime

import pytest

from kpi_tracker.core.settings import get_settings
from kpi_tracker.domain.decimal_value import DecimalValue
from kpi_tracker.domain.entities import Kpi
from kpi_tracker.domain.interval import KpiInterval
from kpi_tracker.infrastructure.repositories.in_memory import (
    InMemoryKpiFileRepository,
    InMemoryKpiValueRepository,
)
from kpi_tracker.services.kpi_value_service import KpiValueService

FIXED_NOW = datetime(2024, 9, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    get_settings.cache_clear()


@pytest.fixture
def kpi() -> Kpi:
    return Kpi(
        name="Revenue",
        interval=KpiInterval.MONTHLY,
        owner_id="anna",
        target=DecimalValue.parse("5000,00"),
        unit="EUR",
    )


@pytest.fixture
def value_repository() -> InMemoryKpiValueRepository:
    return InMemoryKpiValueRepository()


@pytest.fixture
def file_repository() -> InMemoryKpiFileRepository:
    return InMemoryKpiFileRepository()


@pytest.fixture
def service(
    value_repository: InMemoryKpiValueRepository,
    file_repository: InMemoryKpiFileRepository,
) -> KpiValueService:
    return KpiValueService(
        value_repository=value_repository,
        file_repository=file_repository,
        now_provider=lambda: FIXED_NOW,
    )
