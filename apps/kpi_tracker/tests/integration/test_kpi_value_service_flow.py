from __future__ import annotations

import copy
import logging
from datetime import date

import pytest

from kpi_tracker.application.services.reminder_service import ReminderType
from kpi_tracker.application.services.status_service import KpiStatus
from kpi_tracker.domain.decimal_value import DecimalValue
from kpi_tracker.domain.entities import Kpi, KpiFile, KpiValue
from kpi_tracker.domain.errors import DuplicatePeriodError, FormatError, NotFoundError
from kpi_tracker.domain.interval import KpiInterval
from kpi_tracker.domain.period import Period
from kpi_tracker.infrastructure.repositories.in_memory import (
    InMemoryKpiFileRepository,
    InMemoryKpiValueRepository,
)
from kpi_tracker.services.kpi_value_service import KpiValueService


class CopyingKpiValueRepository(InMemoryKpiValueRepository):
    """Hands out copies, like an adapter that maps rows to new objects."""

    def add(self, value: KpiValue) -> KpiValue:
        return copy.deepcopy(super().add(copy.deepcopy(value)))

    def update(self, value: KpiValue) -> KpiValue:
        return copy.deepcopy(super().update(copy.deepcopy(value)))

    def get(self, value_id):
        return copy.deepcopy(super().get(value_id))

    def find_by_kpi(self, kpi_id):
        return [copy.deepcopy(value) for value in super().find_by_kpi(kpi_id)]

    def find_by_kpi_and_period(self, kpi_id, period):
        return copy.deepcopy(super().find_by_kpi_and_period(kpi_id, period))


def _record_quarter(service: KpiValueService, kpi: Kpi) -> None:
    for period, value in (
        ("2024-07", "100,00"),
        ("2024-08", "200,00"),
        ("2024-09", "300,00"),
    ):
        service.record_value(kpi, {"value": value, "period": period})


def test_record_values_and_summarize(service: KpiValueService, kpi: Kpi) -> None:
    _record_quarter(service, kpi)

    summary = service.summarize(kpi)

    assert summary.average == 200.0
    assert summary.latest is not None
    assert summary.latest.period == Period.parse("2024-09")
    assert summary.maximum is not None
    assert summary.maximum.value == DecimalValue.parse("300,00")
    report = summary.to_report()
    assert report.latest_period_name == "September 2024"
    assert report.max_value == "300,00"
    assert report.target == "5000,00"
    assert report.trend == "rising"


def test_summary_of_kpi_without_values(service: KpiValueService, kpi: Kpi) -> None:
    summary = service.summarize(kpi)

    assert summary.latest is None
    assert summary.average is None
    assert summary.maximum is None
    assert summary.to_report().total_entries == 0


def test_record_value_rejects_duplicate_period(
    service: KpiValueService,
    kpi: Kpi,
    caplog: pytest.LogCaptureFixture,
) -> None:
    service.record_value(kpi, {"value": "1,00", "period": "2024-09"})

    with caplog.at_level(logging.WARNING), pytest.raises(DuplicatePeriodError):
        service.record_value(kpi, {"value": "2,00", "period": "2024-09"})

    assert "kpi_value_duplicate_rejected" in caplog.messages


def test_record_value_rejects_malformed_payload(
    service: KpiValueService, kpi: Kpi
) -> None:
    with pytest.raises(FormatError) as exc_info:
        service.record_value(kpi, {"value": "50.00", "period": "2024-09"})

    assert exc_info.value.details["errors"][0]["field"] == "value"


def test_record_value_logs_event(
    service: KpiValueService,
    kpi: Kpi,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.INFO):
        value = service.record_value(kpi, {"value": "1,00", "period": "2024-09"})

    record = next(r for r in caplog.records if r.getMessage() == "kpi_value_recorded")
    assert record.value_id == str(value.id)
    assert record.period == "2024-09"


def test_update_value_moves_period_and_keeps_uniqueness(
    service: KpiValueService,
    kpi: Kpi,
    value_repository: InMemoryKpiValueRepository,
) -> None:
    _record_quarter(service, kpi)
    july = value_repository.find_by_kpi_and_period(kpi.id, Period.parse("2024-07"))
    assert july is not None

    with pytest.raises(DuplicatePeriodError):
        service.update_value(kpi, july.id, {"value": "1,00", "period": "2024-08"})

    updated = service.update_value(
        kpi, july.id, {"value": "150,50", "period": "2024-06", "comment": "corrected"}
    )

    assert updated.period == Period.parse("2024-06")
    assert updated.value.format() == "150,50"
    assert updated.comment == "corrected"
    assert updated.updated_at is not None
    assert value_repository.find_by_kpi_and_period(
        kpi.id, Period.parse("2024-07")
    ) is None
    assert value_repository.find_by_kpi_and_period(
        kpi.id, Period.parse("2024-06")
    ) is updated


def test_remove_value(service: KpiValueService, kpi: Kpi) -> None:
    value = service.record_value(kpi, {"value": "1,00", "period": "2024-09"})

    service.remove_value(value.id)

    assert service.entries_for(kpi) == []
    with pytest.raises(NotFoundError):
        service.remove_value(value.id)


def test_attach_file_links_metadata(
    service: KpiValueService,
    kpi: Kpi,
    value_repository: InMemoryKpiValueRepository,
) -> None:
    value = service.record_value(kpi, {"value": "1,00", "period": "2024-09"})

    stored = service.attach_file(
        value.id,
        KpiFile(
            kpi_value_id=value.id,
            original_name="evidence.xlsx",
            stored_name="f00d.xlsx",
            mime_type="application/vnd.ms-excel",
            size_bytes=2048,
        ),
    )

    assert value_repository.get(value.id).file_ids == [stored.id]


def test_status_of_kpi(service: KpiValueService, kpi: Kpi) -> None:
    assert service.status(kpi, today=date(2024, 9, 29)) is KpiStatus.YELLOW

    service.record_value(kpi, {"value": "1,00", "period": "2024-09"})

    assert service.status(kpi, today=date(2024, 9, 29)) is KpiStatus.GREEN


@pytest.fixture
def quarterly_kpi() -> Kpi:
    return Kpi(name="Churn", interval=KpiInterval.QUARTERLY, owner_id="anna")


def test_quarterly_kpi_accepts_only_quarter_start_periods(
    service: KpiValueService, quarterly_kpi: Kpi
) -> None:
    service.record_value(quarterly_kpi, {"value": "1,00", "period": "2024-07"})

    with pytest.raises(FormatError) as exc_info:
        service.record_value(quarterly_kpi, {"value": "2,00", "period": "2024-08"})

    assert exc_info.value.details == {"period": "2024-08", "expected": "2024-07"}
    assert len(service.entries_for(quarterly_kpi)) == 1
    assert service.status(quarterly_kpi, today=date(2024, 9, 29)) is KpiStatus.GREEN


def test_quarterly_update_rejects_mid_quarter_period(
    service: KpiValueService, quarterly_kpi: Kpi
) -> None:
    value = service.record_value(
        quarterly_kpi, {"value": "1,00", "period": "2024-07"}
    )

    with pytest.raises(FormatError):
        service.update_value(
            quarterly_kpi, value.id, {"value": "1,00", "period": "2024-09"}
        )

    moved = service.update_value(
        quarterly_kpi, value.id, {"value": "3,00", "period": "2024-04"}
    )
    assert moved.period == Period.parse("2024-04")


def test_update_value_rejects_value_of_other_kpi(
    service: KpiValueService, kpi: Kpi, quarterly_kpi: Kpi
) -> None:
    value = service.record_value(kpi, {"value": "1,00", "period": "2024-07"})

    with pytest.raises(NotFoundError):
        service.update_value(
            quarterly_kpi, value.id, {"value": "2,00", "period": "2024-07"}
        )


def test_updates_reach_repository_that_copies_values(kpi: Kpi) -> None:
    repository = CopyingKpiValueRepository()
    file_repository = InMemoryKpiFileRepository()
    service = KpiValueService(
        value_repository=repository, file_repository=file_repository
    )
    value = service.record_value(kpi, {"value": "1,00", "period": "2024-09"})

    service.update_value(
        kpi, value.id, {"value": "9,99", "period": "2024-09", "comment": "fixed"}
    )
    stored = service.attach_file(
        value.id,
        KpiFile(
            kpi_value_id=value.id,
            original_name="evidence.pdf",
            stored_name="beef.pdf",
            mime_type="application/pdf",
            size_bytes=512,
        ),
    )

    persisted = repository.get(value.id)
    assert persisted is not None
    assert persisted.value == DecimalValue.parse("9,99")
    assert persisted.comment == "fixed"
    assert persisted.updated_at is not None
    assert persisted.file_ids == [stored.id]
    assert service.summarize(kpi).latest.value.format() == "9,99"


def test_reminders_use_recorded_values(
    service: KpiValueService,
    kpi: Kpi,
    quarterly_kpi: Kpi,
    caplog: pytest.LogCaptureFixture,
) -> None:
    service.record_value(kpi, {"value": "1,00", "period": "2024-08"})
    service.record_value(quarterly_kpi, {"value": "1,00", "period": "2024-07"})

    with caplog.at_level(logging.INFO):
        groups = service.reminders([kpi, quarterly_kpi], today=date(2024, 9, 29))

    assert [item.kpi for item in groups[ReminderType.UPCOMING]] == [kpi]
    assert sum(len(items) for items in groups.values()) == 1
    assert "kpi_reminders_calculated" in caplog.messages
