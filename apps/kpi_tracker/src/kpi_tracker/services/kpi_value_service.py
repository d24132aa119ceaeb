"""Business service for recording and summarizing KPI values."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from kpi_tracker.application.ports.repositories import (
    KpiFileRepository,
    KpiValueRepository,
)
from kpi_tracker.application.schemas.kpi_values import (
    KpiSummaryReport,
    KpiValueInput,
)
from kpi_tracker.application.services.aggregate_query import (
    average,
    latest,
    maximum,
)
from kpi_tracker.application.services.reminder_service import (
    DEFAULT_MAX_REMINDERS,
    KpiReminder,
    ReminderType,
    calculate_reminders,
)
from kpi_tracker.application.services.statistics_service import (
    KpiStatistics,
    calculate_statistics,
)
from kpi_tracker.application.services.status_service import (
    DEFAULT_WARNING_DAYS,
    KpiStatus,
    calculate_status,
)
from kpi_tracker.domain.entities import Kpi, KpiEntry, KpiFile, KpiValue
from kpi_tracker.domain.errors import (
    DuplicatePeriodError,
    FormatError,
    NotFoundError,
    compose_error_message,
)
from kpi_tracker.domain.period import DEFAULT_LOCALE, Period

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KpiSummary:
    """Aggregates of all values recorded for one KPI."""

    kpi: Kpi
    latest: KpiEntry | None
    average: float | None
    maximum: KpiEntry | None
    statistics: KpiStatistics

    def to_report(self, locale: str = DEFAULT_LOCALE) -> KpiSummaryReport:
        return KpiSummaryReport(
            kpi_name=self.kpi.name,
            total_entries=self.statistics.total_entries,
            latest_period=self.latest.period.format() if self.latest else None,
            latest_period_name=(
                self.latest.period.display_name(locale) if self.latest else None
            ),
            latest_value=self.latest.value.format() if self.latest else None,
            average_value=self.average,
            max_period=self.maximum.period.format() if self.maximum else None,
            max_value=self.maximum.value.format() if self.maximum else None,
            target=self.kpi.target.format() if self.kpi.target else None,
            trend=str(self.statistics.trend.direction),
            stability=self.statistics.stability_rating(),
        )


def _validate_payload(payload: KpiValueInput | Mapping[str, Any]) -> KpiValueInput:
    if isinstance(payload, KpiValueInput):
        return payload
    try:
        return KpiValueInput.model_validate(payload)
    except ValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "error": error["msg"],
            }
            for error in exc.errors()
        ]
        raise FormatError(
            compose_error_message(
                cause="KPI value payload is invalid.",
                action="Correct the highlighted fields and submit again.",
            ),
            details={"errors": errors},
        ) from exc


def _require_reporting_period(kpi: Kpi, period: Period) -> None:
    expected = kpi.interval.period_for(period.first_day())
    if period != expected:
        raise FormatError(
            compose_error_message(
                cause=f"{period} does not start a {kpi.interval} reporting period.",
                action="Use the first month of the reporting period.",
            ),
            details={"period": period.format(), "expected": expected.format()},
        )


class KpiValueService:
    """Records KPI values and builds aggregated summaries."""

    def __init__(
        self,
        *,
        value_repository: KpiValueRepository,
        file_repository: KpiFileRepository | None = None,
        now_provider: Callable[[], datetime] | None = None,
        trend_window: int = 3,
    ) -> None:
        self._value_repository = value_repository
        self._file_repository = file_repository
        self._now_provider = now_provider or (lambda: datetime.now(UTC))
        self._trend_window = trend_window

    def record_value(
        self, kpi: Kpi, payload: KpiValueInput | Mapping[str, Any]
    ) -> KpiValue:
        """Validate and persist one value, rejecting a second value per period."""
        data = _validate_payload(payload)
        _require_reporting_period(kpi, data.period)
        existing = self._value_repository.find_by_kpi_and_period(kpi.id, data.period)
        if existing is not None:
            logger.warning(
                "kpi_value_duplicate_rejected",
                extra={
                    "kpi_id": str(kpi.id),
                    "period": data.period.format(),
                    "existing_value_id": str(existing.id),
                },
            )
            raise DuplicatePeriodError(
                details={"kpi_id": str(kpi.id), "period": data.period.format()}
            )

        value = self._value_repository.add(
            KpiValue(
                kpi_id=kpi.id,
                value=data.value,
                period=data.period,
                comment=data.comment,
                created_at=self._now_provider(),
            )
        )
        logger.info(
            "kpi_value_recorded",
            extra={
                "kpi_id": str(kpi.id),
                "value_id": str(value.id),
                "period": value.period.format(),
            },
        )
        return value

    def update_value(
        self, kpi: Kpi, value_id: UUID, payload: KpiValueInput | Mapping[str, Any]
    ) -> KpiValue:
        """Replace value, period and comment of an existing KPI value."""
        data = _validate_payload(payload)
        _require_reporting_period(kpi, data.period)
        value = self._require_value(value_id)
        if value.kpi_id != kpi.id:
            raise NotFoundError(
                details={"value_id": str(value_id), "kpi_id": str(kpi.id)}
            )

        if data.period != value.period:
            clash = self._value_repository.find_by_kpi_and_period(kpi.id, data.period)
            if clash is not None:
                raise DuplicatePeriodError(
                    details={"kpi_id": str(kpi.id), "period": data.period.format()}
                )

        updated = self._value_repository.update(
            replace(
                value,
                value=data.value,
                period=data.period,
                comment=data.comment,
                updated_at=self._now_provider(),
            )
        )
        logger.info(
            "kpi_value_updated",
            extra={"value_id": str(updated.id), "period": updated.period.format()},
        )
        return updated

    def remove_value(self, value_id: UUID) -> None:
        value = self._require_value(value_id)
        self._value_repository.remove(value.id)
        logger.info(
            "kpi_value_removed",
            extra={"value_id": str(value.id), "kpi_id": str(value.kpi_id)},
        )

    def attach_file(self, value_id: UUID, file: KpiFile) -> KpiFile:
        """Store attachment metadata and link it to a KPI value."""
        if self._file_repository is None:
            msg = "KpiValueService was created without a file repository"
            raise RuntimeError(msg)
        value = self._require_value(value_id)
        if file.kpi_value_id != value.id:
            raise NotFoundError(
                compose_error_message(
                    cause="The file references a different KPI value.",
                    action="Attach the file to the value it was uploaded for.",
                ),
                details={"value_id": str(value.id)},
            )
        stored = self._file_repository.add(file)
        self._value_repository.update(
            replace(value, file_ids=[*value.file_ids, stored.id])
        )
        return stored

    def entries_for(self, kpi: Kpi) -> list[KpiEntry]:
        values = self._value_repository.find_by_kpi(kpi.id)
        return [value.to_entry() for value in values]

    def summarize(self, kpi: Kpi) -> KpiSummary:
        """Compute latest, average, maximum and statistics for a KPI."""
        entries = self.entries_for(kpi)
        summary = KpiSummary(
            kpi=kpi,
            latest=latest(entries),
            average=average(entries) if entries else None,
            maximum=maximum(entries),
            statistics=calculate_statistics(entries, trend_window=self._trend_window),
        )
        logger.info(
            "kpi_summary_built",
            extra={
                "kpi_id": str(kpi.id),
                "total_entries": len(entries),
                "trend": str(summary.statistics.trend.direction),
            },
        )
        return summary

    def status(
        self,
        kpi: Kpi,
        *,
        today: date | None = None,
        warning_days: int = DEFAULT_WARNING_DAYS,
    ) -> KpiStatus:
        """Return the reporting status of a KPI on the given day."""
        return calculate_status(
            kpi.interval,
            self.entries_for(kpi),
            today=today or self._now_provider().date(),
            warning_days=warning_days,
        )

    def reminders(
        self,
        kpis: Iterable[Kpi],
        *,
        today: date | None = None,
        warning_days: int = DEFAULT_WARNING_DAYS,
        max_reminders: int = DEFAULT_MAX_REMINDERS,
    ) -> dict[ReminderType, list[KpiReminder]]:
        """Return the KPIs that need a reminder, grouped by urgency."""
        groups = calculate_reminders(
            [(kpi, self.entries_for(kpi)) for kpi in kpis],
            today=today or self._now_provider().date(),
            warning_days=warning_days,
            max_reminders=max_reminders,
        )
        logger.info(
            "kpi_reminders_calculated",
            extra={str(kind): len(items) for kind, items in groups.items()},
        )
        return groups

    def _require_value(self, value_id: UUID) -> KpiValue:
        value = self._value_repository.get(value_id)
        if value is None:
            raise NotFoundError(details={"value_id": str(value_id)})
        return value
