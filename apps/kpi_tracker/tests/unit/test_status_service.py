from datetime import date

from kpi_tracker.application.services.status_service import (
    KpiStatus,
    aggregate_status,
    calculate_status,
)
from kpi_tracker.domain.decimal_value import DecimalValue
from kpi_tracker.domain.entities import KpiEntry
from kpi_tracker.domain.interval import KpiInterval
from kpi_tracker.domain.period import Period


def _entry(period: str) -> KpiEntry:
    return KpiEntry(period=Period.parse(period), value=DecimalValue.parse("1,00"))


def test_green_when_current_period_is_reported() -> None:
    status = calculate_status(
        KpiInterval.MONTHLY, [_entry("2024-09")], today=date(2024, 9, 29)
    )

    assert status is KpiStatus.GREEN


def test_green_when_due_date_is_far_away() -> None:
    status = calculate_status(
        KpiInterval.MONTHLY, [_entry("2024-08")], today=date(2024, 9, 10)
    )

    assert status is KpiStatus.GREEN


def test_yellow_when_due_date_is_close() -> None:
    status = calculate_status(
        KpiInterval.MONTHLY, [_entry("2024-08")], today=date(2024, 9, 28)
    )

    assert status is KpiStatus.YELLOW


def test_warning_days_are_configurable() -> None:
    status = calculate_status(
        KpiInterval.MONTHLY,
        [_entry("2024-08")],
        today=date(2024, 9, 20),
        warning_days=14,
    )

    assert status is KpiStatus.YELLOW


def test_red_when_previous_period_was_missed() -> None:
    status = calculate_status(
        KpiInterval.MONTHLY, [_entry("2024-06")], today=date(2024, 9, 5)
    )

    assert status is KpiStatus.RED


def test_new_kpi_without_history_is_not_red() -> None:
    status = calculate_status(KpiInterval.MONTHLY, [], today=date(2024, 9, 5))

    assert status is KpiStatus.GREEN


def test_quarterly_status_uses_quarter_periods() -> None:
    status = calculate_status(
        KpiInterval.QUARTERLY, [_entry("2024-07")], today=date(2024, 8, 20)
    )

    assert status is KpiStatus.GREEN


def test_aggregate_status_takes_most_severe() -> None:
    assert aggregate_status([KpiStatus.GREEN, KpiStatus.YELLOW]) is KpiStatus.YELLOW
    assert (
        aggregate_status([KpiStatus.RED, KpiStatus.GREEN, KpiStatus.YELLOW])
        is KpiStatus.RED
    )
    assert aggregate_status([]) is KpiStatus.GREEN
