"""Calendar year-month period used to key KPI values."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from kpi_tracker.domain.errors import FormatError, compose_error_message


class MonthLocale(enum.StrEnum):
    """Languages with month names for period labels."""

    EN = "en"
    DE = "de"


DEFAULT_LOCALE = MonthLocale.EN

MONTH_NAMES: dict[str, tuple[str, ...]] = {
    MonthLocale.EN: (
        "January",
        "February",
        "March",
        "April",
        "May",
        "June",
        "July",
        "August",
        "September",
        "October",
        "November",
        "December",
    ),
    MonthLocale.DE: (
        "Januar",
        "Februar",
        "März",
        "April",
        "Mai",
        "Juni",
        "Juli",
        "August",
        "September",
        "Oktober",
        "November",
        "Dezember",
    ),
}

_PERIOD_PATTERN = re.compile(r"(\d{4})-(\d{2})", re.ASCII)


def _invalid_period(raw: object, cause: str) -> FormatError:
    return FormatError(
        compose_error_message(
            cause=cause,
            action="Use the YYYY-MM format with a month between 01 and 12.",
        ),
        details={"period": str(raw)},
    )


@dataclass(frozen=True, slots=True, order=True)
class Period:
    """Represents a calendar month; ordering is chronological."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.year <= 9999:
            raise _invalid_period(self, "Year must be between 0001 and 9999.")
        if not 1 <= self.month <= 12:
            raise _invalid_period(self, "Month must be between 01 and 12.")

    @classmethod
    def parse(cls, value: str) -> Period:
        """Parse a ``YYYY-MM`` string."""
        if not isinstance(value, str):
            raise _invalid_period(value, "Period must be a string.")
        match = _PERIOD_PATTERN.fullmatch(value)
        if match is None:
            raise _invalid_period(value, "Period is not in YYYY-MM format.")
        year, month = (int(part) for part in match.groups())
        if not 1 <= month <= 12:
            raise _invalid_period(value, "Month must be between 01 and 12.")
        return cls(year=year, month=month)

    @classmethod
    def from_date(cls, value: date) -> Period:
        """Return the period containing the given date."""
        return cls(year=value.year, month=value.month)

    @classmethod
    def current(cls, timezone: tzinfo | None = None) -> Period:
        """Return the period for the current date in the given timezone."""
        return cls.from_date(datetime.now(tz=timezone))

    def format(self) -> str:
        """Return the normalized period key in YYYY-MM format."""
        return f"{self.year:04d}-{self.month:02d}"

    def display_name(self, locale: str = DEFAULT_LOCALE) -> str:
        """Return a human readable label such as ``September 2024``."""
        try:
            names = MONTH_NAMES[locale]
        except KeyError:
            msg = f"Unsupported locale for month names: {locale!r}"
            raise ValueError(msg) from None
        return f"{names[self.month - 1]} {self.year:04d}"

    def first_day(self) -> date:
        """Return the first calendar day of the period."""
        return date(year=self.year, month=self.month, day=1)

    def shift(self, months: int) -> Period:
        """Return the period shifted by a month offset."""
        absolute_month = (self.year * 12 + self.month - 1) + months
        target_year, target_month = divmod(absolute_month, 12)
        if not 1 <= target_year <= 9999:
            msg = "Resulting period is outside years 0001-9999."
            raise ValueError(msg)
        return Period(year=target_year, month=target_month + 1)

    def __str__(self) -> str:
        return self.format()
