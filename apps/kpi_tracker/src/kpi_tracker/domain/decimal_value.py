"""Fixed-point decimal value with comma separator and two fraction digits."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from kpi_tracker.domain.errors import FormatError, compose_error_message

VALUE_PRECISION = Decimal("0.01")
SCALE = 100
MAX_STORAGE_VALUE = Decimal("99999999.99")

_DISPLAY_PATTERN = re.compile(r"(-?)(\d+),(\d{2})", re.ASCII)
_STORAGE_PATTERN = re.compile(r"-?\d+(?:\.\d{1,2})?", re.ASCII)


def _invalid_value(raw: object, cause: str) -> FormatError:
    return FormatError(
        compose_error_message(
            cause=cause,
            action="Enter the value with a comma and two decimals, e.g. 4750,25.",
        ),
        details={"value": str(raw)},
    )


def _out_of_range(raw: object) -> FormatError:
    return FormatError(
        compose_error_message(
            cause="Decimal value exceeds the DECIMAL(10,2) storage range.",
            action="Keep the value within -99999999,99 and 99999999,99.",
        ),
        details={"value": str(raw)},
    )


@dataclass(frozen=True, slots=True, order=True)
class DecimalValue:
    """Represents a decimal amount as an integer scaled by 100."""

    scaled: int

    def __post_init__(self) -> None:
        if not isinstance(self.scaled, int) or isinstance(self.scaled, bool):
            raise TypeError("DecimalValue scaled amount must be an integer")

    @classmethod
    def parse(cls, value: str) -> DecimalValue:
        """Parse a comma-decimal string such as ``-4750,25``."""
        if not isinstance(value, str):
            raise _invalid_value(value, "Decimal value must be a string.")

        match = _DISPLAY_PATTERN.fullmatch(value)
        if match is None:
            if "," not in value:
                raise _invalid_value(value, "Decimal value has no comma separator.")
            raise _invalid_value(
                value, "Decimal value must be digits with exactly two decimals."
            )

        sign, whole, fraction = match.groups()
        scaled = int(whole) * SCALE + int(fraction)
        return cls(scaled=-scaled if sign else scaled)

    @classmethod
    def from_decimal(cls, amount: Decimal) -> DecimalValue:
        """Create a value from a Decimal rounded HALF_UP to two places."""
        if not amount.is_finite():
            raise _invalid_value(amount, "Decimal value must be a finite number.")
        try:
            quantized = amount.quantize(VALUE_PRECISION, rounding=ROUND_HALF_UP)
        except InvalidOperation as exc:
            raise _invalid_value(amount, "Decimal value is too large.") from exc
        return cls(scaled=int(quantized * SCALE))

    @classmethod
    def from_storage(cls, value: str | Decimal) -> DecimalValue:
        """Create a value from its dot-decimal storage column representation."""
        if isinstance(value, str):
            if _STORAGE_PATTERN.fullmatch(value) is None:
                raise _invalid_value(value, "Stored decimal value is malformed.")
            value = Decimal(value)

        if value.is_finite() and abs(value) > MAX_STORAGE_VALUE:
            raise _out_of_range(value)
        try:
            exact = value.is_finite() and value == value.quantize(VALUE_PRECISION)
        except InvalidOperation:
            exact = False
        if not exact:
            raise _invalid_value(
                value, "Stored decimal value has more than two decimals."
            )
        return cls(scaled=int(value * SCALE))

    @classmethod
    def zero(cls) -> DecimalValue:
        """Return a zero value."""
        return cls(scaled=0)

    def _parts(self) -> tuple[str, int, int]:
        sign = "-" if self.scaled < 0 else ""
        whole, fraction = divmod(abs(self.scaled), SCALE)
        return sign, whole, fraction

    def format(self) -> str:
        """Render the value as ``-?digits,dd``."""
        sign, whole, fraction = self._parts()
        return f"{sign}{whole},{fraction:02d}"

    def to_storage(self) -> str:
        """Render the value as ``-?digits.dd`` for a DECIMAL(10,2) column."""
        if abs(self.scaled) > MAX_STORAGE_VALUE * SCALE:
            raise _out_of_range(self.format())
        sign, whole, fraction = self._parts()
        return f"{sign}{whole}.{fraction:02d}"

    def to_decimal(self) -> Decimal:
        """Return the exact Decimal amount."""
        return Decimal(self.scaled).scaleb(-2)

    def to_float(self) -> float:
        """Return a lossy float view used for statistics."""
        return self.scaled / SCALE

    def __str__(self) -> str:
        return self.format()
