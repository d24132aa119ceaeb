"""Domain exceptions raised by value objects, queries and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def compose_error_message(*, cause: str, action: str) -> str:
    """Build a user-facing error message with cause and corrective action."""

    return f"Cause: {cause} Action: {action}"


@dataclass(slots=True)
class DomainError(Exception):
    """Base exception for predictable domain failures."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


class FormatError(DomainError):
    """Raised when a decimal value or period string is malformed."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="INVALID_FORMAT",
            message=message
            or compose_error_message(
                cause="Input does not match the expected format.",
                action="Use values like 4750,25 and periods like 2024-09.",
            ),
            details=details or {},
        )


class EmptyInputError(DomainError):
    """Raised when an aggregate that needs data receives no entries."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="EMPTY_INPUT",
            message=message
            or compose_error_message(
                cause="No KPI values are available for this calculation.",
                action="Record at least one value for the KPI and try again.",
            ),
            details=details or {},
        )


class NotFoundError(DomainError):
    """Raised when a required KPI value or entry cannot be resolved."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="NOT_FOUND",
            message=message
            or compose_error_message(
                cause="The requested KPI value does not exist.",
                action="Check the KPI id and period and try again.",
            ),
            details=details or {},
        )


class DuplicatePeriodError(DomainError):
    """Raised when a KPI already has a value for the given period."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="DUPLICATE_PERIOD",
            message=message
            or compose_error_message(
                cause="A value is already recorded for this KPI in the period.",
                action="Update the existing value or choose another period.",
            ),
            details=details or {},
        )
