"""Exception hierarchy shared by the domain, adapters and configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uuid import UUID

    from crmrecords.domain.outcomes import BatchResult


class CrmRecordsError(Exception):
    """Base class for all errors raised by this package."""


class RecordNotFoundError(CrmRecordsError, LookupError):
    """Raised when a lookup by identifier expecting one record finds none."""

    def __init__(self, record_type: str, record_id: UUID | None) -> None:
        super().__init__(f"{record_type} not found: {record_id}")
        self.record_type = record_type
        self.record_id = record_id


class RecordValidationError(CrmRecordsError, ValueError):
    """Raised when the store rejects one or more records."""


class BatchOperationError(RecordValidationError):
    """Raised for an all-or-none batch in which at least one record failed."""

    def __init__(self, operation: str, result: BatchResult[Any]) -> None:
        details = "; ".join(
            f"#{failure.index}: {failure.message}" for failure in result.failures
        )
        super().__init__(
            f"{operation} failed for {len(result.failures)} of {result.total} records ({details})"
        )
        self.operation = operation
        self.result = result
