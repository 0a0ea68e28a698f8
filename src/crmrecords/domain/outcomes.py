"""Per-record results of batch persistence calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from crmrecords.domain.errors import BatchOperationError
from crmrecords.domain.model import Record, RecordType

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class RecordOutcome[TRecord: Record]:
    """What happened to one record of a batch, addressed by its input position."""

    index: int
    record: TRecord
    errors: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        return "; ".join(self.errors)


@dataclass(slots=True)
class BatchResult[TRecord: Record]:
    """Outcome list for one store call: a success list plus indexed failures."""

    operation: str
    outcomes: list[RecordOutcome[TRecord]] = field(default_factory=list["RecordOutcome[TRecord]"])

    def __iter__(self) -> Iterator[RecordOutcome[TRecord]]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> list[TRecord]:
        return [outcome.record for outcome in self.outcomes if outcome.success]

    @property
    def failures(self) -> list[RecordOutcome[TRecord]]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def all_succeeded(self) -> bool:
        return all(outcome.success for outcome in self.outcomes)

    def record_success(self, index: int, record: TRecord) -> None:
        self.outcomes.append(RecordOutcome(index=index, record=record))

    def record_failure(self, index: int, record: TRecord, *errors: str) -> None:
        self.outcomes.append(RecordOutcome(index=index, record=record, errors=errors))

    def raise_for_failures(self) -> BatchResult[TRecord]:
        """Raise :class:`BatchOperationError` if any record failed, else return self."""

        if not self.all_succeeded:
            raise BatchOperationError(self.operation, self)
        return self


@dataclass(frozen=True, slots=True)
class LifecycleReport:
    """Summary of a create-then-delete run."""

    record_type: RecordType
    created_ids: tuple[UUID, ...]
    deleted: int

    @property
    def created(self) -> int:
        return len(self.created_ids)

    @property
    def remaining(self) -> int:
        return self.created - self.deleted
